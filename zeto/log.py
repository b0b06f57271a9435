# This file is part of DarkFi (https://dark.fi)
#
# Copyright (C) 2020-2026 Dyne.org foundation
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as
# published by the Free Software Foundation, either version 3 of the
# License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Module: log.py

Logging setup for the zeto package and its command line tool.
"""

import os
import logging

from logging.handlers import RotatingFileHandler

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

def setup_logger(config):
    """
    Configures the `zeto` logger from a ZetoConfig.

    Messages go to the console, and additionally to a rotating
    `zeto.log` inside `config.log_path` when one is configured. The level
    comes from the LOG_LEVEL environment variable when set, otherwise
    from `config.log_level`, falling back to INFO for unknown names.

    Returns:
        logging.Logger: The configured package logger.
    """
    level_name = os.getenv("LOG_LEVEL", config.log_level).upper()
    log_level = getattr(logging, level_name, None)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logger = logging.getLogger("zeto")
    logger.setLevel(log_level)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    logger.addHandler(console_handler)

    if config.log_path:
        log_path = os.path.expanduser(config.log_path)
        if not os.path.exists(log_path):
            try:
                os.makedirs(log_path)
            except OSError as e:
                raise RuntimeError(
                    f"Unable to create log directory at '{log_path}': {e}")
        file_handler = RotatingFileHandler(
            os.path.join(log_path, "zeto.log"),
            maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        logger.addHandler(file_handler)

    return logger
