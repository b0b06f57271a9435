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
Module: config.py

Loads the ledger configuration from an environment-specific section of a
TOML file, e.g.

    [localnet]
    owner = "deployer"
    batch_size = 10
    max_value_bits = 40
    smt_depth = 64
    root_history_size = 100
    log_level = "DEBUG"

    [localnet.variant]
    nullifiers = true
    encryption = true
    kyc = false
"""

import os
import tomli

from .circuits import SINGLE_SIZE, Variant
from .errors import ConfigError

DEFAULT_CONFIG_PATH = "zeto_config.toml"
DEFAULT_ENV = "localnet"

class ZetoConfig:

    def __init__(self, owner="owner", nullifiers=False, encryption=False,
                 kyc=False, batch_size=10, max_value_bits=40, smt_depth=64,
                 root_history_size=100, log_level="INFO", log_path=None):
        self.owner = owner
        self.variant = Variant(nullifiers, encryption, kyc)
        self.batch_size = batch_size
        self.max_value_bits = max_value_bits
        self.smt_depth = smt_depth
        self.root_history_size = root_history_size
        self.log_level = log_level
        self.log_path = log_path
        self.validate()

    def validate(self):
        if not isinstance(self.owner, str) or not self.owner:
            raise ConfigError("owner must be a non-empty string")
        if not isinstance(self.batch_size, int) or \
                self.batch_size < SINGLE_SIZE:
            raise ConfigError(f"batch_size must be an integer >= {SINGLE_SIZE}")
        # Sums of batch_size values must stay far below the field modulus
        if not isinstance(self.max_value_bits, int) or \
                not 1 <= self.max_value_bits <= 128:
            raise ConfigError("max_value_bits must be between 1 and 128")
        if not isinstance(self.smt_depth, int) or \
                not 1 <= self.smt_depth <= 254:
            raise ConfigError("smt_depth must be between 1 and 254")
        if not isinstance(self.root_history_size, int) or \
                self.root_history_size < 0:
            raise ConfigError("root_history_size must be >= 0")

    @classmethod
    def from_dict(cls, dic):
        dic = dict(dic)
        variant = dic.pop("variant", {})
        unknown = set(variant) - {"nullifiers", "encryption", "kyc"}
        if unknown:
            raise ConfigError(f"Unknown variant keys: {sorted(unknown)}")
        try:
            return cls(**dic, **variant)
        except TypeError as e:
            raise ConfigError(f"Invalid configuration: {e}")

    def __repr__(self):
        return (f"ZetoConfig(variant={self.variant.name}, "
                f"batch_size={self.batch_size})")

def load_toml_config(env=None, config_path=DEFAULT_CONFIG_PATH):
    """
    Loads a ZetoConfig from the `env` section of a TOML file.

    Args:
        env (str): Section to load, defaults to $ZETO_ENV or "localnet".
        config_path (str): Path of the TOML configuration file.

    Raises:
        FileNotFoundError: If the configuration file cannot be found.
        KeyError: If the specified environment section does not exist.
        ConfigError: If a value is missing the expected type or range.
    """
    if env is None:
        env = os.getenv("ZETO_ENV", DEFAULT_ENV)

    if not os.path.isfile(config_path):
        raise FileNotFoundError(f"Configuration file '{config_path}' not found.")

    with open(config_path, "rb") as f:
        try:
            config = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigError(f"Malformed {config_path}: {e}") from e

    if env not in config:
        raise KeyError(f"Environment '{env}' not found in {config_path}")

    return ZetoConfig.from_dict(config[env])
