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

import logging

import pytest

from zeto.config import ZetoConfig, load_toml_config
from zeto.errors import ConfigError
from zeto.log import setup_logger

CONFIG = """
[localnet]
owner = "deployer"
batch_size = 4
smt_depth = 32
root_history_size = 5

[localnet.variant]
nullifiers = true
encryption = true

[testnet]
owner = "bank"
kyc = true
"""

@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "zeto_config.toml"
    path.write_text(CONFIG)
    return str(path)

@pytest.fixture
def zeto_logger():
    logger = logging.getLogger("zeto")
    yield logger
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

def test_defaults():
    config = ZetoConfig()
    assert config.variant.name == "anon"
    assert config.batch_size == 10
    assert config.max_value_bits == 40
    assert config.smt_depth == 64
    assert config.root_history_size == 100

def test_load(config_path, monkeypatch):
    monkeypatch.delenv("ZETO_ENV", raising=False)
    config = load_toml_config(config_path=config_path)
    assert config.owner == "deployer"
    assert config.batch_size == 4
    assert config.root_history_size == 5
    assert config.variant.name == "anon_enc_nullifier"

def test_env_selection(config_path, monkeypatch):
    monkeypatch.setenv("ZETO_ENV", "testnet")
    config = load_toml_config(config_path=config_path)
    assert config.owner == "bank"
    assert config.variant.kyc
    assert load_toml_config("localnet", config_path).owner == "deployer"

def test_missing(config_path, tmp_path):
    with pytest.raises(KeyError):
        load_toml_config("mainnet", config_path)
    with pytest.raises(FileNotFoundError):
        load_toml_config("localnet", str(tmp_path / "missing.toml"))

def test_malformed(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text("[localnet\nowner = ")
    with pytest.raises(ConfigError):
        load_toml_config("localnet", str(path))

@pytest.mark.parametrize("text", [
    "[localnet]\nbatch_size = 1\n",
    "[localnet]\nmax_value_bits = 0\n",
    "[localnet]\nsmt_depth = 300\n",
    "[localnet]\nroot_history_size = -1\n",
    "[localnet]\nowner = \"\"\n",
    "[localnet]\ncolour = \"blue\"\n",
    "[localnet.variant]\nshielded = true\n",
])
def test_invalid_values(tmp_path, text):
    path = tmp_path / "zeto_config.toml"
    path.write_text(text)
    with pytest.raises(ConfigError):
        load_toml_config("localnet", str(path))

def test_logger(tmp_path, zeto_logger, monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    config = ZetoConfig(log_level="DEBUG", log_path=str(tmp_path / "logs"))
    logger = setup_logger(config)
    assert logger is zeto_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    logging.getLogger("zeto.ledger").debug("hello from the ledger")
    for handler in logger.handlers:
        handler.flush()
    text = (tmp_path / "logs" / "zeto.log").read_text()
    assert "hello from the ledger" in text

def test_logger_env_override(zeto_logger, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    logger = setup_logger(ZetoConfig(log_level="DEBUG"))
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1

    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert setup_logger(ZetoConfig()).level == logging.INFO
