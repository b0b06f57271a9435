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

from zeto.cli import main

@pytest.fixture(autouse=True)
def reset_logger(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    yield
    logger = logging.getLogger("zeto")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

def test_layout(capsys):
    assert main(["layout", "--nullifiers"]) == 0
    out = capsys.readouterr().out
    assert "anon_nullifier: 7 public inputs" in out
    assert "root" in out and "enabled" in out

def test_layout_batch(capsys):
    assert main(["layout", "withdraw", "--batch", "--batch-size", "4",
                 "--nullifiers"]) == 0
    out = capsys.readouterr().out
    assert "withdraw_nullifier_batch: 11 public inputs" in out

def test_layout_full(capsys):
    assert main(["layout", "--nullifiers", "--encryption", "--kyc"]) == 0
    out = capsys.readouterr().out
    assert "anon_enc_nullifier_kyc: 19 public inputs" in out
    assert "encryption_nonce" in out

def test_demo(capsys):
    assert main(["demo", "--batch-size", "4"]) == 0
    out = capsys.readouterr().out
    assert "anon_batch" in out
    assert "withdraw" in out
    assert "charlie" in out

def test_demo_encrypted_nullifiers(capsys):
    assert main(["demo", "--nullifiers", "--encryption",
                 "--batch-size", "4"]) == 0
    out = capsys.readouterr().out
    assert "bob decrypted an output worth 120" in out
    assert "anon_enc_nullifier_batch" in out

def test_demo_from_config(tmp_path, capsys):
    path = tmp_path / "zeto_config.toml"
    path.write_text("[localnet]\nbatch_size = 3\nsmt_depth = 32\n"
                    "[localnet.variant]\nkyc = true\n")
    assert main(["demo", "-c", str(path), "-e", "localnet"]) == 0
    assert "anon_kyc_batch" in capsys.readouterr().out

def test_demo_missing_config(tmp_path, capsys):
    assert main(["demo", "-c", str(tmp_path / "missing.toml")]) == 1
    assert "error:" in capsys.readouterr().err
