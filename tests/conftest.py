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

import pytest

from zeto.circuits import required_circuits
from zeto.config import ZetoConfig
from zeto.crypto import Keypair
from zeto.ledger import Zeto
from zeto.prover import mock_verifiers
from zeto.registry import IdentityRegistry
from zeto.reserve import TokenReserve
from zeto.utxo import UTXO

OWNER = "owner"
TEST_DEPTH = 32

def make_config(**kwargs):
    kwargs.setdefault("owner", OWNER)
    kwargs.setdefault("smt_depth", TEST_DEPTH)
    return ZetoConfig(**kwargs)

def make_ledger(config):
    registry = None
    if config.variant.kyc:
        registry = IdentityRegistry(config.owner, config.smt_depth)
    circuits = required_circuits(config.variant, config.batch_size,
                                 config.smt_depth)
    return Zeto(config, mock_verifiers(circuits), registry=registry,
                reserve=TokenReserve())

def mint(ledger, value, keypair):
    utxo = UTXO(value, keypair.public_key)
    ledger.mint(OWNER, [utxo.hash])
    return utxo

@pytest.fixture(scope="session")
def alice():
    return Keypair()

@pytest.fixture(scope="session")
def bob():
    return Keypair()

@pytest.fixture(scope="session")
def charlie():
    return Keypair()

@pytest.fixture
def anon_config():
    return make_config()

@pytest.fixture
def anon_ledger(anon_config):
    return make_ledger(anon_config)

@pytest.fixture
def nullifier_config():
    return make_config(nullifiers=True)

@pytest.fixture
def nullifier_ledger(nullifier_config):
    return make_ledger(nullifier_config)
