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
Zeto: confidential UTXO tokens on a commitment/nullifier model.
"""

from .circuits import Circuit, Variant, required_circuits
from .config import ZetoConfig, load_toml_config
from .crypto import Keypair
from .errors import (AlreadyExistsError, AlreadySpentError, ConfigError,
                     DecryptionError, InsufficientFundsError,
                     NotAuthorizedError, ProofInvalidError, StructuralError,
                     UnrecognizedRootError, ZetoError)
from .ledger import UTXOStatus, Zeto
from .prover import MockProver, MockVerifier, Proof, Verifier, mock_verifiers
from .registry import IdentityRegistry
from .reserve import TokenReserve
from .smt import SparseMerkleTree
from .utxo import UTXO, commit, nullify

__version__ = "0.1.0"
