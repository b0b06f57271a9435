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

class ZetoError(Exception):
    """Base class of every error raised by the zeto package."""
    pass


class StructuralError(ZetoError):
    """Malformed proposal, rejected before any cryptographic work."""
    pass


class UnrecognizedRootError(ZetoError):
    """Merkle root is neither current nor inside the history window."""
    def __init__(self, root):
        self.root = root
        super().__init__(f"Unrecognized Merkle root {root:#x}")


class ProofInvalidError(ZetoError):
    """The verifier rejected the proof for the assembled public inputs."""
    def __init__(self, circuit):
        self.circuit = circuit
        super().__init__(f"Invalid proof for circuit '{circuit}'")


class AlreadySpentError(ZetoError):
    """Input commitment or nullifier has already been spent."""
    def __init__(self, value):
        self.value = value
        super().__init__(f"Already spent: {value:#x}")


class AlreadyExistsError(ZetoError):
    """Commitment or identity is already known to the ledger."""
    def __init__(self, value):
        self.value = value
        super().__init__(f"Already exists: {value:#x}")


class NotAuthorizedError(ZetoError):
    """Caller is not allowed to perform the operation."""
    def __init__(self, caller, action):
        self.caller = caller
        self.action = action
        super().__init__(f"'{caller}' is not authorized to {action}")


class InsufficientFundsError(ZetoError):
    """Reserve balance is too low for the requested debit."""
    def __init__(self, account, balance, amount):
        self.account = account
        self.balance = balance
        self.amount = amount
        super().__init__(
            f"Insufficient funds for '{account}': {balance} < {amount}")


class DecryptionError(ZetoError):
    """Ciphertext failed to authenticate under the given key and nonce."""
    pass


class ConfigError(ZetoError):
    pass
