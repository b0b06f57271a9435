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
Commitment codec.

A UTXO is represented on the ledger only by its commitment
C = H(value, salt, owner.x, owner.y). Spending it on the nullifier
variants reveals N = H(C, owner_private_key) instead, which cannot be
linked back to C without the owner's key.
"""

from .crypto import field_hash, random_salt

COMMITMENT_TAG = b"zeto:commitment"
NULLIFIER_TAG = b"zeto:nullifier"

def commit(value, salt, owner_public_key):
    x, y = owner_public_key
    return field_hash(COMMITMENT_TAG, value, salt, x, y)

def nullify(commitment, owner_private_key):
    return field_hash(NULLIFIER_TAG, commitment, owner_private_key)

class UTXO:
    """Pre-image of a commitment, only ever held off-chain."""

    def __init__(self, value, owner_public_key, salt=None):
        if salt is None:
            salt = random_salt()
        self.value = value
        self.salt = salt
        self.owner = tuple(owner_public_key)

    @property
    def hash(self):
        return commit(self.value, self.salt, self.owner)

    def nullifier(self, owner_private_key):
        return nullify(self.hash, owner_private_key)

    def __eq__(self, other):
        return (isinstance(other, UTXO) and self.value == other.value
                and self.salt == other.salt and self.owner == other.owner)

    def __hash__(self):
        return self.hash

    def __repr__(self):
        return f"UTXO(value={self.value}, hash={self.hash:#x})"
