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

from .crypto import field_hash
from .errors import AlreadyExistsError, NotAuthorizedError
from .smt import SparseMerkleTree

logger = logging.getLogger(__name__)

def identity_leaf(public_key):
    x, y = public_key
    return field_hash(b"zeto:identity", x, y)

class IdentityRegistry:
    """
    Allow-list of public keys that may own commitments on KYC variants.

    Registered keys are leaves of a Sparse Merkle Tree whose root is
    bound into every transfer proof. Only the current root is accepted.
    """

    def __init__(self, owner, depth=64):
        self.owner = owner
        self.tree = SparseMerkleTree(depth, history_size=1)

    def register(self, caller, public_key):
        if caller != self.owner:
            raise NotAuthorizedError(caller, "register identities")
        leaf = identity_leaf(public_key)
        if self.tree.contains(leaf):
            raise AlreadyExistsError(leaf)
        self.tree.add_leaf(leaf)
        logger.info(f"Identity registered: {leaf:#x}")
        return leaf

    def is_registered(self, public_key):
        return self.tree.contains(identity_leaf(public_key))

    def identities_root(self):
        return self.tree.root

    def generate_proof(self, public_key):
        return self.tree.generate_proof(identity_leaf(public_key))
