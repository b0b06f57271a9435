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
Sparse Merkle Tree holding minted commitments.

Leaves sit at index `leaf mod 2^depth`. Empty subtrees hash to zero, so
only the nodes on populated paths are stored. The tree remembers a
bounded window of recent roots so that proofs built against a slightly
older root are still accepted.
"""

import logging

from collections import deque

from .crypto import field_hash
from .errors import AlreadyExistsError, StructuralError

logger = logging.getLogger(__name__)

def leaf_hash(leaf):
    return field_hash(b"zeto:smt:leaf", leaf)

def node_hash(left, right):
    if left == 0 and right == 0:
        return 0
    return field_hash(b"zeto:smt:node", left, right)

class MerkleProof:

    def __init__(self, leaf, index, siblings):
        self.leaf = leaf
        self.index = index
        self.siblings = list(siblings)

    def compute_root(self):
        node = leaf_hash(self.leaf)
        index = self.index
        for sibling in self.siblings:
            if index & 1:
                node = node_hash(sibling, node)
            else:
                node = node_hash(node, sibling)
            index >>= 1
        return node

    def __repr__(self):
        return f"MerkleProof(leaf={self.leaf:#x}, index={self.index})"

def verify_proof(root, proof, depth):
    if len(proof.siblings) != depth:
        return False
    if proof.index != proof.leaf % (1 << depth):
        return False
    return proof.compute_root() == root

class SparseMerkleTree:

    def __init__(self, depth=64, history_size=100):
        if depth < 1 or depth > 254:
            raise ValueError(f"Unsupported tree depth {depth}")
        self.depth = depth
        # (level, index) -> hash, level 0 being the leaves
        self.nodes = {}
        self.leaves = {}
        # history_size == 0 keeps every root ever seen
        self.history = deque([0], maxlen=history_size or None)

    @property
    def root(self):
        return self.nodes.get((self.depth, 0), 0)

    def index_of(self, leaf):
        return leaf % (1 << self.depth)

    def contains(self, leaf):
        return leaf in self.leaves

    def __len__(self):
        return len(self.leaves)

    def check_insertable(self, leaves):
        """Raises unless every leaf can be added without clobbering."""
        taken = set()
        for leaf in leaves:
            if leaf == 0:
                raise StructuralError("Zero is not a valid tree leaf")
            if self.contains(leaf):
                raise AlreadyExistsError(leaf)
            index = self.index_of(leaf)
            if (0, index) in self.nodes or index in taken:
                raise StructuralError(
                    f"Tree index collision for leaf {leaf:#x}")
            taken.add(index)

    def _insert(self, leaf):
        index = self.index_of(leaf)
        self.leaves[leaf] = index
        node = leaf_hash(leaf)
        self.nodes[(0, index)] = node

        for level in range(self.depth):
            sibling = self.nodes.get((level, index ^ 1), 0)
            if index & 1:
                node = node_hash(sibling, node)
            else:
                node = node_hash(node, sibling)
            index >>= 1
            self.nodes[(level + 1, index)] = node

    def add_leaves(self, leaves):
        leaves = list(leaves)
        self.check_insertable(leaves)
        for leaf in leaves:
            self._insert(leaf)
        self.history.append(self.root)
        logger.debug(f"SMT: added {len(leaves)} leaves, root={self.root:#x}")
        return self.root

    def add_leaf(self, leaf):
        return self.add_leaves([leaf])

    def is_known_root(self, root):
        return root in self.history

    def generate_proof(self, leaf):
        if not self.contains(leaf):
            raise KeyError(f"Leaf {leaf:#x} is not in the tree")
        index = self.leaves[leaf]
        siblings = []
        node_index = index
        for level in range(self.depth):
            siblings.append(self.nodes.get((level, node_index ^ 1), 0))
            node_index >>= 1
        return MerkleProof(leaf, index, siblings)
