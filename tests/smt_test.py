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

from zeto.errors import AlreadyExistsError, StructuralError
from zeto.smt import SparseMerkleTree, verify_proof

DEPTH = 16

def test_empty_tree():
    tree = SparseMerkleTree(DEPTH)
    assert tree.root == 0
    assert tree.is_known_root(0)
    assert len(tree) == 0

def test_insert_and_prove():
    tree = SparseMerkleTree(DEPTH)
    leaves = [0x1234, 0xabcdef, 0x77777]
    roots = set()
    for leaf in leaves:
        roots.add(tree.add_leaf(leaf))
    assert len(roots) == 3
    assert len(tree) == 3

    for leaf in leaves:
        proof = tree.generate_proof(leaf)
        assert proof.index == leaf % (1 << DEPTH)
        assert verify_proof(tree.root, proof, DEPTH)
        assert not verify_proof(tree.root, proof, DEPTH + 1)

    proof = tree.generate_proof(leaves[0])
    proof.leaf = 0x99
    assert not verify_proof(tree.root, proof, DEPTH)

    with pytest.raises(KeyError):
        tree.generate_proof(0x4242)

def test_root_independent_of_order():
    t1 = SparseMerkleTree(DEPTH)
    t2 = SparseMerkleTree(DEPTH)
    t1.add_leaves([3, 5, 1000])
    for leaf in (1000, 5, 3):
        t2.add_leaf(leaf)
    assert t1.root == t2.root

def test_old_proof_against_old_root():
    tree = SparseMerkleTree(DEPTH)
    tree.add_leaf(10)
    old_root = tree.root
    proof = tree.generate_proof(10)
    tree.add_leaf(11)
    assert verify_proof(old_root, proof, DEPTH)
    assert not verify_proof(tree.root, proof, DEPTH)
    assert tree.is_known_root(old_root)

def test_history_window():
    tree = SparseMerkleTree(DEPTH, history_size=2)
    r1 = tree.add_leaf(1)
    r2 = tree.add_leaf(2)
    assert tree.is_known_root(r1) and tree.is_known_root(r2)
    r3 = tree.add_leaf(3)
    assert not tree.is_known_root(r1)
    assert tree.is_known_root(r2) and tree.is_known_root(r3)

def test_unbounded_history():
    tree = SparseMerkleTree(DEPTH, history_size=0)
    roots = [tree.add_leaf(leaf) for leaf in range(1, 200)]
    assert all(tree.is_known_root(root) for root in roots)

def test_insert_rejections():
    tree = SparseMerkleTree(DEPTH)
    tree.add_leaf(5)
    with pytest.raises(AlreadyExistsError):
        tree.add_leaf(5)
    with pytest.raises(StructuralError):
        tree.add_leaf(0)
    # same index, different leaf
    with pytest.raises(StructuralError):
        tree.add_leaf(5 + (1 << DEPTH))
    with pytest.raises(StructuralError):
        tree.add_leaves([7, 7 + (1 << DEPTH)])
    # nothing was inserted by the failed batch
    assert not tree.contains(7)
    assert len(tree) == 1
