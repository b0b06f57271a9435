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

from zeto.crypto import (BABYJUB, SNARK_FIELD, Keypair, derive_public_key,
                         derive_shared_secret, ff_hash, ff_inv, field_hash,
                         is_private_key)

def test_inverse():
    p = 101
    for a in (1, 2, 57, 100):
        assert a * ff_inv(a, p) % p == 1
    assert 7 * ff_inv(7, SNARK_FIELD) % SNARK_FIELD == 1

def test_generator_on_curve():
    ec = BABYJUB
    assert ec.is_valid(ec.G)
    assert ec.is_valid(ec.IDENTITY)
    assert not ec.is_valid((1, 1))

def test_group_law():
    ec = BABYJUB
    assert ec.add(ec.G, ec.IDENTITY) == ec.G
    two_g = ec.add(ec.G, ec.G)
    assert ec.multiply(2, ec.G) == two_g
    assert ec.multiply(3, ec.G) == ec.add(two_g, ec.G)
    assert ec.is_valid(ec.multiply(12345, ec.G))
    # G generates the prime order subgroup
    assert ec.multiply(ec.order, ec.G) == ec.IDENTITY

def test_keypair():
    keypair = Keypair(1234)
    assert keypair.public_key == derive_public_key(1234)
    assert BABYJUB.is_valid(keypair.public_key)
    assert Keypair(1234).public_key == keypair.public_key

def test_zero_private_key():
    with pytest.raises(ValueError):
        derive_public_key(0)
    with pytest.raises(ValueError):
        derive_public_key(BABYJUB.order)

def test_canonical_private_key():
    assert is_private_key(1)
    assert is_private_key(BABYJUB.order - 1)
    for key in (0, -1, BABYJUB.order, 1234 + BABYJUB.order, True, "1234"):
        assert not is_private_key(key)
    # Aliases share a public key, so only the canonical one is accepted
    assert derive_public_key(1234 + BABYJUB.order) == derive_public_key(1234)

def test_ecdh_symmetry(alice, bob):
    s1 = derive_shared_secret(alice.private_key, bob.public_key)
    s2 = derive_shared_secret(bob.private_key, alice.public_key)
    assert s1 == s2
    assert s1 != derive_shared_secret(alice.private_key, alice.public_key)

def test_ecdh_rejects_invalid_point(alice):
    with pytest.raises(ValueError):
        derive_shared_secret(alice.private_key, (1, 2))

def test_hash():
    h = field_hash(b"tag", 1, 2, 3)
    assert 0 <= h < SNARK_FIELD
    assert h == field_hash(b"tag", 1, 2, 3)
    assert h != field_hash(b"tag", 1, 3, 2)
    assert h != field_hash(b"other", 1, 2, 3)
    assert ff_hash(101, "x", [1, 2]) < 101
    assert field_hash((1, 2)) == field_hash(1, 2)

def test_hash_rejects_unknown_types():
    with pytest.raises(Exception):
        field_hash(1.5)
