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

import hashlib
import secrets

# BN254 scalar field, which is also the base field of Baby Jubjub
SNARK_FIELD = 21888242871839275222246405745257275088548364400416034343698204186575808495617

def ff_inv(a, p):
    a %= p

    # extended euclidean algorithm
    # ps + at = 1
    t = 0
    new_t = 1
    r = p
    new_r = a

    while new_r != 0:
        quotient = r // new_r
        t, new_t = new_t, t - quotient * new_t
        r, new_r = new_r, r - quotient * new_r

    assert r == 1
    if t < 0:
        t += p

    return t

class EdwardsCurve:
    """Twisted Edwards curve a*x^2 + y^2 = 1 + d*x^2*y^2 in affine coords.

    Points are plain (x, y) tuples and (0, 1) is the neutral element.
    The addition law is complete since d is not a square in the field.
    """

    IDENTITY = (0, 1)

    def __init__(self, p, A, D, order, G):
        self.p = p
        self.A = A
        self.D = D
        self.order = order
        self.G = G
        assert self.is_valid(G)

    def is_valid(self, P):
        x, y = P
        x2 = x * x % self.p
        y2 = y * y % self.p
        lhs = (self.A * x2 + y2) % self.p
        rhs = (1 + self.D * x2 * y2) % self.p
        return lhs == rhs

    def add(self, p1, p2):
        x1, y1 = p1
        x2, y2 = p2

        beta = x1 * y2 % self.p
        gamma = y1 * x2 % self.p
        delta = (y1 - self.A * x1) * (x2 + y2) % self.p
        tau = beta * gamma % self.p
        dtau = self.D * tau % self.p

        x3 = (beta + gamma) * ff_inv(1 + dtau, self.p) % self.p
        y3 = (delta + self.A * beta - gamma) * ff_inv(1 - dtau, self.p) \
            % self.p
        return (x3, y3)

    def multiply(self, m, p):
        bits = f"{m:b}"
        result = self.IDENTITY
        temp = p
        for bit in bits[::-1]:
            if bit == "1":
                result = self.add(result, temp)
            temp = self.add(temp, temp)
        return result

    def random_point(self):
        m = self.random_scalar()
        return self.multiply(m, self.G)

    def random_scalar(self):
        # Zero is never a valid private key
        return secrets.randbelow(self.order - 1) + 1

    def random_base(self):
        return secrets.randbelow(self.p)

def babyjub_curve():
    # Baby Jubjub as used by circomlib, G is the prime order subgroup
    # generator usually called Base8
    p = SNARK_FIELD
    order = 2736030358979909402780800718157159386076813972158567259200215660948447373041
    G = (5299619240641551281634865583518297030282874472190772894086521144482721001553,
         16950150798460657717958625567821834550301663161624707787222815936182638968203)
    return EdwardsCurve(p, 168700, 168696, order, G)

BABYJUB = babyjub_curve()

def _add_to_hasher(hasher, args):
    for arg in args:
        match arg:
            case bool() as arg:
                hasher.update(int(arg).to_bytes(32, byteorder="little"))
            case int() as arg:
                hasher.update(arg.to_bytes(32, byteorder="little"))
            case bytes() as arg:
                hasher.update(arg)
            case str() as arg:
                hasher.update(arg.encode())
            case list() | tuple() as arg:
                _add_to_hasher(hasher, arg)
            case _:
                raise Exception(f"unknown hash arg '{arg}' type: {type(arg)}")

def ff_hash(p, *args):
    hasher = hashlib.sha256()
    _add_to_hasher(hasher, args)
    value = int.from_bytes(hasher.digest(), byteorder="little")
    return value % p

def field_hash(*args):
    return ff_hash(SNARK_FIELD, *args)

def is_private_key(private_key, ec=BABYJUB):
    # Canonical scalars only, k and k + order share a public key
    return (isinstance(private_key, int) and not isinstance(private_key, bool)
            and 0 < private_key < ec.order)

def derive_public_key(private_key, ec=BABYJUB):
    scalar = private_key % ec.order
    if scalar == 0:
        raise ValueError("private key reduces to zero")
    return ec.multiply(scalar, ec.G)

def derive_shared_secret(private_key, public_key, ec=BABYJUB):
    # ECDH, symmetric between (a, b*G) and (b, a*G)
    if not ec.is_valid(public_key):
        raise ValueError("public key is not a curve point")
    return ec.multiply(private_key % ec.order, public_key)

class Keypair:

    def __init__(self, private_key=None, ec=BABYJUB):
        if private_key is None:
            private_key = ec.random_scalar()
        self.private_key = private_key
        self.public_key = derive_public_key(private_key, ec)

    def __repr__(self):
        return f"Keypair(public={self.public_key})"

def random_salt():
    return BABYJUB.random_base()
