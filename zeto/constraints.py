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
Statement predicates.

Each function re-expresses one family of circuit constraints as a plain
boolean check over witness values (UTXO pre-images, keys, Merkle paths)
and public values. Slots holding None are padding and are excluded from
every per-slot check except the requirement that their public value is
zero.
"""

from .crypto import derive_public_key, derive_shared_secret, is_private_key
from .encryption import CIPHERTEXT_LENGTH, encrypt, output_nonce
from .registry import identity_leaf
from .smt import verify_proof
from .utxo import commit, nullify

def present(slots):
    return [slot for slot in slots if slot is not None]

def slot_values(slots):
    return [utxo.value for utxo in present(slots)]

def check_range(values, bits):
    bound = 1 << bits
    return all(0 <= value < bound for value in values)

def check_sum(input_values, output_values, public_amount=0):
    # Plain integers, range checks keep every sum far below the modulus
    return sum(input_values) == sum(output_values) + public_amount

def check_hashes(slots, commitments):
    if len(slots) != len(commitments):
        return False
    for utxo, commitment in zip(slots, commitments):
        if utxo is None:
            if commitment != 0:
                return False
        elif commit(utxo.value, utxo.salt, utxo.owner) != commitment:
            return False
    return True

def check_ownership(private_key, slots):
    if not is_private_key(private_key):
        return False
    try:
        public_key = derive_public_key(private_key)
    except ValueError:
        return False
    return all(utxo.owner == public_key for utxo in present(slots))

def check_nullifiers(private_key, slots, nullifiers, enabled):
    if not is_private_key(private_key):
        return False
    if not len(slots) == len(nullifiers) == len(enabled):
        return False
    for utxo, nullifier, flag in zip(slots, nullifiers, enabled):
        if utxo is None:
            if nullifier != 0 or flag != 0:
                return False
            continue
        if flag != 1:
            return False
        if nullify(utxo.hash, private_key) != nullifier:
            return False
    return True

def check_membership(slots, proofs, root, depth):
    if len(slots) != len(proofs):
        return False
    for utxo, proof in zip(slots, proofs):
        if utxo is None:
            continue
        if proof is None or proof.leaf != utxo.hash:
            return False
        if not verify_proof(root, proof, depth):
            return False
    return True

def check_identities(public_keys, proofs, identities_root, depth):
    if len(public_keys) != len(proofs):
        return False
    for public_key, proof in zip(public_keys, proofs):
        if proof is None or proof.leaf != identity_leaf(public_key):
            return False
        if not verify_proof(identities_root, proof, depth):
            return False
    return True

def check_encryption(ephemeral_private_key, ecdh_public_key, slots,
                     encrypted_values, nonce):
    try:
        if derive_public_key(ephemeral_private_key) != tuple(ecdh_public_key):
            return False
    except ValueError:
        return False
    if len(encrypted_values) != len(slots) * CIPHERTEXT_LENGTH:
        return False

    chunks = [encrypted_values[i:i + CIPHERTEXT_LENGTH]
              for i in range(0, len(encrypted_values), CIPHERTEXT_LENGTH)]
    real = present(slots)
    for i, chunk in enumerate(chunks):
        if i >= len(real):
            if any(chunk):
                return False
            continue
        utxo = real[i]
        try:
            secret = derive_shared_secret(ephemeral_private_key, utxo.owner)
        except ValueError:
            return False
        expected = encrypt(secret, output_nonce(nonce, i), utxo.value,
                           utxo.salt)
        if expected != list(chunk):
            return False
    return True
