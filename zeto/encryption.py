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
Confidentiality encoder.

Each output's (value, salt) is encrypted for its owner under an ECDH
secret shared between a single per-transaction ephemeral key and the
owner's public key. The ciphertext has four field elements: the two
masked plaintexts, a masked zero used as padding check, and an
authentication element binding key, nonce and ciphertext together.
"""

import secrets

from .crypto import SNARK_FIELD, Keypair, derive_shared_secret, field_hash
from .errors import DecryptionError

CIPHERTEXT_LENGTH = 4
NONCE_BITS = 128

def new_encryption_nonce():
    return secrets.randbits(NONCE_BITS)

def output_nonce(nonce, index):
    # Outputs to the same receiver share a secret, so every slot
    # gets its own nonce
    return field_hash(b"zeto:nonce", nonce, index)

def _keystream(secret, nonce, length):
    x, y = secret
    return [field_hash(b"zeto:keystream", x, y, nonce, i)
            for i in range(length)]

def _auth_tag(secret, nonce, masked):
    x, y = secret
    return field_hash(b"zeto:auth", x, y, nonce, masked)

def encrypt(secret, nonce, value, salt):
    stream = _keystream(secret, nonce, CIPHERTEXT_LENGTH - 1)
    masked = [(m + k) % SNARK_FIELD
              for m, k in zip((value, salt, 0), stream)]
    return masked + [_auth_tag(secret, nonce, masked)]

def decrypt(secret, nonce, ciphertext):
    if len(ciphertext) != CIPHERTEXT_LENGTH:
        raise DecryptionError(
            f"ciphertext must have {CIPHERTEXT_LENGTH} elements")
    masked = list(ciphertext[:-1])
    if _auth_tag(secret, nonce, masked) != ciphertext[-1]:
        raise DecryptionError("ciphertext authentication failed")

    stream = _keystream(secret, nonce, CIPHERTEXT_LENGTH - 1)
    value, salt, pad = [(c - k) % SNARK_FIELD
                        for c, k in zip(masked, stream)]
    if pad != 0:
        raise DecryptionError("bad ciphertext padding")
    return value, salt

class EncryptionBundle:
    """Public data the receiver needs to recover its outputs."""

    def __init__(self, ecdh_public_key, encrypted_values, nonce):
        self.ecdh_public_key = tuple(ecdh_public_key)
        # One 4 element ciphertext per real output, in output order
        self.encrypted_values = [list(c) for c in encrypted_values]
        self.nonce = nonce

    def flat(self, size):
        """Ciphertexts zero padded to `size` outputs and flattened."""
        values = []
        for cipher in self.encrypted_values:
            values.extend(cipher)
        padding = size * CIPHERTEXT_LENGTH - len(values)
        return values + [0] * padding

def encrypt_outputs(outputs, nonce=None, ephemeral=None):
    """
    Encrypts every present output for its owner.

    `outputs` holds UTXO objects or None for empty slots. Returns the
    bundle together with the ephemeral private key, which the prover
    needs as a witness.
    """
    if nonce is None:
        nonce = new_encryption_nonce()
    if ephemeral is None:
        ephemeral = Keypair()

    encrypted_values = []
    present = [utxo for utxo in outputs if utxo is not None]
    for i, utxo in enumerate(present):
        secret = derive_shared_secret(ephemeral.private_key, utxo.owner)
        encrypted_values.append(
            encrypt(secret, output_nonce(nonce, i), utxo.value, utxo.salt))

    bundle = EncryptionBundle(ephemeral.public_key, encrypted_values, nonce)
    return bundle, ephemeral.private_key

def decrypt_output(receiver_private_key, bundle, index):
    """Recovers (value, salt) of the output at `index` in the bundle."""
    secret = derive_shared_secret(receiver_private_key,
                                  bundle.ecdh_public_key)
    return decrypt(secret, output_nonce(bundle.nonce, index),
                   bundle.encrypted_values[index])
