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
Circuit layouts and the statements proven over them.

A Circuit fixes the order and width of the public-input vector for one
operation of one protocol variant. The ledger packs the values it sees
on-chain into that vector and the verifier of the matching circuit
checks a proof against it, so the layout is part of the wire contract:
the single (2 slot) and batch circuits have different widths and are
never interchangeable.

Statements hold the private witness and evaluate the predicates of
`constraints` against an unpacked public-input vector.
"""

from .classnamespace import ClassNamespace
from .constraints import (check_encryption, check_hashes, check_identities,
                          check_membership, check_nullifiers, check_ownership,
                          check_range, check_sum, present, slot_values)
from .crypto import derive_public_key
from .encryption import CIPHERTEXT_LENGTH
from .errors import StructuralError

# Smallest circuit size, anything larger goes to the batch circuit
SINGLE_SIZE = 2

class Variant:
    """Protocol flavour, named after the Zeto token it corresponds to."""

    def __init__(self, nullifiers=False, encryption=False, kyc=False):
        self.nullifiers = nullifiers
        self.encryption = encryption
        self.kyc = kyc

    @property
    def name(self):
        name = "anon"
        if self.encryption:
            name += "_enc"
        if self.nullifiers:
            name += "_nullifier"
        if self.kyc:
            name += "_kyc"
        return name

    def __eq__(self, other):
        return (isinstance(other, Variant) and
                (self.nullifiers, self.encryption, self.kyc) ==
                (other.nullifiers, other.encryption, other.kyc))

    def __repr__(self):
        return f"Variant({self.name})"

class Circuit:

    KINDS = ("transfer", "deposit", "withdraw", "lock")

    def __init__(self, kind, variant, size, depth=64):
        if kind not in self.KINDS:
            raise ValueError(f"Unknown circuit kind '{kind}'")
        if kind == "deposit":
            size = 1
        self.kind = kind
        self.variant = variant
        self.size = size
        self.depth = depth

    @property
    def batch(self):
        return self.size > SINGLE_SIZE

    @property
    def name(self):
        if self.kind == "deposit":
            return "deposit"
        if self.kind == "transfer":
            name = self.variant.name
        else:
            name = self.kind
            if self.variant.nullifiers:
                name += "_nullifier"
        if self.batch:
            name += "_batch"
        return name

    def layout(self):
        """Ordered (field, width) pairs making up the public inputs."""
        # Widths follow from the variant flags and the size, e.g. the
        # full variant is 2 + 4n + n + 1 + n + 1 + n + 1 wide
        v, n = self.variant, self.size
        fields = []

        if self.kind == "deposit":
            return [("amount", 1), ("outputs", 1)]

        if self.kind == "withdraw":
            fields.append(("amount", 1))

        if self.kind == "transfer" and v.encryption:
            fields.append(("ecdh_public_key", 2))
            fields.append(("encrypted_values", CIPHERTEXT_LENGTH * n))

        fields.append(("inputs", n))
        if v.nullifiers:
            fields.append(("root", 1))
            fields.append(("enabled", n))

        if self.kind == "transfer" and v.kyc:
            fields.append(("identities_root", 1))

        if self.kind == "withdraw":
            fields.append(("outputs", 1))
        else:
            fields.append(("outputs", n))

        if self.kind == "lock":
            fields.append(("locked_outputs", n))

        if self.kind == "transfer" and v.encryption:
            fields.append(("encryption_nonce", 1))

        return fields

    @property
    def width(self):
        return sum(width for _, width in self.layout())

    def pack(self, publics):
        """Builds the zero padded public-input vector from named values."""
        vector = []
        for field, width in self.layout():
            value = getattr(publics, field, None)
            if width == 1 and field not in ("outputs", "inputs"):
                vector.append(0 if value is None else value)
                continue

            values = list(value or [])
            if len(values) > width:
                raise StructuralError(
                    f"{self.name}: '{field}' has {len(values)} entries, "
                    f"at most {width} allowed")
            vector.extend(values + [0] * (width - len(values)))
        return vector

    def unpack(self, vector):
        if len(vector) != self.width:
            raise ValueError(f"{self.name}: expected {self.width} public "
                             f"inputs, got {len(vector)}")
        publics = ClassNamespace()
        offset = 0
        for field, width in self.layout():
            values = list(vector[offset:offset + width])
            offset += width
            if width == 1 and field not in ("outputs", "inputs"):
                setattr(publics, field, values[0])
            elif field == "ecdh_public_key":
                setattr(publics, field, tuple(values))
            else:
                setattr(publics, field, values)
        return publics

    def __repr__(self):
        return f"Circuit({self.name}, width={self.width})"

def transfer_circuit(variant, size, depth=64):
    return Circuit("transfer", variant, size, depth)

def deposit_circuit(depth=64):
    return Circuit("deposit", Variant(), 1, depth)

def withdraw_circuit(variant, size, depth=64):
    return Circuit("withdraw", variant, size, depth)

def lock_circuit(variant, size, depth=64):
    return Circuit("lock", variant, size, depth)

def locked_transfer_circuit(variant, size, depth=64):
    # Locked states are spent by revealing their commitment, so only the
    # identity check of the variant carries over
    return Circuit("transfer", Variant(kyc=variant.kyc), size, depth)

def circuit_size(count, batch_size):
    if count > batch_size:
        raise StructuralError(
            f"{count} slots requested, batch size is {batch_size}")
    return SINGLE_SIZE if count <= SINGLE_SIZE else batch_size

def required_circuits(variant, batch_size, depth=64):
    """Every circuit a ledger of this variant needs a verifier for."""
    sizes = [SINGLE_SIZE]
    if batch_size > SINGLE_SIZE:
        sizes.append(batch_size)

    circuits = {}
    for circuit in [deposit_circuit(depth)] + [
            make(variant, size, depth)
            for size in sizes
            for make in (transfer_circuit, withdraw_circuit, lock_circuit,
                         locked_transfer_circuit)]:
        circuits.setdefault(circuit.name, circuit)
    return list(circuits.values())

class Statement:
    """Private witness for one circuit kind."""

    kind = None

    def __init__(self, max_value_bits=40):
        self.max_value_bits = max_value_bits

    def verify(self, circuit, publics):
        raise NotImplementedError

    def _check_inputs(self, circuit, publics, private_key, inputs,
                      merkle_proofs):
        if circuit.variant.nullifiers:
            if merkle_proofs is None or len(merkle_proofs) != circuit.size:
                return False
            return (check_nullifiers(private_key, inputs, publics.inputs,
                                     publics.enabled) and
                    check_membership(inputs, merkle_proofs, publics.root,
                                     circuit.depth))
        return check_hashes(inputs, publics.inputs)

class TransferStatement(Statement):
    """
    Knowledge of input and output pre-images such that:

      * every output value is in range and values are conserved,
      * input commitments (or nullifiers and tree membership) and output
        commitments match the pre-images,
      * one private key owns every input,
      * on KYC variants the sender and every receiver are registered,
      * on encryption variants the ciphertexts encrypt each output for
        its owner under the published ephemeral key.
    """

    kind = "transfer"

    def __init__(self, private_key, inputs, outputs, merkle_proofs=None,
                 identity_proofs=None, ephemeral_private_key=None,
                 max_value_bits=40):
        super().__init__(max_value_bits)
        self.private_key = private_key
        self.inputs = list(inputs)
        self.outputs = list(outputs)
        self.merkle_proofs = merkle_proofs
        self.identity_proofs = identity_proofs
        self.ephemeral_private_key = ephemeral_private_key

    def verify(self, circuit, publics):
        if circuit.kind != self.kind:
            return False
        if not len(self.inputs) == len(self.outputs) == circuit.size:
            return False

        checks = [
            check_range(slot_values(self.outputs), self.max_value_bits),
            check_sum(slot_values(self.inputs), slot_values(self.outputs)),
            check_ownership(self.private_key, self.inputs),
            check_hashes(self.outputs, publics.outputs),
        ]
        if not all(checks):
            return False

        if not self._check_inputs(circuit, publics, self.private_key,
                                  self.inputs, self.merkle_proofs):
            return False

        variant = circuit.variant
        if variant.kyc:
            keys = [derive_public_key(self.private_key)]
            keys += [utxo.owner for utxo in present(self.outputs)]
            if not check_identities(keys, self.identity_proofs or [],
                                    publics.identities_root, circuit.depth):
                return False

        if variant.encryption:
            if self.ephemeral_private_key is None:
                return False
            if not check_encryption(self.ephemeral_private_key,
                                    publics.ecdh_public_key, self.outputs,
                                    publics.encrypted_values,
                                    publics.encryption_nonce):
                return False

        return True

class DepositStatement(Statement):
    """The single output commits to exactly the public amount."""

    kind = "deposit"

    def __init__(self, output, max_value_bits=40):
        super().__init__(max_value_bits)
        self.output = output

    def verify(self, circuit, publics):
        if circuit.kind != self.kind:
            return False
        return all([
            check_range([publics.amount], self.max_value_bits),
            check_sum([publics.amount], [self.output.value]),
            check_hashes([self.output], publics.outputs),
        ])

class WithdrawStatement(Statement):
    """Inputs add up to the public amount plus the hidden change."""

    kind = "withdraw"

    def __init__(self, private_key, inputs, output=None, merkle_proofs=None,
                 max_value_bits=40):
        super().__init__(max_value_bits)
        self.private_key = private_key
        self.inputs = list(inputs)
        self.output = output
        self.merkle_proofs = merkle_proofs

    def verify(self, circuit, publics):
        if circuit.kind != self.kind or len(self.inputs) != circuit.size:
            return False

        change = [self.output]
        checks = [
            check_range([publics.amount] + slot_values(change),
                        self.max_value_bits),
            check_sum(slot_values(self.inputs), slot_values(change),
                      publics.amount),
            check_ownership(self.private_key, self.inputs),
            check_hashes(change, publics.outputs),
        ]
        if not all(checks):
            return False
        return self._check_inputs(circuit, publics, self.private_key,
                                  self.inputs, self.merkle_proofs)

class LockStatement(Statement):
    """
    Plain transfer whose outputs are split into free and locked ones.

    Locking never changes ownership: every output belongs to the spender,
    only the right to submit the spend of locked outputs is delegated.
    """

    kind = "lock"

    def __init__(self, private_key, inputs, outputs, locked_outputs,
                 merkle_proofs=None, max_value_bits=40):
        super().__init__(max_value_bits)
        self.private_key = private_key
        self.inputs = list(inputs)
        self.outputs = list(outputs)
        self.locked_outputs = list(locked_outputs)
        self.merkle_proofs = merkle_proofs

    def verify(self, circuit, publics):
        if circuit.kind != self.kind:
            return False
        if not (len(self.inputs) == len(self.outputs) ==
                len(self.locked_outputs) == circuit.size):
            return False

        all_outputs = self.outputs + self.locked_outputs
        checks = [
            check_range(slot_values(all_outputs), self.max_value_bits),
            check_sum(slot_values(self.inputs), slot_values(all_outputs)),
            check_ownership(self.private_key, self.inputs),
            check_ownership(self.private_key, all_outputs),
            check_hashes(self.outputs, publics.outputs),
            check_hashes(self.locked_outputs, publics.locked_outputs),
        ]
        if not all(checks):
            return False
        return self._check_inputs(circuit, publics, self.private_key,
                                  self.inputs, self.merkle_proofs)

# Statement class proven by each circuit kind
STATEMENTS = {cls.kind: cls for cls in (TransferStatement, DepositStatement,
                                        WithdrawStatement, LockStatement)}
