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

from zeto.circuits import (SINGLE_SIZE, Circuit, Variant, circuit_size,
                           deposit_circuit, lock_circuit,
                           locked_transfer_circuit, required_circuits,
                           transfer_circuit, withdraw_circuit)
from zeto.classnamespace import ClassNamespace
from zeto.errors import StructuralError

FULL = Variant(nullifiers=True, encryption=True, kyc=True)

def test_variant_names():
    assert Variant().name == "anon"
    assert Variant(encryption=True).name == "anon_enc"
    assert Variant(nullifiers=True).name == "anon_nullifier"
    assert FULL.name == "anon_enc_nullifier_kyc"
    assert Variant(nullifiers=True) == Variant(nullifiers=True)
    assert Variant(nullifiers=True) != Variant()

def test_circuit_names():
    assert transfer_circuit(FULL, 2).name == "anon_enc_nullifier_kyc"
    assert transfer_circuit(FULL, 10).name == "anon_enc_nullifier_kyc_batch"
    assert withdraw_circuit(Variant(), 2).name == "withdraw"
    assert withdraw_circuit(FULL, 10).name == "withdraw_nullifier_batch"
    assert lock_circuit(FULL, 2).name == "lock_nullifier"
    assert deposit_circuit().name == "deposit"
    assert locked_transfer_circuit(FULL, 2).name == "anon_kyc"

def test_anon_layout():
    circuit = transfer_circuit(Variant(), 2)
    assert circuit.layout() == [("inputs", 2), ("outputs", 2)]
    assert circuit.width == 4
    assert transfer_circuit(Variant(), 10).width == 20

def test_full_layout():
    single = transfer_circuit(FULL, SINGLE_SIZE)
    assert [field for field, _ in single.layout()] == [
        "ecdh_public_key", "encrypted_values", "inputs", "root", "enabled",
        "identities_root", "outputs", "encryption_nonce"]
    assert single.width == 2 + 8 + 2 + 1 + 2 + 1 + 2 + 1
    batch = transfer_circuit(FULL, 10)
    assert batch.width == 2 + 40 + 10 + 1 + 10 + 1 + 10 + 1
    assert single.width != batch.width

def test_other_layouts():
    assert deposit_circuit().layout() == [("amount", 1), ("outputs", 1)]
    withdraw = withdraw_circuit(Variant(nullifiers=True), 2)
    assert withdraw.layout() == [("amount", 1), ("inputs", 2), ("root", 1),
                                 ("enabled", 2), ("outputs", 1)]
    lock = lock_circuit(Variant(), 10)
    assert lock.width == 30

def test_pack_unpack():
    circuit = transfer_circuit(Variant(nullifiers=True), 2)
    publics = ClassNamespace(inputs=[11], root=99, enabled=[1],
                             outputs=[21, 22])
    vector = circuit.pack(publics)
    assert vector == [11, 0, 99, 1, 0, 21, 22]

    unpacked = circuit.unpack(vector)
    assert unpacked.inputs == [11, 0]
    assert unpacked.root == 99
    assert unpacked.enabled == [1, 0]
    assert unpacked.outputs == [21, 22]

    with pytest.raises(ValueError):
        circuit.unpack(vector + [0])

def test_pack_overflow():
    circuit = transfer_circuit(Variant(), 2)
    with pytest.raises(StructuralError):
        circuit.pack(ClassNamespace(inputs=[1, 2, 3], outputs=[4]))

def test_unknown_kind():
    with pytest.raises(ValueError):
        Circuit("burn", Variant(), 2)

def test_circuit_size():
    assert circuit_size(1, 10) == 2
    assert circuit_size(2, 10) == 2
    assert circuit_size(3, 10) == 10
    assert circuit_size(10, 10) == 10
    with pytest.raises(StructuralError):
        circuit_size(11, 10)

def test_required_circuits():
    names = {c.name for c in required_circuits(Variant(nullifiers=True), 10)}
    assert names == {
        "deposit",
        "anon_nullifier", "anon_nullifier_batch",
        "withdraw_nullifier", "withdraw_nullifier_batch",
        "lock_nullifier", "lock_nullifier_batch",
        "anon", "anon_batch",
    }
    # batch size 2 has no separate batch circuit
    names = {c.name for c in required_circuits(Variant(), 2)}
    assert names == {"deposit", "anon", "withdraw", "lock"}
