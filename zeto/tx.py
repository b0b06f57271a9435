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
Client side transaction builders.

Builders collect UTXO pre-images and keys, pad them to the circuit size,
compute the public values the ledger will see, and produce a proof over
the matching statement. The resulting transaction objects carry exactly
the arguments the ledger call expects, plus the new UTXO pre-images that
the sender has to hand over (or that receivers decrypt).
"""

import logging

from .circuits import (TransferStatement, DepositStatement, LockStatement,
                       WithdrawStatement, circuit_size, deposit_circuit,
                       lock_circuit, locked_transfer_circuit,
                       transfer_circuit, withdraw_circuit)
from .classnamespace import ClassNamespace
from .crypto import derive_public_key
from .encryption import encrypt_outputs
from .prover import MockProver
from .utxo import UTXO

logger = logging.getLogger(__name__)

def _pad(slots, size):
    return list(slots) + [None] * (size - len(slots))

def _hashes(slots):
    return [0 if utxo is None else utxo.hash for utxo in slots]

class TxBuilder:

    def __init__(self, config, tree=None, registry=None, prover=MockProver):
        self.config = config
        self.variant = config.variant
        self.tree = tree
        self.registry = registry
        self.prover = prover

        self.secret = None
        self.inputs = []

    def set_secret(self, private_key):
        self.secret = private_key

    def add_input(self, utxo):
        self.inputs.append(utxo)

    def _size(self, *counts):
        return circuit_size(max(counts), self.config.batch_size)

    def _input_publics(self, in_slots, publics, nullifiers=None):
        """Fills in inputs (and root/enabled) and returns Merkle proofs."""
        if nullifiers is None:
            nullifiers = self.variant.nullifiers
        if not nullifiers:
            publics.inputs = _hashes(in_slots)
            return None

        publics.root = self.tree.root
        publics.inputs = [0 if utxo is None else utxo.nullifier(self.secret)
                          for utxo in in_slots]
        publics.enabled = [0 if utxo is None else 1 for utxo in in_slots]
        return [None if utxo is None else self.tree.generate_proof(utxo.hash)
                for utxo in in_slots]

    def _identity_proofs(self, public_keys):
        proofs = []
        for public_key in public_keys:
            if self.registry.is_registered(public_key):
                proofs.append(self.registry.generate_proof(public_key))
            else:
                # Statement will not hold, the ledger rejects the proof
                logger.warning(f"Identity {public_key} is not registered")
                proofs.append(None)
        return proofs

    def _prove(self, circuit, statement, publics):
        public_inputs = circuit.pack(publics)
        return self.prover.prove(circuit, statement, public_inputs)

class TransferTx:

    def __init__(self, circuit, inputs, outputs, proof, root=None,
                 encryption=None, output_utxos=None):
        self.circuit = circuit
        self.inputs = inputs
        self.outputs = outputs
        self.proof = proof
        self.root = root
        self.encryption = encryption
        self.output_utxos = output_utxos or []

    def submit(self, ledger, caller, data=b""):
        return ledger.transfer(caller, self.inputs, self.outputs, self.proof,
                               root=self.root, encryption=self.encryption,
                               data=data)

class TransferTxBuilder(TxBuilder):
    """
    Builds a transfer of `inputs` owned by `secret` into new outputs.

        builder = TransferTxBuilder(config, tree=ledger.tree)
        builder.set_secret(alice.private_key)
        builder.add_input(utxo)
        builder.add_output(60, bob.public_key)
        builder.add_output(40, alice.public_key)
        tx = builder.build()
    """

    def __init__(self, config, tree=None, registry=None, prover=MockProver):
        super().__init__(config, tree, registry, prover)
        self.outputs = []

    def add_output(self, value, owner_public_key, salt=None):
        utxo = UTXO(value, owner_public_key, salt)
        self.outputs.append(utxo)
        return utxo

    def build(self):
        assert self.secret is not None
        size = self._size(len(self.inputs), len(self.outputs))
        in_slots = _pad(self.inputs, size)
        out_slots = _pad(self.outputs, size)
        circuit = transfer_circuit(self.variant, size, self.config.smt_depth)

        publics = ClassNamespace()
        merkle_proofs = self._input_publics(in_slots, publics)
        publics.outputs = _hashes(out_slots)

        identity_proofs = None
        if self.variant.kyc:
            publics.identities_root = self.registry.identities_root()
            keys = [derive_public_key(self.secret)]
            keys += [utxo.owner for utxo in self.outputs]
            identity_proofs = self._identity_proofs(keys)

        encryption = None
        ephemeral_private_key = None
        if self.variant.encryption:
            encryption, ephemeral_private_key = encrypt_outputs(out_slots)
            publics.ecdh_public_key = encryption.ecdh_public_key
            publics.encrypted_values = encryption.flat(size)
            publics.encryption_nonce = encryption.nonce

        statement = TransferStatement(
            self.secret, in_slots, out_slots, merkle_proofs, identity_proofs,
            ephemeral_private_key, self.config.max_value_bits)
        proof = self._prove(circuit, statement, publics)

        return TransferTx(circuit, publics.inputs, publics.outputs, proof,
                          root=publics.get("root"), encryption=encryption,
                          output_utxos=list(self.outputs))

class DepositTx:

    def __init__(self, circuit, amount, output, proof, output_utxo):
        self.circuit = circuit
        self.amount = amount
        self.output = output
        self.proof = proof
        self.output_utxo = output_utxo

    def submit(self, ledger, caller, data=b""):
        return ledger.deposit(caller, self.amount, self.output, self.proof,
                              data=data)

class DepositTxBuilder:

    def __init__(self, config, prover=MockProver):
        self.config = config
        self.prover = prover

    def build(self, amount, owner_public_key, salt=None):
        utxo = UTXO(amount, owner_public_key, salt)
        circuit = deposit_circuit(self.config.smt_depth)
        publics = ClassNamespace(amount=amount, outputs=[utxo.hash])
        statement = DepositStatement(utxo, self.config.max_value_bits)
        proof = self.prover.prove(circuit, statement, circuit.pack(publics))
        return DepositTx(circuit, amount, utxo.hash, proof, utxo)

class WithdrawTx:

    def __init__(self, circuit, amount, inputs, output, proof, root=None,
                 output_utxo=None):
        self.circuit = circuit
        self.amount = amount
        self.inputs = inputs
        self.output = output
        self.proof = proof
        self.root = root
        self.output_utxo = output_utxo

    def submit(self, ledger, caller, data=b""):
        return ledger.withdraw(caller, self.amount, self.inputs, self.output,
                               self.proof, root=self.root, data=data)

class WithdrawTxBuilder(TxBuilder):
    """Spends inputs, withdraws `amount` and keeps the rest as change."""

    def build(self, amount):
        assert self.secret is not None
        size = self._size(len(self.inputs))
        in_slots = _pad(self.inputs, size)
        circuit = withdraw_circuit(self.variant, size, self.config.smt_depth)

        change = sum(utxo.value for utxo in self.inputs) - amount
        output = None
        if change > 0:
            output = UTXO(change, derive_public_key(self.secret))

        publics = ClassNamespace(amount=amount)
        merkle_proofs = self._input_publics(in_slots, publics)
        publics.outputs = _hashes([output])

        statement = WithdrawStatement(self.secret, in_slots, output,
                                      merkle_proofs,
                                      self.config.max_value_bits)
        proof = self._prove(circuit, statement, publics)
        return WithdrawTx(circuit, amount, publics.inputs, publics.outputs[0],
                          proof, root=publics.get("root"), output_utxo=output)

class LockTx:

    def __init__(self, inputs, outputs, locked_outputs, delegate, proof,
                 root=None, output_utxos=None, locked_utxos=None):
        self.inputs = inputs
        self.outputs = outputs
        self.locked_outputs = locked_outputs
        self.delegate = delegate
        self.proof = proof
        self.root = root
        self.output_utxos = output_utxos or []
        self.locked_utxos = locked_utxos or []

    def submit(self, ledger, caller, data=b""):
        return ledger.lock(caller, self.inputs, self.outputs,
                           self.locked_outputs, self.delegate, self.proof,
                           root=self.root, data=data)

class LockTxBuilder(TxBuilder):
    """Moves own inputs into locked states spendable only via `delegate`."""

    def __init__(self, config, tree=None, registry=None, prover=MockProver):
        super().__init__(config, tree, registry, prover)
        self.outputs = []
        self.locked_outputs = []

    def add_output(self, value, salt=None):
        utxo = UTXO(value, derive_public_key(self.secret), salt)
        self.outputs.append(utxo)
        return utxo

    def add_locked_output(self, value, salt=None):
        utxo = UTXO(value, derive_public_key(self.secret), salt)
        self.locked_outputs.append(utxo)
        return utxo

    def build(self, delegate):
        assert self.secret is not None
        size = self._size(len(self.inputs), len(self.outputs),
                          len(self.locked_outputs))
        in_slots = _pad(self.inputs, size)
        out_slots = _pad(self.outputs, size)
        locked_slots = _pad(self.locked_outputs, size)
        circuit = lock_circuit(self.variant, size, self.config.smt_depth)

        publics = ClassNamespace()
        merkle_proofs = self._input_publics(in_slots, publics)
        publics.outputs = _hashes(out_slots)
        publics.locked_outputs = _hashes(locked_slots)

        statement = LockStatement(self.secret, in_slots, out_slots,
                                  locked_slots, merkle_proofs,
                                  self.config.max_value_bits)
        proof = self._prove(circuit, statement, publics)
        return LockTx(publics.inputs, publics.outputs, publics.locked_outputs,
                      delegate, proof, root=publics.get("root"),
                      output_utxos=list(self.outputs),
                      locked_utxos=list(self.locked_outputs))

class LockedTransferTx:

    def __init__(self, inputs, outputs, proof, output_utxos=None):
        self.inputs = inputs
        self.outputs = outputs
        self.proof = proof
        self.output_utxos = output_utxos or []

    def submit(self, ledger, caller, data=b""):
        return ledger.transfer_locked(caller, self.inputs, self.outputs,
                                      self.proof, data=data)

class LockedTransferTxBuilder(TransferTxBuilder):
    """
    Transfer of locked states. The owner proves, the delegate submits.
    Locked states are always referenced by commitment.
    """

    def build(self):
        assert self.secret is not None
        size = self._size(len(self.inputs), len(self.outputs))
        in_slots = _pad(self.inputs, size)
        out_slots = _pad(self.outputs, size)
        circuit = locked_transfer_circuit(self.variant, size,
                                          self.config.smt_depth)

        publics = ClassNamespace()
        self._input_publics(in_slots, publics, nullifiers=False)
        publics.outputs = _hashes(out_slots)

        identity_proofs = None
        if self.variant.kyc:
            publics.identities_root = self.registry.identities_root()
            keys = [derive_public_key(self.secret)]
            keys += [utxo.owner for utxo in self.outputs]
            identity_proofs = self._identity_proofs(keys)

        statement = TransferStatement(self.secret, in_slots, out_slots,
                                      identity_proofs=identity_proofs,
                                      max_value_bits=self.config.max_value_bits)
        proof = self._prove(circuit, statement, publics)
        return LockedTransferTx(publics.inputs, publics.outputs, proof,
                                output_utxos=list(self.outputs))
