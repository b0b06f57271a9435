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
Ledger state machine.

Every operation runs in two steps, like the money state transition of
the DAO model: a transition function validates the proposal against the
current state and the proof, returning an update record without touching
anything, and `apply()` then commits the update. A rejected proposal
raises before `apply()` is reached, so no partial state is ever visible.
"""

import logging

from enum import Enum

from .circuits import (circuit_size, deposit_circuit, lock_circuit,
                       locked_transfer_circuit, required_circuits,
                       transfer_circuit, withdraw_circuit)
from .classnamespace import ClassNamespace
from .encryption import CIPHERTEXT_LENGTH
from .errors import (AlreadyExistsError, AlreadySpentError, NotAuthorizedError,
                     ProofInvalidError, StructuralError, UnrecognizedRootError,
                     ZetoError)
from .reserve import TokenReserve
from .smt import SparseMerkleTree

logger = logging.getLogger(__name__)

class UTXOStatus(Enum):
    UNKNOWN = 0
    UNSPENT = 1
    SPENT = 2

class Mintable:

    def mint(self, caller, utxos, data=b""):
        raise NotImplementedError

class Depositable:

    def deposit(self, caller, amount, utxo, proof, data=b""):
        raise NotImplementedError

    def withdraw(self, caller, amount, inputs, output, proof, root=None,
                 data=b""):
        raise NotImplementedError

class Nullifiable:

    def nullifier_spent(self, nullifier):
        raise NotImplementedError

    def is_known_root(self, root):
        raise NotImplementedError

class Registrable:

    def register(self, caller, public_key):
        raise NotImplementedError

    def identities_root(self):
        raise NotImplementedError

class LockCapable:

    def lock(self, caller, inputs, outputs, locked_outputs, delegate, proof,
             root=None, data=b""):
        raise NotImplementedError

    def transfer_locked(self, caller, locked_inputs, outputs, proof,
                        data=b""):
        raise NotImplementedError

    def set_lock_delegate(self, caller, locked_utxos, delegate):
        raise NotImplementedError

def _slots(values, label):
    """Caller supplied array as slots, zero entries becoming None."""
    values = list(values or [])
    for value in values:
        if not isinstance(value, int) or value < 0:
            raise StructuralError(f"Invalid {label} entry: {value!r}")
    while values and values[-1] == 0:
        values.pop()
    return [value or None for value in values]

def _present(slots):
    return [slot for slot in slots if slot is not None]

def _padded(slots, size):
    return [slot or 0 for slot in slots] + [0] * (size - len(slots))

class Zeto(Mintable, Depositable, Nullifiable, Registrable, LockCapable):
    """
    Confidential UTXO token.

    Collaborators are injected: `verifiers` maps circuit names to
    verifiers (see `circuits.required_circuits`), `tree` is the Sparse
    Merkle Tree of commitments used by nullifier variants, `registry`
    the identity registry of KYC variants and `reserve` the transparent
    token backing deposit and withdraw.
    """

    RESERVE_ACCOUNT = "zeto"

    def __init__(self, config, verifiers, tree=None, registry=None,
                 reserve=None):
        self.config = config
        self.variant = config.variant
        self.owner = config.owner
        self.verifiers = dict(verifiers)

        for circuit in required_circuits(self.variant, config.batch_size,
                                         config.smt_depth):
            verifier = self.verifiers.get(circuit.name)
            if verifier is None:
                raise ValueError(f"Missing verifier for '{circuit.name}'")
            if verifier.width != circuit.width:
                raise ValueError(
                    f"Verifier for '{circuit.name}' expects {verifier.width} "
                    f"public inputs, circuit has {circuit.width}")

        if self.variant.nullifiers and tree is None:
            tree = SparseMerkleTree(config.smt_depth,
                                    config.root_history_size)
        if self.variant.kyc and registry is None:
            raise ValueError("KYC variants need an identity registry")

        self.tree = tree
        self.registry = registry
        self.reserve = reserve if reserve is not None else TokenReserve()

        # commitment -> UTXOStatus, for every commitment on UTXO variants
        # and for locked commitments on nullifier variants
        self.utxos = {}
        self.nullifiers = set()
        # locked commitment -> delegate
        self.locked = {}

    ######################################################################
    # Queries
    ######################################################################

    def utxo_status(self, commitment):
        if commitment in self.utxos:
            return self.utxos[commitment]
        if self.tree is not None and self.tree.contains(commitment):
            return UTXOStatus.UNSPENT
        return UTXOStatus.UNKNOWN

    def nullifier_spent(self, nullifier):
        return nullifier in self.nullifiers

    @property
    def root(self):
        if self.tree is None:
            return None
        return self.tree.root

    def is_known_root(self, root):
        return self.tree is not None and self.tree.is_known_root(root)

    def identities_root(self):
        if self.registry is None:
            return None
        return self.registry.identities_root()

    def locked_delegate(self, commitment):
        return self.locked.get(commitment)

    ######################################################################
    # Validation helpers
    ######################################################################

    def _check_caller_is_owner(self, caller, action):
        if caller != self.owner:
            raise NotAuthorizedError(caller, action)

    def _check_unique(self, slots):
        seen = set()
        for value in _present(slots):
            if value in seen:
                raise StructuralError(f"Duplicate entry {value:#x}")
            seen.add(value)

    def _check_spendable(self, inputs):
        for value in _present(inputs):
            if self.variant.nullifiers:
                if self.nullifier_spent(value):
                    raise AlreadySpentError(value)
                continue

            status = self.utxos.get(value, UTXOStatus.UNKNOWN)
            if status == UTXOStatus.SPENT:
                raise AlreadySpentError(value)
            if status == UTXOStatus.UNKNOWN or value in self.locked:
                raise StructuralError(f"Input {value:#x} is not spendable")

    def _check_new_outputs(self, outputs, locked=False):
        outputs = _present(outputs)
        for value in outputs:
            if self.utxo_status(value) != UTXOStatus.UNKNOWN:
                raise AlreadyExistsError(value)
        if self.variant.nullifiers and not locked:
            self.tree.check_insertable(outputs)

    def _check_root(self, root):
        if root is None:
            raise StructuralError("Nullifier variants require a Merkle root")
        if not isinstance(root, int) or isinstance(root, bool) or root < 0:
            raise StructuralError(f"Invalid Merkle root {root!r}")
        if not self.is_known_root(root):
            raise UnrecognizedRootError(root)

    def _size(self, *arrays):
        for slots in arrays:
            if len(_present(slots)) > self.config.batch_size:
                raise StructuralError(
                    f"{len(_present(slots))} entries exceed the batch size "
                    f"of {self.config.batch_size}")
        return circuit_size(max(len(slots) for slots in arrays),
                            self.config.batch_size)

    def _input_publics(self, inputs, size, root):
        publics = ClassNamespace()
        publics.inputs = _padded(inputs, size)
        if self.variant.nullifiers:
            publics.root = root
            publics.enabled = [1 if value else 0 for value in publics.inputs]
        return publics

    def _verify(self, circuit, proof, publics):
        verifier = self.verifiers[circuit.name]
        public_inputs = circuit.pack(publics)
        pa, pb, pc = proof
        if not verifier.verify_proof(pa, pb, pc, public_inputs):
            raise ProofInvalidError(circuit.name)
        logger.debug(f"{circuit.name}: proof verified "
                     f"({len(public_inputs)} public inputs)")

    def _new_update(self, kind, data):
        update = ClassNamespace()
        update.kind = kind
        update.spent = []
        update.nullifiers = []
        update.outputs = []
        update.locked_outputs = []
        update.delegate = None
        update.unlocked = []
        update.reserve = None
        update.encryption = None
        update.data = data
        return update

    def _record_inputs(self, update, inputs):
        if self.variant.nullifiers:
            update.nullifiers = _present(inputs)
        else:
            update.spent = _present(inputs)

    def _run(self, name, transition, *args):
        try:
            update = transition(*args)
        except ZetoError as e:
            logger.warning(f"{name} rejected: {e}")
            raise
        self.apply(update)
        logger.info(f"{name}: spent={len(update.spent)} "
                    f"nullifiers={len(update.nullifiers)} "
                    f"outputs={len(update.outputs)} "
                    f"locked={len(update.locked_outputs)}")
        return update

    ######################################################################
    # State transitions
    ######################################################################

    def apply(self, update):
        if update.reserve is not None:
            source, destination, amount = update.reserve
            self.reserve.transfer(source, destination, amount)

        for commitment in update.spent:
            self.utxos[commitment] = UTXOStatus.SPENT
        for commitment in update.unlocked:
            self.utxos[commitment] = UTXOStatus.SPENT
            del self.locked[commitment]
        self.nullifiers.update(update.nullifiers)

        if self.variant.nullifiers:
            if update.outputs:
                self.tree.add_leaves(update.outputs)
        else:
            for commitment in update.outputs:
                self.utxos[commitment] = UTXOStatus.UNSPENT

        for commitment in update.locked_outputs:
            self.utxos[commitment] = UTXOStatus.UNSPENT
            self.locked[commitment] = update.delegate

    def mint_transition(self, caller, utxos, data):
        self._check_caller_is_owner(caller, "mint")
        utxos = list(utxos)
        if not utxos or 0 in utxos:
            raise StructuralError("Mint needs non-zero commitments")
        slots = _slots(utxos, "utxos")
        self._check_unique(slots)
        self._check_new_outputs(slots)

        update = self._new_update("mint", data)
        update.outputs = _present(slots)
        return update

    def mint(self, caller, utxos, data=b""):
        return self._run("mint", self.mint_transition, caller, utxos, data)

    def transfer_transition(self, caller, inputs, outputs, proof, root,
                            encryption, data):
        inputs = _slots(inputs, "inputs")
        outputs = _slots(outputs, "outputs")
        if not _present(inputs):
            raise StructuralError("Transfer needs at least one input")
        size = self._size(inputs, outputs)
        self._check_unique(inputs + outputs)
        self._check_spendable(inputs)
        self._check_new_outputs(outputs)
        if self.variant.nullifiers:
            self._check_root(root)

        circuit = transfer_circuit(self.variant, size, self.config.smt_depth)
        publics = self._input_publics(inputs, size, root)
        publics.outputs = _padded(outputs, size)

        if self.variant.kyc:
            publics.identities_root = self.identities_root()

        if self.variant.encryption:
            if encryption is None:
                raise StructuralError("Encrypted values are required")
            if len(encryption.encrypted_values) != len(_present(outputs)):
                raise StructuralError(
                    f"{len(encryption.encrypted_values)} ciphertexts for "
                    f"{len(_present(outputs))} outputs")
            for cipher in encryption.encrypted_values:
                if len(cipher) != CIPHERTEXT_LENGTH:
                    raise StructuralError("Malformed ciphertext")
            publics.ecdh_public_key = encryption.ecdh_public_key
            publics.encrypted_values = encryption.flat(size)
            publics.encryption_nonce = encryption.nonce

        self._verify(circuit, proof, publics)

        update = self._new_update("transfer", data)
        self._record_inputs(update, inputs)
        update.outputs = _present(outputs)
        update.encryption = encryption
        return update

    def transfer(self, caller, inputs, outputs, proof, root=None,
                 encryption=None, data=b""):
        """
        Spends `inputs` (commitments, or nullifiers on nullifier variants)
        and creates `outputs`. Zero entries are padding. Nullifier variants
        reference the commitments tree through `root`, encryption variants
        carry the receivers' ciphertexts in `encryption`.
        """
        return self._run("transfer", self.transfer_transition, caller,
                         inputs, outputs, proof, root, encryption, data)

    def deposit_transition(self, caller, amount, utxo, proof, data):
        if not isinstance(amount, int) or amount <= 0:
            raise StructuralError(f"Invalid deposit amount {amount!r}")
        if not isinstance(utxo, int) or utxo <= 0:
            raise StructuralError("Deposit needs a non-zero commitment")
        self._check_new_outputs([utxo])
        self.reserve.check_transfer(caller, amount)

        publics = ClassNamespace(amount=amount, outputs=[utxo])
        self._verify(deposit_circuit(self.config.smt_depth), proof, publics)

        update = self._new_update("deposit", data)
        update.outputs = [utxo]
        update.reserve = (caller, self.RESERVE_ACCOUNT, amount)
        return update

    def deposit(self, caller, amount, utxo, proof, data=b""):
        return self._run("deposit", self.deposit_transition, caller, amount,
                         utxo, proof, data)

    def withdraw_transition(self, caller, amount, inputs, output, proof, root,
                            data):
        if not isinstance(amount, int) or amount <= 0:
            raise StructuralError(f"Invalid withdraw amount {amount!r}")
        inputs = _slots(inputs, "inputs")
        outputs = _slots([output or 0], "output")
        if not _present(inputs):
            raise StructuralError("Withdraw needs at least one input")
        size = self._size(inputs)
        self._check_unique(inputs + outputs)
        self._check_spendable(inputs)
        self._check_new_outputs(outputs)
        if self.variant.nullifiers:
            self._check_root(root)
        self.reserve.check_transfer(self.RESERVE_ACCOUNT, amount)

        circuit = withdraw_circuit(self.variant, size, self.config.smt_depth)
        publics = self._input_publics(inputs, size, root)
        publics.amount = amount
        publics.outputs = _padded(outputs, 1)
        self._verify(circuit, proof, publics)

        update = self._new_update("withdraw", data)
        self._record_inputs(update, inputs)
        update.outputs = _present(outputs)
        update.reserve = (self.RESERVE_ACCOUNT, caller, amount)
        return update

    def withdraw(self, caller, amount, inputs, output, proof, root=None,
                 data=b""):
        """
        Spends `inputs` and pays `amount` out of the reserve to `caller`.
        `output` is the hidden change commitment, zero for no change.
        """
        return self._run("withdraw", self.withdraw_transition, caller,
                         amount, inputs, output, proof, root, data)

    def lock_transition(self, caller, inputs, outputs, locked_outputs,
                        delegate, proof, root, data):
        inputs = _slots(inputs, "inputs")
        outputs = _slots(outputs, "outputs")
        locked_outputs = _slots(locked_outputs, "locked_outputs")
        if not _present(inputs) or not _present(locked_outputs):
            raise StructuralError("Lock needs inputs and locked outputs")
        if not delegate:
            raise StructuralError("Lock needs a delegate")
        size = self._size(inputs, outputs, locked_outputs)
        self._check_unique(inputs + outputs + locked_outputs)
        self._check_spendable(inputs)
        self._check_new_outputs(outputs)
        self._check_new_outputs(locked_outputs, locked=True)
        if self.variant.nullifiers:
            self._check_root(root)

        circuit = lock_circuit(self.variant, size, self.config.smt_depth)
        publics = self._input_publics(inputs, size, root)
        publics.outputs = _padded(outputs, size)
        publics.locked_outputs = _padded(locked_outputs, size)
        self._verify(circuit, proof, publics)

        update = self._new_update("lock", data)
        self._record_inputs(update, inputs)
        update.outputs = _present(outputs)
        update.locked_outputs = _present(locked_outputs)
        update.delegate = delegate
        return update

    def lock(self, caller, inputs, outputs, locked_outputs, delegate, proof,
             root=None, data=b""):
        return self._run("lock", self.lock_transition, caller, inputs,
                         outputs, locked_outputs, delegate, proof, root, data)

    def _check_delegate(self, caller, locked):
        for commitment in _present(locked):
            if commitment not in self.locked:
                if self.utxos.get(commitment) == UTXOStatus.SPENT:
                    raise AlreadySpentError(commitment)
                raise StructuralError(f"{commitment:#x} is not locked")
            if self.locked[commitment] != caller:
                raise NotAuthorizedError(caller, f"spend {commitment:#x}")

    def transfer_locked_transition(self, caller, locked_inputs, outputs,
                                   proof, data):
        inputs = _slots(locked_inputs, "locked_inputs")
        outputs = _slots(outputs, "outputs")
        if not _present(inputs):
            raise StructuralError("Locked transfer needs inputs")
        size = self._size(inputs, outputs)
        self._check_unique(inputs + outputs)
        self._check_delegate(caller, inputs)
        self._check_new_outputs(outputs)

        circuit = locked_transfer_circuit(self.variant, size,
                                          self.config.smt_depth)
        publics = ClassNamespace(inputs=_padded(inputs, size),
                                 outputs=_padded(outputs, size))
        if self.variant.kyc:
            publics.identities_root = self.identities_root()
        self._verify(circuit, proof, publics)

        update = self._new_update("transfer_locked", data)
        update.unlocked = _present(inputs)
        update.outputs = _present(outputs)
        return update

    def transfer_locked(self, caller, locked_inputs, outputs, proof,
                        data=b""):
        return self._run("transfer_locked", self.transfer_locked_transition,
                         caller, locked_inputs, outputs, proof, data)

    def set_lock_delegate(self, caller, locked_utxos, delegate):
        locked_utxos = _slots(locked_utxos, "locked_utxos")
        if not delegate:
            raise StructuralError("Delegate must be set")
        try:
            self._check_delegate(caller, locked_utxos)
        except ZetoError as e:
            logger.warning(f"set_lock_delegate rejected: {e}")
            raise
        for commitment in _present(locked_utxos):
            self.locked[commitment] = delegate
        logger.info(f"Delegate of {len(_present(locked_utxos))} locked "
                    f"states moved from {caller} to {delegate}")

    ######################################################################
    # Identity registry
    ######################################################################

    def register(self, caller, public_key):
        if self.registry is None:
            raise StructuralError(
                f"{self.variant.name} has no identity registry")
        return self.registry.register(caller, public_key)
