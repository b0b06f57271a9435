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
Proof bundle and verifier interface.

The ledger only ever talks to a Verifier through
`verify_proof(pa, pb, pc, public_inputs)`, the same shape as a Groth16
verifier contract. The mock proof system implemented here is what the
package ships for simulation and testing: a mock proof carries its
witness in clear and the mock verifier re-runs the statement. It proves
nothing in zero knowledge and carries no cryptographic soundness.
Acceptance rests only on re-running the circuit's own statement class
over the carried witness, so it is for simulation and tests only.
"""

import logging

from .circuits import STATEMENTS
from .crypto import field_hash

logger = logging.getLogger(__name__)

class Proof:
    """(pA, pB, pC) as submitted with a transaction."""

    def __init__(self, pa, pb, pc):
        self.pa = pa
        self.pb = pb
        self.pc = pc

    def __iter__(self):
        return iter((self.pa, self.pb, self.pc))

    def __repr__(self):
        return f"Proof(pa={self.pa!r})"

class Verifier:
    """Verifies proofs for one fixed circuit."""

    def __init__(self, circuit):
        self.circuit = circuit

    @property
    def width(self):
        return self.circuit.width

    def verify_proof(self, pa, pb, pc, public_inputs):
        raise NotImplementedError

def public_inputs_binding(circuit, public_inputs):
    return field_hash(b"zeto:mock-proof", circuit.name, public_inputs)

class MockProver:
    """Wraps a statement into a proof bound to its public inputs."""

    @staticmethod
    def prove(circuit, statement, public_inputs):
        if len(public_inputs) != circuit.width:
            raise ValueError(f"{circuit.name}: expected {circuit.width} "
                             f"public inputs, got {len(public_inputs)}")
        return Proof(circuit.name, statement,
                     public_inputs_binding(circuit, public_inputs))

class MockVerifier(Verifier):

    def verify_proof(self, pa, pb, pc, public_inputs):
        circuit = self.circuit
        if len(public_inputs) != circuit.width:
            logger.debug(f"{circuit.name}: public input width "
                         f"{len(public_inputs)} != {circuit.width}")
            return False
        if pa != circuit.name:
            logger.debug(f"{circuit.name}: proof made for circuit '{pa}'")
            return False
        if pc != public_inputs_binding(circuit, public_inputs):
            logger.debug(f"{circuit.name}: proof bound to other inputs")
            return False
        if type(pb) is not STATEMENTS[circuit.kind]:
            logger.debug(f"{circuit.name}: witness of type "
                         f"{type(pb).__name__} rejected")
            return False

        # Class level verify, an instance cannot override it
        publics = circuit.unpack(public_inputs)
        return STATEMENTS[circuit.kind].verify(pb, circuit, publics)

def mock_verifiers(circuits):
    return {circuit.name: MockVerifier(circuit) for circuit in circuits}
