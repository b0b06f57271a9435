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
Command line tool to inspect circuit layouts and run an end to end
simulation of a Zeto ledger using the mock proof system.
"""

import sys

from argparse import ArgumentParser
from tabulate import tabulate

from .circuits import (SINGLE_SIZE, Variant, lock_circuit, required_circuits,
                       transfer_circuit, withdraw_circuit)
from .config import ZetoConfig, load_toml_config
from .crypto import Keypair
from .encryption import decrypt_output
from .errors import ZetoError
from .ledger import Zeto
from .log import setup_logger
from .prover import mock_verifiers
from .registry import IdentityRegistry
from .reserve import TokenReserve
from .tx import DepositTxBuilder, TransferTxBuilder, WithdrawTxBuilder
from .utxo import UTXO

def eprint(fstr, *args):
    print("error: " + fstr, *args, file=sys.stderr)

def show_layout(circuit):
    rows = []
    offset = 0
    for field, width in circuit.layout():
        rows.append([field, offset, width])
        offset += width
    print(f"{circuit.name}: {circuit.width} public inputs")
    print(tabulate(rows, headers=["Field", "Offset", "Width"],
                   tablefmt="github"))

def layout(args):
    variant = Variant(args.nullifiers, args.encryption, args.kyc)
    size = args.batch_size if args.batch else SINGLE_SIZE
    makers = {
        "transfer": transfer_circuit,
        "withdraw": withdraw_circuit,
        "lock": lock_circuit,
    }
    show_layout(makers[args.kind](variant, size))
    return 0

def build_ledger(config):
    registry = None
    if config.variant.kyc:
        registry = IdentityRegistry(config.owner, config.smt_depth)
    circuits = required_circuits(config.variant, config.batch_size,
                                 config.smt_depth)
    return Zeto(config, mock_verifiers(circuits), registry=registry,
                reserve=TokenReserve())

def run_demo(config):
    """Deposit, mint, transfer (single and batch) and withdraw."""
    ledger = build_ledger(config)
    owner = config.owner
    alice, bob, charlie = Keypair(), Keypair(), Keypair()
    tree, registry = ledger.tree, ledger.registry
    log = []

    def transfer(sender, inputs, outputs):
        builder = TransferTxBuilder(config, tree=tree, registry=registry)
        builder.set_secret(sender.private_key)
        for utxo in inputs:
            builder.add_input(utxo)
        for value, receiver in outputs:
            builder.add_output(value, receiver.public_key)
        tx = builder.build()
        tx.submit(ledger, "relayer")
        log.append(["transfer", tx.circuit.name, tx.circuit.width])
        return tx

    if config.variant.kyc:
        for keypair in (alice, bob, charlie):
            ledger.register(owner, keypair.public_key)

    ledger.reserve.mint("alice", 1000)
    deposit = DepositTxBuilder(config).build(100, alice.public_key)
    deposit.submit(ledger, "alice")
    log.append(["deposit", deposit.circuit.name, deposit.circuit.width])

    minted = UTXO(50, alice.public_key)
    ledger.mint(owner, [minted.hash])
    log.append(["mint", "-", 0])

    tx = transfer(alice, [deposit.output_utxo, minted],
                  [(120, bob), (30, alice)])
    bob_utxo = tx.output_utxos[0]
    if tx.encryption is not None:
        value, _ = decrypt_output(bob.private_key, tx.encryption, 0)
        print(f"bob decrypted an output worth {value}")

    tx = transfer(bob, [bob_utxo],
                  [(40, charlie), (40, alice), (40, bob)])
    charlie_utxo = tx.output_utxos[0]

    builder = WithdrawTxBuilder(config, tree=tree, registry=registry)
    builder.set_secret(charlie.private_key)
    builder.add_input(charlie_utxo)
    withdraw = builder.build(25)
    withdraw.submit(ledger, "charlie")
    log.append(["withdraw", withdraw.circuit.name, withdraw.circuit.width])

    print(tabulate(log, headers=["Operation", "Circuit", "Public inputs"],
                   tablefmt="github"))
    print()
    balances = [[account, ledger.reserve.balance_of(account)]
                for account in ("alice", "charlie", Zeto.RESERVE_ACCOUNT)]
    print(tabulate(balances, headers=["Account", "Reserve balance"],
                   tablefmt="github"))
    return ledger

def demo(args):
    if args.config is not None:
        config = load_toml_config(args.env, args.config)
    else:
        config = ZetoConfig(nullifiers=args.nullifiers,
                            encryption=args.encryption, kyc=args.kyc,
                            batch_size=args.batch_size)
    setup_logger(config)
    run_demo(config)
    return 0

def add_variant_arguments(parser):
    parser.add_argument("--nullifiers", action="store_true",
                        help="Spend through nullifiers and a Merkle root")
    parser.add_argument("--encryption", action="store_true",
                        help="Encrypt output values for the receivers")
    parser.add_argument("--kyc", action="store_true",
                        help="Restrict owners to registered identities")
    parser.add_argument("--batch-size", type=int, default=10,
                        help="Maximum inputs/outputs per transaction")

def main(argv=None):
    parser = ArgumentParser(
        prog="zeto",
        description="Zeto confidential UTXO ledger tooling",
        epilog="Proofs produced by this tool are mock proofs",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    layout_parser = subparsers.add_parser(
        "layout", help="Show the public-input layout of a circuit")
    layout_parser.add_argument("kind", nargs="?", default="transfer",
                               choices=["transfer", "withdraw", "lock"])
    layout_parser.add_argument("--batch", action="store_true",
                               help="Show the batch circuit")
    add_variant_arguments(layout_parser)
    layout_parser.set_defaults(func=layout)

    demo_parser = subparsers.add_parser(
        "demo", help="Run an end to end ledger simulation")
    demo_parser.add_argument("-c", "--config",
                             help="Path to TOML configuration file")
    demo_parser.add_argument("-e", "--env",
                             help="Configuration section to load")
    add_variant_arguments(demo_parser)
    demo_parser.set_defaults(func=demo)

    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except (ZetoError, FileNotFoundError, KeyError) as e:
        eprint(str(e))
        return 1

if __name__ == "__main__":
    sys.exit(main())
