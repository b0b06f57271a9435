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

import logging

from .errors import InsufficientFundsError

logger = logging.getLogger(__name__)

class TokenReserve:
    """
    Transparent fungible balances backing deposit and withdraw.

    Deposits move clear value from the depositor into the ledger's
    reserve account, withdrawals move it back out.
    """

    def __init__(self):
        self.balances = {}

    def balance_of(self, account):
        return self.balances.get(account, 0)

    def mint(self, account, amount):
        if amount <= 0:
            raise ValueError("Mint amount must be positive")
        self.balances[account] = self.balance_of(account) + amount

    def check_transfer(self, source, amount):
        balance = self.balance_of(source)
        if amount <= 0:
            raise ValueError("Transfer amount must be positive")
        if balance < amount:
            raise InsufficientFundsError(source, balance, amount)

    def transfer(self, source, destination, amount):
        self.check_transfer(source, amount)
        self.balances[source] -= amount
        self.balances[destination] = self.balance_of(destination) + amount
        logger.debug(f"Reserve: {source} -> {destination}: {amount}")
