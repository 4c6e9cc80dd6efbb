"""
Balance Calculator (Domain Logic).

Derives net positions from the stored history on every call. There is no
cached or denormalized balance state: a read always reflects the latest
recorded expenses and settlements.
"""

from decimal import Decimal
from typing import Dict

from groupledger.app.domain.ledger.money import ZERO, to_money
from groupledger.app.domain.ledger.store import LedgerStore


class BalanceCalculator:
    """
    Sign convention: positive means the user is owed money, negative means
    the user owes money.
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    async def balance_in_group(self, user_id: str, group_id: int) -> Decimal:
        """
        Net balance of a user inside one group.

        paid expenses - own shares - settlements paid + settlements received.
        Unknown users or groups simply have no history and yield 0.00.
        """
        balance = ZERO

        for expense in await self.store.get_group_expenses(group_id):
            if expense.paid_by == user_id:
                balance += to_money(expense.amount)
            for share in await self.store.get_expense_shares(expense.id):
                if share.user_id == user_id:
                    balance -= to_money(share.amount)

        for settlement in await self.store.get_group_settlements(group_id):
            if settlement.from_user_id == user_id:
                balance -= to_money(settlement.amount)
            if settlement.to_user_id == user_id:
                balance += to_money(settlement.amount)

        return to_money(balance)

    async def total_balance(self, user_id: str) -> Decimal:
        """Sum of the user's balances over every group they belong to."""
        total = ZERO
        for group in await self.store.get_user_groups(user_id):
            total += await self.balance_in_group(user_id, group.id)
        return to_money(total)

    async def group_balances(self, group_id: int) -> Dict[str, Decimal]:
        """Balance of every member, keyed by user id, in join order."""
        balances: Dict[str, Decimal] = {}
        for member in await self.store.get_members(group_id):
            balances[member.user_id] = await self.balance_in_group(member.user_id, group_id)
        return balances
