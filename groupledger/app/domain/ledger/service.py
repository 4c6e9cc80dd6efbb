"""
Ledger Service.

Facade over the Expense Recorder, Balance Calculator and Debt Minimizer,
all sharing one injected Ledger Store. Writes that touch a group are
serialized per group; reads run freely.
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from groupledger.app.core.exceptions import NotFoundError, ValidationError
from groupledger.app.domain.ledger.balance_calculator import BalanceCalculator
from groupledger.app.domain.ledger.debt_minimizer import DebtMinimizer
from groupledger.app.domain.ledger.expense_recorder import ExpenseRecorder
from groupledger.app.domain.ledger.money import to_money, ZERO
from groupledger.app.domain.ledger.records import NewExpense, NewShare, NewSettlement, Transfer
from groupledger.app.domain.ledger.store import LedgerStore

logger = logging.getLogger("groupledger.ledger")


class GroupLocks:
    """
    One ``asyncio.Lock`` per group id, created on first use.

    Entries are weak: a lock lives only while some caller holds or waits
    on it, so idle groups cost nothing.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def __len__(self):
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, group_id: int):
        lock = self._locks.get(group_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[group_id] = lock
        async with lock:
            yield


class LedgerService:

    def __init__(self, store: LedgerStore, locks: Optional[GroupLocks] = None):
        self.store = store
        self.locks = locks if locks is not None else GroupLocks()
        self.recorder = ExpenseRecorder(store)
        self.calculator = BalanceCalculator(store)
        self.minimizer = DebtMinimizer(self.calculator)

    # Writes

    async def record_expense(self, expense: NewExpense, shares: Sequence[NewShare]):
        async with self.locks.hold(expense.group_id):
            return await self.recorder.record_expense(expense, shares)

    async def delete_expense(self, expense_id: int) -> None:
        """
        Delete an expense and all of its shares.

        Raises:
            NotFoundError: If the expense does not exist
        """
        expense = await self.store.get_expense(expense_id)
        if expense is None:
            raise NotFoundError("Expense", expense_id)

        group_id = expense.group_id
        async with self.locks.hold(group_id):
            if not await self.store.delete_expense_cascade(expense_id):
                raise NotFoundError("Expense", expense_id)

        logger.info("Expense deleted", extra={"expense_id": expense_id, "group_id": group_id})

    async def record_settlement(self, settlement: NewSettlement):
        """
        Record a payment from one member to another.

        Raises:
            ValidationError: Non-positive amount, same payer and payee, non-member
            NotFoundError: Group does not exist
        """
        try:
            amount = to_money(settlement.amount)
        except ValueError as exc:
            raise ValidationError(str(exc), field="amount") from exc
        if amount <= ZERO:
            raise ValidationError("Settlement amount must be positive", field="amount")
        if settlement.from_user_id == settlement.to_user_id:
            raise ValidationError("A user cannot settle with themselves", field="to_user_id")

        if await self.store.get_group(settlement.group_id) is None:
            raise NotFoundError("Group", settlement.group_id)
        for field, user_id in (("from_user_id", settlement.from_user_id),
                               ("to_user_id", settlement.to_user_id)):
            if not await self.store.is_member(user_id, settlement.group_id):
                raise ValidationError(
                    "Settlement party is not a member of this group",
                    field=field,
                    details={"user_id": user_id},
                )

        async with self.locks.hold(settlement.group_id):
            created = await self.store.create_settlement(NewSettlement(
                group_id=settlement.group_id,
                from_user_id=settlement.from_user_id,
                to_user_id=settlement.to_user_id,
                amount=amount,
                notes=settlement.notes,
            ))

        logger.info(
            "Settlement recorded",
            extra={"settlement_id": created.id, "group_id": created.group_id, "amount": str(amount)},
        )
        return created

    # Reads

    async def balance_in_group(self, user_id: str, group_id: int) -> Decimal:
        return await self.calculator.balance_in_group(user_id, group_id)

    async def total_balance(self, user_id: str) -> Decimal:
        return await self.calculator.total_balance(user_id)

    async def group_balances(self, group_id: int) -> Dict[str, Decimal]:
        return await self.calculator.group_balances(group_id)

    async def settle_group(self, group_id: int) -> List[Transfer]:
        return await self.minimizer.settle_group(group_id)
