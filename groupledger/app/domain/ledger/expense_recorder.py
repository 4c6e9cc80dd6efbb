"""
Expense Recorder (Domain Logic).

Validates an expense with its shares and persists both as one unit.
The share-sum invariant is enforced here, at write time.
"""

import logging
from decimal import Decimal, ROUND_DOWN
from typing import List, Sequence

from groupledger.app.core.exceptions import NotFoundError, ShareMismatchError, ValidationError
from groupledger.app.domain.ledger.money import CENT, MoneyLike, sum_money, to_money
from groupledger.app.domain.ledger.records import NewExpense, NewShare
from groupledger.app.domain.ledger.store import LedgerStore

logger = logging.getLogger("groupledger.ledger.expenses")


def split_equally(amount: MoneyLike, user_ids: Sequence[str]) -> List[NewShare]:
    """
    Split an amount into equal shares that add up exactly.

    Leftover cents go one each to the first users, so 10.00 over three
    users gives 3.34, 3.33, 3.33.
    """
    if not user_ids:
        raise ValidationError("Select at least one person to split with", field="split_with")
    total = to_money(amount)
    base = (total / len(user_ids)).quantize(CENT, rounding=ROUND_DOWN)
    leftover_cents = int((total - base * len(user_ids)) / CENT)
    return [
        NewShare(user_id=user_id, amount=base + (CENT if index < leftover_cents else 0))
        for index, user_id in enumerate(user_ids)
    ]


def check_share_sum(amount: MoneyLike, shares: Sequence[NewShare]) -> Decimal:
    """
    Verify that the shares sum to the expense amount.

    Returns:
        The rounded total of the shares

    Raises:
        ShareMismatchError: If the rounded totals differ
    """
    expected = to_money(amount)
    actual = sum_money(s.amount for s in shares)
    if actual != expected:
        raise ShareMismatchError(expected=expected, actual=actual)
    return actual


class ExpenseRecorder:

    def __init__(self, store: LedgerStore):
        self.store = store

    async def record_expense(self, expense: NewExpense, shares: Sequence[NewShare]):
        """
        Validate and persist an expense together with its shares.

        Flow:
        1. Validate amount, group and share list
        2. Validate payer and share users
        3. Enforce the share-sum invariant
        4. Persist expense + shares (all-or-nothing)

        Raises:
            ValidationError: Malformed input
            ShareMismatchError: Shares do not sum to the amount
            NotFoundError: Group does not exist
        """
        amount = self._parse_amount(expense.amount, "amount")
        if amount <= 0:
            raise ValidationError("Expense amount must be positive", field="amount")
        group = await self.store.get_group(expense.group_id)
        if group is None:
            raise NotFoundError("Group", expense.group_id)
        if not shares:
            raise ValidationError("An expense needs at least one share", field="shares")

        if not await self.store.is_member(expense.paid_by, expense.group_id):
            raise ValidationError(
                "Payer is not a member of this group",
                field="paid_by",
                details={"user_id": expense.paid_by},
            )

        normalized = []
        seen = set()
        for share in shares:
            share_amount = self._parse_amount(share.amount, "shares")
            if share_amount < 0:
                raise ValidationError(
                    "Share amounts cannot be negative",
                    field="shares",
                    details={"user_id": share.user_id},
                )
            if share.user_id in seen:
                raise ValidationError(
                    "A user can only have one share per expense",
                    field="shares",
                    details={"user_id": share.user_id},
                )
            seen.add(share.user_id)
            if not await self.store.is_member(share.user_id, expense.group_id):
                raise ValidationError(
                    "Share user is not a member of this group",
                    field="shares",
                    details={"user_id": share.user_id},
                )
            normalized.append(NewShare(user_id=share.user_id, amount=share_amount))

        try:
            check_share_sum(amount, normalized)
        except ShareMismatchError as exc:
            logger.warning(
                "Expense rejected: share mismatch",
                extra={"group_id": expense.group_id, "expected": str(exc.expected), "actual": str(exc.actual)},
            )
            raise

        to_persist = NewExpense(
            group_id=expense.group_id,
            title=expense.title,
            amount=amount,
            paid_by=expense.paid_by,
            created_by=expense.created_by,
            split_type=expense.split_type,
        )
        created = await self.store.create_expense_with_shares(to_persist, normalized)

        logger.info(
            "Expense recorded",
            extra={"expense_id": created.id, "group_id": created.group_id, "amount": str(amount)},
        )
        return created

    @staticmethod
    def _parse_amount(value: MoneyLike, field: str) -> Decimal:
        try:
            return to_money(value)
        except ValueError as exc:
            raise ValidationError(str(exc), field=field) from exc
