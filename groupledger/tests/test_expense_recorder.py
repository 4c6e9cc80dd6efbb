"""
Expense Recorder Tests.

Covers the share-sum invariant and input validation against both
Ledger Store implementations.
"""

from decimal import Decimal

import pytest

from groupledger.app.core.exceptions import NotFoundError, ShareMismatchError, ValidationError
from groupledger.app.domain.ledger.expense_recorder import check_share_sum, split_equally
from groupledger.app.domain.ledger.records import NewExpense, NewShare
from groupledger.app.models.enums import SplitType


def expense(group_id, amount, paid_by="u1", split_type=SplitType.CUSTOM):
    return NewExpense(
        group_id=group_id,
        title="Dinner",
        amount=Decimal(amount),
        paid_by=paid_by,
        created_by=paid_by,
        split_type=split_type,
    )


def shares(*pairs):
    return [NewShare(user_id=u, amount=Decimal(a)) for u, a in pairs]


# split_equally

def test_split_equally_hands_leftover_cents_to_first_members():
    result = split_equally("10.00", ["u1", "u2", "u3"])
    assert [s.amount for s in result] == [Decimal("3.34"), Decimal("3.33"), Decimal("3.33")]


def test_split_equally_even_amount():
    result = split_equally(Decimal("30.00"), ["u1", "u2", "u3"])
    assert [s.amount for s in result] == [Decimal("10.00")] * 3


@pytest.mark.parametrize("amount,count", [("0.01", 3), ("100.00", 7), ("19.99", 4), ("1234.56", 9)])
def test_split_equally_always_sums_to_amount(amount, count):
    result = split_equally(amount, [f"u{i}" for i in range(count)])
    assert check_share_sum(amount, result) == Decimal(amount)


def test_split_equally_needs_members():
    with pytest.raises(ValidationError):
        split_equally("10.00", [])


# check_share_sum

def test_check_share_sum_rounds_each_share():
    assert check_share_sum("10.00", shares(("u1", "3.335"), ("u2", "3.33"), ("u3", "3.33"))) == Decimal("10.00")


def test_check_share_sum_reports_both_totals():
    with pytest.raises(ShareMismatchError) as exc_info:
        check_share_sum("10.00", shares(("u1", "3.33"), ("u2", "3.33"), ("u3", "3.33")))

    assert exc_info.value.expected == Decimal("10.00")
    assert exc_info.value.actual == Decimal("9.99")
    assert exc_info.value.details == {"expected": "10.00", "actual": "9.99"}
    assert exc_info.value.error_code == "ERR_SHARE_MISMATCH"


# record_expense

@pytest.mark.asyncio
async def test_accepts_shares_summing_to_amount(ledger, trio_group):
    created = await ledger.record_expense(
        expense(trio_group, "10.00"),
        shares(("u1", "3.34"), ("u2", "3.33"), ("u3", "3.33")),
    )

    stored = await ledger.store.get_expense_shares(created.id)
    assert sorted(s.amount for s in stored) == [Decimal("3.33"), Decimal("3.33"), Decimal("3.34")]
    assert created.amount == Decimal("10.00")


@pytest.mark.asyncio
async def test_rejects_mismatch_without_writing(ledger, trio_group):
    with pytest.raises(ShareMismatchError):
        await ledger.record_expense(
            expense(trio_group, "10.00"),
            shares(("u1", "3.33"), ("u2", "3.33"), ("u3", "3.33")),
        )

    assert await ledger.store.get_group_expenses(trio_group) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["0", "-5.00"])
async def test_rejects_non_positive_amount(ledger, trio_group, amount):
    with pytest.raises(ValidationError) as exc_info:
        await ledger.record_expense(expense(trio_group, amount), shares(("u1", amount)))
    assert exc_info.value.details["field"] == "amount"


@pytest.mark.asyncio
async def test_rejects_empty_shares(ledger, trio_group):
    with pytest.raises(ValidationError):
        await ledger.record_expense(expense(trio_group, "10.00"), [])


@pytest.mark.asyncio
async def test_rejects_negative_share(ledger, trio_group):
    with pytest.raises(ValidationError):
        await ledger.record_expense(
            expense(trio_group, "10.00"),
            shares(("u1", "15.00"), ("u2", "-5.00")),
        )


@pytest.mark.asyncio
async def test_rejects_duplicate_share_user(ledger, trio_group):
    with pytest.raises(ValidationError):
        await ledger.record_expense(
            expense(trio_group, "10.00"),
            shares(("u2", "5.00"), ("u2", "5.00")),
        )


@pytest.mark.asyncio
async def test_rejects_share_for_non_member(ledger, trio_group):
    with pytest.raises(ValidationError) as exc_info:
        await ledger.record_expense(
            expense(trio_group, "10.00"),
            shares(("u1", "5.00"), ("stranger", "5.00")),
        )
    assert exc_info.value.details["user_id"] == "stranger"


@pytest.mark.asyncio
async def test_rejects_payer_outside_group(ledger, trio_group):
    with pytest.raises(ValidationError):
        await ledger.record_expense(
            expense(trio_group, "10.00", paid_by="stranger"),
            shares(("u1", "10.00")),
        )


@pytest.mark.asyncio
async def test_unknown_group_is_not_found(ledger, trio_group):
    with pytest.raises(NotFoundError):
        await ledger.record_expense(expense(9999, "10.00"), shares(("u1", "10.00")))


@pytest.mark.asyncio
async def test_unknown_group_without_shares_is_not_found(ledger, trio_group):
    with pytest.raises(NotFoundError):
        await ledger.record_expense(expense(9999, "10.00", split_type=SplitType.EQUAL), [])


@pytest.mark.asyncio
async def test_zero_share_is_allowed(ledger, trio_group):
    created = await ledger.record_expense(
        expense(trio_group, "12.00"),
        shares(("u1", "12.00"), ("u2", "0.00")),
    )
    assert len(await ledger.store.get_expense_shares(created.id)) == 2
