"""
Expense API Endpoints.

Recording goes through the ledger service so the share-sum invariant is
checked before anything is written.
"""

from fastapi import APIRouter, Depends, Response, status
from typing import List

from groupledger.app.core.dependencies import get_ledger_store, get_ledger_service, get_balance_cache
from groupledger.app.core.exceptions import NotFoundError
from groupledger.app.domain.ledger.expense_recorder import split_equally
from groupledger.app.domain.ledger.records import NewExpense, NewShare
from groupledger.app.domain.ledger.service import LedgerService
from groupledger.app.domain.ledger.store import LedgerStore
from groupledger.app.models.enums import SplitType
from groupledger.app.schemas.expense import (
    ExpenseCreateRequest, ExpenseUpdate, ExpenseResponse,
    ExpenseShareResponse, ExpenseDetailResponse, ExpenseWithSharesResponse
)
from groupledger.app.services.balance_cache import BalanceCache

router = APIRouter(tags=["Expenses"])


@router.post("/expenses", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    request: ExpenseCreateRequest,
    ledger: LedgerService = Depends(get_ledger_service),
    cache: BalanceCache = Depends(get_balance_cache)
):
    """
    Record an expense with its shares.

    Equal splits without explicit shares are divided among ``split_with``,
    or among every group member when that is omitted too.
    """
    data = request.expense
    shares = [NewShare(user_id=s.user_id, amount=s.amount) for s in request.shares]

    if not shares and data.split_type == SplitType.EQUAL:
        user_ids = request.split_with
        if user_ids is None:
            user_ids = [m.user_id for m in await ledger.store.get_members(data.group_id)]
        # No members means no shares; the recorder reports the real cause
        shares = split_equally(data.amount, user_ids) if user_ids else []

    expense = await ledger.record_expense(
        NewExpense(
            group_id=data.group_id,
            title=data.title,
            amount=data.amount,
            paid_by=data.paid_by,
            created_by=data.created_by,
            split_type=data.split_type,
        ),
        shares,
    )
    await cache.invalidate(data.group_id)
    return expense


@router.get("/expenses/{expense_id}", response_model=ExpenseDetailResponse)
async def get_expense(expense_id: int, store: LedgerStore = Depends(get_ledger_store)):
    """Get an expense and its shares."""
    expense = await store.get_expense(expense_id)
    if not expense:
        raise NotFoundError("Expense", expense_id)

    shares = await store.get_expense_shares(expense_id)
    return ExpenseDetailResponse(
        expense=ExpenseResponse.model_validate(expense),
        shares=[ExpenseShareResponse.model_validate(s) for s in shares],
    )


@router.get("/groups/{group_id}/expenses", response_model=List[ExpenseWithSharesResponse])
async def list_group_expenses(group_id: int, store: LedgerStore = Depends(get_ledger_store)):
    """All expenses of a group with their shares inlined."""
    results = []
    for expense in await store.get_group_expenses(group_id):
        shares = await store.get_expense_shares(expense.id)
        results.append(ExpenseWithSharesResponse.model_validate(expense).model_copy(
            update={"shares": [ExpenseShareResponse.model_validate(s) for s in shares]}
        ))
    return results


@router.put("/expenses/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: int,
    expense_data: ExpenseUpdate,
    store: LedgerStore = Depends(get_ledger_store)
):
    """
    Update an expense's title or date.

    Amount, payer and shares are immutable; delete and re-record instead.
    """
    expense = await store.update_expense(expense_id, title=expense_data.title, date=expense_data.date)
    if not expense:
        raise NotFoundError("Expense", expense_id)
    return expense


@router.delete("/expenses/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
    cache: BalanceCache = Depends(get_balance_cache)
):
    """Delete an expense together with all of its shares."""
    expense = await ledger.store.get_expense(expense_id)
    if not expense:
        raise NotFoundError("Expense", expense_id)
    group_id = expense.group_id

    await ledger.delete_expense(expense_id)
    await cache.invalidate(group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
