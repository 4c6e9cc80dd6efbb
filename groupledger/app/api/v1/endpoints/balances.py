"""
Balance API Endpoints.

Per-user balances are always recomputed; the group settle-up view reads
through the Redis balance cache.
"""

from fastapi import APIRouter, Depends
from typing import List

from groupledger.app.core.dependencies import get_ledger_service, get_balance_cache
from groupledger.app.core.exceptions import NotFoundError
from groupledger.app.domain.ledger.debt_minimizer import minimize_transfers
from groupledger.app.domain.ledger.service import LedgerService
from groupledger.app.schemas.balance import BalanceResponse, TransferResponse
from groupledger.app.services.balance_cache import BalanceCache

router = APIRouter(tags=["Balances"])


@router.get("/users/{user_id}/groups/{group_id}/balance", response_model=BalanceResponse)
async def get_user_group_balance(
    user_id: str,
    group_id: int,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Net balance of a user in one group (0.00 for unknown user or group)."""
    return BalanceResponse(balance=await ledger.balance_in_group(user_id, group_id))


@router.get("/users/{user_id}/balance", response_model=BalanceResponse)
async def get_user_total_balance(user_id: str, ledger: LedgerService = Depends(get_ledger_service)):
    """Net balance of a user across all of their groups."""
    return BalanceResponse(balance=await ledger.total_balance(user_id))


@router.get("/groups/{group_id}/balances", response_model=List[TransferResponse])
async def get_group_transfers(
    group_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
    cache: BalanceCache = Depends(get_balance_cache)
):
    """
    Settle-up instructions for a group: who pays whom, and how much.
    """
    if not await ledger.store.get_group(group_id):
        raise NotFoundError("Group", group_id)

    # Version first, so a write during the recompute retires this snapshot
    version = await cache.current_version(group_id)
    balances = await cache.get(group_id, version)
    if balances is None:
        balances = await ledger.group_balances(group_id)
        await cache.set(group_id, version, balances)

    return minimize_transfers(balances)
