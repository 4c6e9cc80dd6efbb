"""
Settlement API Endpoints.

Settlements are append-only.
"""

from fastapi import APIRouter, Depends, status
from typing import List

from groupledger.app.core.dependencies import get_ledger_store, get_ledger_service, get_balance_cache
from groupledger.app.domain.ledger.records import NewSettlement
from groupledger.app.domain.ledger.service import LedgerService
from groupledger.app.domain.ledger.store import LedgerStore
from groupledger.app.schemas.settlement import SettlementCreate, SettlementResponse
from groupledger.app.services.balance_cache import BalanceCache

router = APIRouter(tags=["Settlements"])


@router.post("/settlements", response_model=SettlementResponse, status_code=status.HTTP_201_CREATED)
async def create_settlement(
    settlement_data: SettlementCreate,
    ledger: LedgerService = Depends(get_ledger_service),
    cache: BalanceCache = Depends(get_balance_cache)
):
    """Record a payment from one member to another."""
    settlement = await ledger.record_settlement(NewSettlement(
        group_id=settlement_data.group_id,
        from_user_id=settlement_data.from_user_id,
        to_user_id=settlement_data.to_user_id,
        amount=settlement_data.amount,
        notes=settlement_data.notes,
    ))
    await cache.invalidate(settlement_data.group_id)
    return settlement


@router.get("/groups/{group_id}/settlements", response_model=List[SettlementResponse])
async def list_group_settlements(group_id: int, store: LedgerStore = Depends(get_ledger_store)):
    """All settlements recorded in a group."""
    return await store.get_group_settlements(group_id)
