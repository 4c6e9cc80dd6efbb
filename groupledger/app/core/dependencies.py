"""
FastAPI dependencies.

Builds the ledger service and balance cache for each request. The SQL
store wraps the request's database session.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from groupledger.app.core.redis_client import get_redis
from groupledger.app.db.session import get_db
from groupledger.app.domain.ledger.service import GroupLocks, LedgerService
from groupledger.app.domain.ledger.sql_store import SqlLedgerStore
from groupledger.app.domain.ledger.store import LedgerStore
from groupledger.app.services.balance_cache import BalanceCache


async def get_ledger_store(db: AsyncSession = Depends(get_db)) -> LedgerStore:
    return SqlLedgerStore(db)


# Per-group write locks, shared by every request in this process
group_locks = GroupLocks()


async def get_group_locks() -> GroupLocks:
    return group_locks


async def get_ledger_service(
    store: LedgerStore = Depends(get_ledger_store),
    locks: GroupLocks = Depends(get_group_locks)
) -> LedgerService:
    return LedgerService(store, locks=locks)


async def get_balance_cache(redis_client=Depends(get_redis)) -> BalanceCache:
    return BalanceCache(redis_client)
