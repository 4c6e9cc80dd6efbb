"""
Balance Cache Service.

Stores a group's balance snapshot in Redis. Only the HTTP layer reads it;
the ledger core always recomputes. Every write touching a group must call
``invalidate`` for that group.

Snapshots are keyed by a per-group version counter. ``invalidate`` bumps
the counter, so a snapshot computed before a write lands under a version
that no reader asks for again and simply expires.
"""

import json
import logging
from decimal import Decimal
from typing import Dict, Optional

from redis.exceptions import RedisError

from groupledger.app.core.config import settings

logger = logging.getLogger("groupledger.cache")


def version_key(group_id: int) -> str:
    return f"ledger:balances:{group_id}:v"


def balances_key(group_id: int, version: int) -> str:
    return f"ledger:balances:{group_id}:{version}"


class BalanceCache:

    def __init__(self, redis_client, ttl_seconds: int = None, enabled: bool = None):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds or settings.balance_cache_ttl_seconds
        self.enabled = settings.balance_cache_enabled if enabled is None else enabled

    async def current_version(self, group_id: int) -> Optional[int]:
        """
        Read the group's snapshot version.

        Must be read before computing balances; ``None`` means the cache
        is unusable for this request.
        """
        if not self.enabled:
            return None
        try:
            raw = await self.redis.get(version_key(group_id))
        except RedisError as exc:
            logger.warning("Balance cache read failed", extra={"group_id": group_id, "error": str(exc)})
            return None
        return int(raw) if raw else 0

    async def get(self, group_id: int, version: Optional[int]) -> Optional[Dict[str, Decimal]]:
        if version is None:
            return None
        try:
            raw = await self.redis.get(balances_key(group_id, version))
        except RedisError as exc:
            logger.warning("Balance cache read failed", extra={"group_id": group_id, "error": str(exc)})
            return None
        if not raw:
            return None
        return {user_id: Decimal(amount) for user_id, amount in json.loads(raw).items()}

    async def set(self, group_id: int, version: Optional[int], balances: Dict[str, Decimal]) -> None:
        if version is None:
            return
        payload = json.dumps({user_id: str(amount) for user_id, amount in balances.items()})
        try:
            await self.redis.set(balances_key(group_id, version), payload, ex=self.ttl_seconds)
        except RedisError as exc:
            logger.warning("Balance cache write failed", extra={"group_id": group_id, "error": str(exc)})

    async def invalidate(self, group_id: int) -> None:
        if not self.enabled:
            return
        try:
            await self.redis.incr(version_key(group_id))
        except RedisError as exc:
            logger.warning("Balance cache invalidation failed", extra={"group_id": group_id, "error": str(exc)})
