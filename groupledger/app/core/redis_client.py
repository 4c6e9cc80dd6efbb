"""
Redis client initialization and connection management.

The balance cache is the only consumer of this client.
"""

import redis.asyncio as redis
from groupledger.app.core.config import settings


redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def get_redis():
    """
    Get Redis client instance.

    Used as a FastAPI dependency so tests can swap in a fake.
    """
    return redis_client

