"""
Shared async Redis client used by the rate limiter
"""

import os
import redis.asyncio as redis
from gamearena.core.config import settings

REDIS_URL = os.environ.get("REDIS_URL", settings.redis_url)
redis_client = redis.from_url(REDIS_URL, decode_responses=True)


async def get_redis_client():
    """Get Redis client instance"""
    return redis_client


async def close_redis_client():
    """Release pooled connections on shutdown"""
    await redis_client.aclose()
