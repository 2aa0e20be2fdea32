"""
Menu Board — Shared Redis connection (live notices, login rate limit)
"""
import asyncio

import redis.asyncio as aioredis

from menuboard.core.config import get_settings

settings = get_settings()
_redis_client: aioredis.Redis | None = None


def get_redis() -> aioredis.Redis:
    """Created on first use; pub/sub and the rate limiter share it."""
    global _redis_client
    if _redis_client is None:
        _redis_client = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=settings.HEALTH_CHECK_TIMEOUT,
        )
    return _redis_client


async def ping_redis(timeout: float) -> None:
    await asyncio.wait_for(get_redis().ping(), timeout=timeout)


async def close_redis() -> None:
    global _redis_client
    client, _redis_client = _redis_client, None
    if client is not None:
        await client.aclose()
