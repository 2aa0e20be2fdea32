"""
Menu Board — Admin login throttle (Redis sliding window)

Each login attempt is a member of the sorted set
`ratelimit:admin-login:<client>` scored by its timestamp. Members older than
RATE_LIMIT_WINDOW_SECONDS are trimmed before counting.
"""
import time
import uuid

import redis.asyncio as aioredis
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from menuboard.core.config import get_settings
from menuboard.core.redis_client import get_redis

settings = get_settings()

RATE_LIMIT_PREFIX = "ratelimit:admin-login:"
LOGIN_PATHS = ("/admin/login", "/admin/login/")


async def record_attempt(redis: aioredis.Redis, key: str, window_seconds: int) -> int:
    """Log one attempt and return how many earlier ones are still inside the window."""
    now = time.time()
    async with redis.pipeline(transaction=True) as pipe:
        pipe.zremrangebyscore(key, "-inf", now - window_seconds)
        pipe.zcard(key)
        pipe.zadd(key, {f"{now}:{uuid.uuid4().hex[:8]}": now})
        pipe.expire(key, window_seconds + 1)
        _, earlier, _, _ = await pipe.execute()
    return earlier


def _too_many_attempts() -> JSONResponse:
    window = settings.RATE_LIMIT_WINDOW_SECONDS
    return JSONResponse(
        status_code=429,
        content={
            "detail": f"Too many login attempts. Try again in {window} seconds.",
            "retry_after_seconds": window,
        },
        headers={"Retry-After": str(window)},
    )


class SlidingWindowRateLimiter(BaseHTTPMiddleware):
    """Throttles POST /admin/login per client address; other requests are untouched."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method != "POST" or request.url.path not in LOGIN_PATHS:
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        earlier = await record_attempt(get_redis(), RATE_LIMIT_PREFIX + client, settings.RATE_LIMIT_WINDOW_SECONDS)
        if earlier >= settings.RATE_LIMIT_MAX_ATTEMPTS:
            return _too_many_attempts()
        return await call_next(request)
