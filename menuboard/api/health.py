"""
Menu Board — Health endpoint
"""
import asyncio
from typing import Awaitable, Callable

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from menuboard.core.config import get_settings
from menuboard.core.redis_client import ping_redis
from menuboard.db.database import engine

settings = get_settings()
router = APIRouter(tags=["health"])


async def _ping_database(timeout: float) -> None:
    async with engine.connect() as conn:
        await asyncio.wait_for(conn.execute(text("SELECT 1")), timeout=timeout)


DEPENDENCY_CHECKS: dict[str, Callable[[float], Awaitable[None]]] = {
    "database": _ping_database,
    "redis": ping_redis,
}


async def _check(check: Callable[[float], Awaitable[None]]) -> str:
    try:
        await check(settings.HEALTH_CHECK_TIMEOUT)
    except Exception as e:
        return f"error: {str(e)[:100]}"
    return "ok"


@router.get("/health")
async def health_check():
    """503 with per-dependency detail when the database or Redis is unreachable."""
    deps = {name: await _check(check) for name, check in DEPENDENCY_CHECKS.items()}
    healthy = all(state == "ok" for state in deps.values())

    return JSONResponse(
        content={
            "status": "healthy" if healthy else "degraded",
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "dependencies": deps,
        },
        status_code=200 if healthy else 503,
    )
