"""
Menu Board — Live query streams (SSE over Redis pub/sub)

Architecture:
  - Every committed mutation publishes a notice on `live:<topic>` (core/live.py)
  - The SSE endpoint subscribes, sends the topic's current query result,
    then re-runs the query and pushes the fresh result on each notice
  - Each refresh opens its own short-lived DB session
"""
import json
import time
from typing import Any, AsyncGenerator, Awaitable, Callable

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from menuboard.core import live
from menuboard.core.config import get_settings
from menuboard.core.redis_client import get_redis
from menuboard.db import catalog_ops, layout_ops, menu_ops, order_ops, settings_ops
from menuboard.db.database import get_session_factory
from menuboard.models.layout import PageType
from menuboard.schemas.catalog import CateringMenuOut, EventPackageOut, SchoolMealOut
from menuboard.schemas.order import OrderOut

settings = get_settings()
router = APIRouter(prefix="/live", tags=["live"])
admin_router = APIRouter(prefix="/admin/live", tags=["admin"])

Loader = Callable[[AsyncSession], Awaitable[Any]]


async def _menu(db: AsyncSession):
    return await menu_ops.full_menu(db)


async def _layouts(db: AsyncSession):
    return {page.value: await layout_ops.get_active_layout(db, page) for page in PageType}


async def _settings(db: AsyncSession):
    return {
        "theme": await settings_ops.get_theme(db),
        "schedule": await settings_ops.get_menu_schedule(db),
        "animations_enabled": await settings_ops.get_animations_enabled(db),
    }


async def _catalog(db: AsyncSession):
    return {
        "events": [EventPackageOut.model_validate(p) for p in await catalog_ops.list_event_packages(db, True)],
        "catering": [CateringMenuOut.model_validate(m) for m in await catalog_ops.list_catering_menus(db, True)],
        "school_meals": [
            SchoolMealOut.model_validate(m) for m in await catalog_ops.list_school_meals(db, active_only=True)
        ],
    }


async def _orders(db: AsyncSession):
    return [OrderOut.model_validate(o) for o in await order_ops.list_orders(db)]


def _session_order(session_id: str) -> Loader:
    async def load(db: AsyncSession):
        order = await order_ops.get_order(db, session_id)
        return OrderOut.model_validate(order) if order else None
    return load


PUBLIC_TOPICS: dict[str, Loader] = {
    live.MENU: _menu,
    live.LAYOUTS: _layouts,
    live.SETTINGS: _settings,
    live.CATALOG: _catalog,
}


def resolve_topic(topic: str) -> Loader:
    if topic in PUBLIC_TOPICS:
        return PUBLIC_TOPICS[topic]
    prefix = live.order_topic("")
    if topic.startswith(prefix) and len(topic) > len(prefix):
        return _session_order(topic[len(prefix):])
    raise HTTPException(status_code=404, detail=f"Unknown live topic '{topic}'")


def _event(name: str, data: Any) -> str:
    return f"event: {name}\ndata: {json.dumps(jsonable_encoder(data))}\n\n"


async def _run_query(loader: Loader, session_factory: async_sessionmaker[AsyncSession]) -> Any:
    async with session_factory() as db:
        return await loader(db)


async def _sse_generator(
    topic: str,
    loader: Loader,
    request: Request,
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[str, None]:
    """Subscribe first, then send the snapshot, so no change slips in between."""
    redis = get_redis()
    channel_name = live.channel_for(topic)
    pubsub = redis.pubsub()
    await pubsub.subscribe(channel_name)

    try:
        yield f"retry: {settings.SSE_RETRY_MILLISECONDS}\n\n"
        yield _event("snapshot", await _run_query(loader, session_factory))
        last_sent = time.monotonic()

        while True:
            if await request.is_disconnected():
                break

            message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
            if message and message["type"] == "message":
                yield _event("update", await _run_query(loader, session_factory))
                last_sent = time.monotonic()
            elif time.monotonic() - last_sent >= settings.SSE_KEEPALIVE_INTERVAL_SECONDS:
                yield ": keepalive\n\n"
                last_sent = time.monotonic()
    finally:
        await pubsub.unsubscribe(channel_name)
        await pubsub.aclose()


def _stream(topic: str, loader: Loader, request: Request, session_factory) -> StreamingResponse:
    return StreamingResponse(
        _sse_generator(topic, loader, request, session_factory),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",  # Disable Nginx buffering
            "Connection": "keep-alive",
        },
    )


@router.get("/{topic}")
async def stream_topic(
    topic: str,
    request: Request,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """
    SSE stream for menu, layouts, settings, catalog or order:<session_id>.
    Sends `snapshot` once, then `update` after every change to the topic.
    """
    return _stream(topic, resolve_topic(topic), request, session_factory)


@admin_router.get("/orders")
async def stream_orders(
    request: Request,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Kitchen/staff view of recent orders."""
    return _stream(live.ORDERS, _orders, request, session_factory)
