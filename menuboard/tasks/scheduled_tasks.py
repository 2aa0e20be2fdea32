"""
Menu Board — Scheduled Celery tasks

Celery tasks are not async-native: each run drives the async db ops with
asyncio.run() on its own engine, disposed when the run ends.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from menuboard.core.celery_app import celery_app
from menuboard.core.config import get_settings
from menuboard.core.errors import ExternalFetchError
from menuboard.core.redis_client import close_redis
from menuboard.db import settings_ops, snapshot_ops, sync_ops

settings = get_settings()
logger = logging.getLogger(__name__)


async def _with_session(job: Callable[[AsyncSession], Awaitable[Any]]) -> Any:
    # NullPool: connections must not outlive this run's event loop
    engine = create_async_engine(settings.database_url, poolclass=NullPool)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_factory() as db:
            return await job(db)
    finally:
        await close_redis()
        await engine.dispose()


def run_job(job: Callable[[AsyncSession], Awaitable[Any]]) -> Any:
    return asyncio.run(_with_session(job))


@celery_app.task(name="create_daily_snapshot", bind=True, max_retries=3, default_retry_delay=60)
def create_daily_snapshot(self, date: str | None = None):
    """Nightly menu snapshot. Safe to re-run for the same date."""
    try:
        return run_job(lambda db: snapshot_ops.create_daily_snapshot(db, date))
    except Exception as exc:
        logger.exception("Daily snapshot failed")
        raise self.retry(exc=exc)


@celery_app.task(name="refresh_exchange_rates")
def refresh_exchange_rates():
    """Failures are logged; the previous rates stay in the theme."""
    try:
        rates = run_job(settings_ops.refresh_exchange_rates)
    except ExternalFetchError as exc:
        logger.warning("Exchange rate refresh failed: %s", exc.message)
        return None
    return rates.model_dump() if rates else None


@celery_app.task(name="sync_google_sheets")
def sync_google_sheets(spreadsheet_id: str | None = None):
    """Failures are recorded in the sync state by the sync itself."""
    spreadsheet_id = spreadsheet_id or settings.GOOGLE_SHEETS_ID
    if not spreadsheet_id:
        logger.info("No spreadsheet configured, skipping sync")
        return None
    result = run_job(lambda db: sync_ops.sync_from_google_sheets(db, spreadsheet_id))
    return result.model_dump()
