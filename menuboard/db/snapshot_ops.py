"""
Menu Board — Daily menu snapshots

[HISTORY DATA] — one row per date. Re-running for a date replaces the
payload with a fresh read, so the job is safe to repeat.
"""
import uuid
import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.core.clock import now_ms, today_utc
from menuboard.core.errors import NotFound, ValidationError
from menuboard.db.archive_ops import SNAPSHOT_SCHEMA_VERSION
from menuboard.models.menu import Category, DailySnapshot, MenuItem
from menuboard.schemas.menu import CategoryOut, MenuItemOut

logger = logging.getLogger(__name__)


def _check_date(date: str) -> None:
    try:
        datetime.strptime(date, "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f"Invalid snapshot date '{date}', expected YYYY-MM-DD")


async def _read_menu(db: AsyncSession) -> dict:
    categories = (await db.execute(select(Category).order_by(Category.sort_order))).scalars().all()
    items = (await db.execute(select(MenuItem).order_by(MenuItem.sort_order))).scalars().all()
    return {
        "schema_version": SNAPSHOT_SCHEMA_VERSION,
        "categories": [CategoryOut.model_validate(c).model_dump(mode="json") for c in categories],
        "menu_items": [MenuItemOut.model_validate(i).model_dump(mode="json") for i in items],
    }


async def _by_date(db: AsyncSession, date: str) -> DailySnapshot | None:
    result = await db.execute(
        select(DailySnapshot).where(DailySnapshot.date == date).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_daily_snapshot(db: AsyncSession, date: str | None = None) -> str:
    """
    Materialise the full menu for `date` (default: today, UTC).
    Returns the id of the inserted or replaced snapshot.
    """
    date = date or today_utc()
    _check_date(date)

    payload = await _read_menu(db)
    existing = await _by_date(db, date)
    if existing is not None:
        existing.snapshot = payload
        await db.commit()
        logger.info("Daily snapshot for %s replaced", date)
        return existing.id

    snapshot = DailySnapshot(id=str(uuid.uuid4()), date=date, snapshot=payload, created_at=now_ms())
    db.add(snapshot)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent run inserted the same date first; overwrite its payload
        await db.rollback()
        existing = await _by_date(db, date)
        existing.snapshot = payload
        await db.commit()
        logger.info("Daily snapshot for %s replaced after concurrent insert", date)
        return existing.id

    logger.info("Daily snapshot for %s created", date)
    return snapshot.id


async def get_snapshot(db: AsyncSession, date: str) -> DailySnapshot:
    snapshot = await _by_date(db, date)
    if snapshot is None:
        raise NotFound(f"No snapshot for {date}")
    return snapshot


async def list_snapshot_dates(db: AsyncSession) -> list[str]:
    """Snapshot dates, newest first."""
    result = await db.execute(select(DailySnapshot.date).order_by(DailySnapshot.date.desc()))
    return list(result.scalars().all())
