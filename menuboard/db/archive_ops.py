"""
Menu Board — Menu change history (append-only audit log)

append_entry() only adds to the caller's session. The caller commits the
item write and its history entry together, so an item can never change
without a matching entry.
"""
import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.core.clock import now_ms
from menuboard.core.errors import NotFound
from menuboard.models.menu import Category, MenuArchive, MenuItem
from menuboard.schemas.menu import ItemStats, MenuItemOut, MenuStats

SNAPSHOT_SCHEMA_VERSION = 1
CHANGE_TYPES = ("created", "updated", "deleted")
DAY_MS = 24 * 60 * 60 * 1000


def item_snapshot(item: MenuItem) -> dict[str, Any]:
    """Full denormalised copy of an item, tagged with the payload schema version."""
    data = MenuItemOut.model_validate(item).model_dump(mode="json")
    data["schema_version"] = SNAPSHOT_SCHEMA_VERSION
    return data


def append_entry(
    db: AsyncSession,
    menu_item_id: str,
    snapshot: dict[str, Any],
    change_type: str,
    changed_at: int,
) -> str:
    if change_type not in CHANGE_TYPES:
        raise ValueError(f"Unknown change type '{change_type}'")
    entry = MenuArchive(
        id=str(uuid.uuid4()),
        menu_item_id=menu_item_id,
        snapshot=snapshot,
        change_type=change_type,
        changed_at=changed_at,
    )
    db.add(entry)
    return entry.id


async def history_for(db: AsyncSession, menu_item_id: str) -> list[MenuArchive]:
    result = await db.execute(
        select(MenuArchive)
        .where(MenuArchive.menu_item_id == menu_item_id)
        .order_by(MenuArchive.changed_at.desc())
    )
    return list(result.scalars().all())


async def recent(db: AsyncSession, limit: int = 50) -> list[MenuArchive]:
    result = await db.execute(
        select(MenuArchive).order_by(MenuArchive.changed_at.desc()).limit(limit)
    )
    return list(result.scalars().all())


async def in_range(db: AsyncSession, start: int, end: int) -> list[MenuArchive]:
    """Entries with start <= changed_at <= end."""
    result = await db.execute(
        select(MenuArchive).where(MenuArchive.changed_at >= start, MenuArchive.changed_at <= end)
    )
    return list(result.scalars().all())


async def item_stats(db: AsyncSession, menu_item_id: str) -> ItemStats:
    item = await db.get(MenuItem, menu_item_id)
    if item is None:
        raise NotFound("Menu item not found")

    history = list(reversed(await history_for(db, menu_item_id)))
    price_changes = 0
    availability_changes = 0
    for previous, entry in zip(history, history[1:]):
        if entry.snapshot.get("price") != previous.snapshot.get("price"):
            price_changes += 1
        if entry.snapshot.get("is_available") != previous.snapshot.get("is_available"):
            availability_changes += 1

    return ItemStats(
        item=MenuItemOut.model_validate(item),
        total_modifications=item.modification_count,
        price_change_count=price_changes,
        availability_change_count=availability_changes,
        days_since_added=(now_ms() - item.added_at) // DAY_MS,
        last_modified=item.last_modified_at,
    )


async def menu_stats(db: AsyncSession) -> MenuStats:
    categories = (await db.execute(select(Category))).scalars().all()
    items = (await db.execute(select(MenuItem))).scalars().all()

    now = now_ms()

    async def _changes_since(threshold: int) -> int:
        return await db.scalar(
            select(func.count()).select_from(MenuArchive).where(MenuArchive.changed_at > threshold)
        ) or 0

    available = sum(1 for i in items if i.is_available)
    average_price = round(sum(i.price for i in items) / len(items)) if items else 0

    return MenuStats(
        total_categories=len(categories),
        active_categories=sum(1 for c in categories if c.is_active),
        total_items=len(items),
        available_items=available,
        unavailable_items=len(items) - available,
        average_price=average_price,
        changes_last_24h=await _changes_since(now - DAY_MS),
        changes_last_week=await _changes_since(now - 7 * DAY_MS),
    )
