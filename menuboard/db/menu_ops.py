"""
Menu Board — Category and menu item mutations

Every accepted menu item mutation, whatever its entry point (admin API,
spreadsheet sync, image migration), goes through insert_item(),
apply_item_update() or delete_menu_item(). Those take one timestamp per
operation, bump modification_count exactly once and append exactly one
history entry to the same session before the caller commits. Item
writes are version-checked against menu_items.version_id and retried
with backoff when a concurrent writer got there first.
"""
import uuid
import logging
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from menuboard.core import live
from menuboard.core.clock import now_ms
from menuboard.core.errors import DuplicateConstraint, NotFound, ValidationError
from menuboard.core.optimistic_lock import StaleDataError, with_optimistic_retry
from menuboard.db import archive_ops, seed_data
from menuboard.models.menu import Category, MenuItem
from menuboard.schemas.menu import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    FullMenuCategory,
    MenuItemCreate,
    MenuItemOut,
    MenuItemUpdate,
    SeedResult,
)

logger = logging.getLogger(__name__)


def next_timestamp(item: MenuItem | None = None) -> int:
    """
    One clock read per operation. For an existing item the result is
    strictly after its last_modified_at so history order is total per item.
    """
    now = now_ms()
    if item is not None and now <= item.last_modified_at:
        now = item.last_modified_at + 1
    return now


# ─── Reads ────────────────────────────────────────────────────────────────────

async def list_categories(db: AsyncSession, active_only: bool = True) -> list[Category]:
    query = select(Category).order_by(Category.sort_order)
    if active_only:
        query = query.where(Category.is_active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_items(db: AsyncSession) -> list[MenuItem]:
    result = await db.execute(select(MenuItem).order_by(MenuItem.sort_order))
    return list(result.scalars().all())


async def items_by_category(db: AsyncSession, category_id: str) -> list[MenuItem]:
    result = await db.execute(
        select(MenuItem).where(MenuItem.category_id == category_id).order_by(MenuItem.sort_order)
    )
    return list(result.scalars().all())


async def full_menu(db: AsyncSession) -> list[FullMenuCategory]:
    """Active categories in display order, each with its items sorted."""
    categories = await list_categories(db, active_only=True)
    items = await list_items(db)

    by_category: dict[str, list[MenuItemOut]] = {}
    for item in items:
        by_category.setdefault(item.category_id, []).append(MenuItemOut.model_validate(item))

    return [
        FullMenuCategory(
            **CategoryOut.model_validate(category).model_dump(),
            items=by_category.get(category.id, []),
        )
        for category in categories
    ]


# ─── Categories ───────────────────────────────────────────────────────────────

async def _category_by_name(db: AsyncSession, name: str) -> Category | None:
    result = await db.execute(select(Category).where(Category.name == name))
    return result.scalar_one_or_none()


async def create_category(db: AsyncSession, payload: CategoryCreate) -> Category:
    if await _category_by_name(db, payload.name):
        raise DuplicateConstraint(f"Category '{payload.name}' already exists")

    category = Category(id=str(uuid.uuid4()), **payload.model_dump())
    db.add(category)
    await db.commit()
    await live.notify(live.MENU)
    return category


async def update_category(db: AsyncSession, category_id: str, payload: CategoryUpdate) -> Category:
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFound("Category not found")

    updates = payload.model_dump(exclude_none=True)
    new_name = updates.get("name")
    if new_name and new_name != category.name and await _category_by_name(db, new_name):
        raise DuplicateConstraint(f"Category '{new_name}' already exists")

    for field, value in updates.items():
        setattr(category, field, value)
    await db.commit()
    await live.notify(live.MENU)
    return category


async def delete_category(db: AsyncSession, category_id: str) -> None:
    """Items of the category are left in place, orphaned."""
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFound("Category not found")
    await db.delete(category)
    await db.commit()
    await live.notify(live.MENU)


# ─── Menu items: invariant-keeping primitives ─────────────────────────────────

REQUIRED_ITEM_FIELDS = ("name", "price", "category_id", "is_available", "sort_order")


def insert_item(db: AsyncSession, fields: dict[str, Any]) -> MenuItem:
    """Add a new item plus its 'created' history entry. Caller commits."""
    now = next_timestamp()
    item = MenuItem(
        id=str(uuid.uuid4()),
        **fields,
        added_at=now,
        last_modified_at=now,
        modification_count=0,
        version_id=1,
    )
    db.add(item)
    archive_ops.append_entry(db, item.id, archive_ops.item_snapshot(item), "created", now)
    return item


async def apply_item_update(db: AsyncSession, item: MenuItem, fields: dict[str, Any]) -> None:
    """
    Patch an item, bump its revision and add its 'updated' history entry.
    Caller commits.

    The write is an UPDATE ... WHERE version_id = <version read>. If another
    transaction changed the item since it was read, the session is rolled
    back and StaleDataError raised, so callers run under with_optimistic_retry.
    """
    now = next_timestamp(item)
    expected_version = item.version_id
    values = {
        **fields,
        "last_modified_at": now,
        "modification_count": item.modification_count + 1,
        "version_id": expected_version + 1,
    }

    result = await db.execute(
        update(MenuItem)
        .where(MenuItem.id == item.id, MenuItem.version_id == expected_version)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise StaleDataError(f"Optimistic lock conflict: menu item '{item.id}' changed concurrently.")

    for field, value in values.items():
        set_committed_value(item, field, value)
    archive_ops.append_entry(db, item.id, archive_ops.item_snapshot(item), "updated", now)


async def _require_category(db: AsyncSession, category_id: str) -> None:
    if await db.get(Category, category_id) is None:
        raise ValidationError(f"Category not found: {category_id}")


async def _require_item(db: AsyncSession, item_id: str) -> MenuItem:
    item = await db.get(MenuItem, item_id, populate_existing=True)
    if item is None:
        raise NotFound("Menu item not found")
    return item


# ─── Menu items: operations ───────────────────────────────────────────────────

async def create_menu_item(db: AsyncSession, payload: MenuItemCreate) -> MenuItem:
    await _require_category(db, payload.category_id)
    item = insert_item(db, payload.model_dump(exclude_none=True))
    await db.commit()
    await live.notify(live.MENU)
    return item


@with_optimistic_retry()
async def update_menu_item(db: AsyncSession, item_id: str, payload: MenuItemUpdate) -> MenuItem:
    """Fields sent as null are cleared; required fields cannot be."""
    updates = payload.model_dump(exclude_unset=True)
    cleared = [field for field in REQUIRED_ITEM_FIELDS if field in updates and updates[field] is None]
    if cleared:
        raise ValidationError(f"Cannot clear required field(s): {', '.join(cleared)}")

    item = await _require_item(db, item_id)
    if "category_id" in updates:
        await _require_category(db, updates["category_id"])

    await apply_item_update(db, item, updates)
    await db.commit()
    await live.notify(live.MENU)
    return item


@with_optimistic_retry()
async def toggle_availability(db: AsyncSession, item_id: str) -> MenuItem:
    item = await _require_item(db, item_id)
    await apply_item_update(db, item, {"is_available": not item.is_available})
    await db.commit()
    await live.notify(live.MENU)
    return item


@with_optimistic_retry()
async def delete_menu_item(db: AsyncSession, item_id: str) -> None:
    item = await _require_item(db, item_id)
    now = next_timestamp(item)

    result = await db.execute(
        delete(MenuItem)
        .where(MenuItem.id == item.id, MenuItem.version_id == item.version_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise StaleDataError(f"Optimistic lock conflict: menu item '{item.id}' changed concurrently.")

    archive_ops.append_entry(db, item.id, archive_ops.item_snapshot(item), "deleted", now)
    await db.commit()
    db.expunge(item)
    await live.notify(live.MENU)


@with_optimistic_retry()
async def migrate_images_to_webp(db: AsyncSession) -> int:
    """One-off fix-up: point .jpg image URLs at their .webp versions."""
    result = await db.execute(select(MenuItem).execution_options(populate_existing=True))
    migrated = 0
    for item in result.scalars().all():
        if item.image_url and item.image_url.endswith(".jpg"):
            await apply_item_update(db, item, {"image_url": item.image_url[: -len(".jpg")] + ".webp"})
            migrated += 1

    if migrated:
        await db.commit()
        await live.notify(live.MENU)
    logger.info("Migrated %d image URLs to .webp", migrated)
    return migrated


# ─── Seed ─────────────────────────────────────────────────────────────────────

async def seed_menu(db: AsyncSession) -> SeedResult:
    """
    Load the starter categories and items into an empty menu. Does nothing
    once any category exists. Items get their 'created' history entries.
    """
    if (await db.execute(select(Category.id).limit(1))).first() is not None:
        return SeedResult(seeded=False, message="Database already has data. Skipping seed.")

    category_ids: dict[str, str] = {}
    for fields in seed_data.CATEGORIES:
        category = Category(id=str(uuid.uuid4()), is_active=True, **fields)
        db.add(category)
        category_ids[category.name] = category.id

    for name, description, price, category_name, sort_order, is_available in seed_data.ITEMS:
        insert_item(db, {
            "name": name,
            "description": description,
            "price": price,
            "category_id": category_ids[category_name],
            "sort_order": sort_order,
            "is_available": is_available,
        })

    await db.commit()
    await live.notify(live.MENU)
    logger.info("Seeded %d categories and %d items", len(seed_data.CATEGORIES), len(seed_data.ITEMS))
    return SeedResult(
        seeded=True,
        message="Database seeded successfully",
        categories=len(seed_data.CATEGORIES),
        items=len(seed_data.ITEMS),
    )
