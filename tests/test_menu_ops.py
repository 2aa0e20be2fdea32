"""
Menu item mutations: revision counting, history entries, validation.
"""
import asyncio

import pytest
from sqlalchemy import select

from menuboard.core.errors import DuplicateConstraint, NotFound, ValidationError
from menuboard.core.optimistic_lock import StaleDataError
from menuboard.db import archive_ops, menu_ops, seed_data
from menuboard.models.menu import Category, MenuItem
from menuboard.schemas.menu import CategoryCreate, CategoryUpdate, MenuItemCreate, MenuItemUpdate


@pytest.mark.asyncio
async def test_create_item_starts_at_revision_zero_with_created_entry(db, wonton):
    assert wonton.modification_count == 0
    assert wonton.added_at == wonton.last_modified_at

    history = await archive_ops.history_for(db, wonton.id)
    assert len(history) == 1
    entry = history[0]
    assert entry.change_type == "created"
    assert entry.changed_at == wonton.added_at
    assert entry.snapshot["modification_count"] == 0
    assert entry.snapshot["schema_version"] == archive_ops.SNAPSHOT_SCHEMA_VERSION
    assert entry.snapshot["name"] == "Wonton Soup"


@pytest.mark.asyncio
async def test_every_mutation_adds_exactly_one_matching_entry(db, wonton):
    await menu_ops.update_menu_item(db, wonton.id, MenuItemUpdate(price=500))
    await menu_ops.toggle_availability(db, wonton.id)

    item = await db.get(MenuItem, wonton.id)
    assert item.modification_count == 2
    assert item.price == 500
    assert item.is_available is False

    history = await archive_ops.history_for(db, wonton.id)
    assert [e.change_type for e in history] == ["updated", "updated", "created"]
    newest = history[0]
    assert newest.snapshot["modification_count"] == item.modification_count
    assert newest.changed_at == item.last_modified_at


@pytest.mark.asyncio
async def test_last_modified_is_strictly_increasing_on_a_frozen_clock(db, soup, monkeypatch):
    monkeypatch.setattr(menu_ops, "now_ms", lambda: 1_000)
    item = await menu_ops.create_menu_item(db, MenuItemCreate(name="Tea", price=100, category_id=soup.id))
    assert item.last_modified_at == 1_000

    await menu_ops.update_menu_item(db, item.id, MenuItemUpdate(price=120))
    await menu_ops.update_menu_item(db, item.id, MenuItemUpdate(price=140))
    assert item.last_modified_at == 1_002

    changed = sorted(e.changed_at for e in await archive_ops.history_for(db, item.id))
    assert changed == [1_000, 1_001, 1_002]


@pytest.mark.asyncio
async def test_delete_item_keeps_history(db, wonton):
    await menu_ops.delete_menu_item(db, wonton.id)

    assert await db.get(MenuItem, wonton.id) is None
    history = await archive_ops.history_for(db, wonton.id)
    assert [e.change_type for e in history] == ["deleted", "created"]
    assert history[0].snapshot["id"] == wonton.id


@pytest.mark.asyncio
async def test_create_item_with_unknown_category_is_rejected(db):
    with pytest.raises(ValidationError):
        await menu_ops.create_menu_item(db, MenuItemCreate(name="Ghost", price=1, category_id="missing"))
    assert await menu_ops.list_items(db) == []


@pytest.mark.asyncio
async def test_update_and_delete_missing_item_raise_not_found(db):
    with pytest.raises(NotFound):
        await menu_ops.update_menu_item(db, "missing", MenuItemUpdate(price=1))
    with pytest.raises(NotFound):
        await menu_ops.delete_menu_item(db, "missing")


@pytest.mark.asyncio
async def test_category_names_are_unique(db, soup):
    with pytest.raises(DuplicateConstraint):
        await menu_ops.create_category(db, CategoryCreate(name="soup", display_name="Again"))

    salad = await menu_ops.create_category(db, CategoryCreate(name="salad", display_name="Salads"))
    with pytest.raises(DuplicateConstraint):
        await menu_ops.update_category(db, salad.id, CategoryUpdate(name="soup"))


@pytest.mark.asyncio
async def test_deleting_category_orphans_its_items(db, soup, wonton):
    await menu_ops.delete_category(db, soup.id)

    items = await menu_ops.list_items(db)
    assert [i.id for i in items] == [wonton.id]
    assert items[0].category_id == soup.id


@pytest.mark.asyncio
async def test_full_menu_lists_active_categories_with_sorted_items(db, soup):
    await menu_ops.create_category(db, CategoryCreate(name="hidden", display_name="Hidden", is_active=False))
    await menu_ops.create_menu_item(db, MenuItemCreate(name="B", price=2, category_id=soup.id, sort_order=2))
    await menu_ops.create_menu_item(db, MenuItemCreate(name="A", price=1, category_id=soup.id, sort_order=1))

    menu = await menu_ops.full_menu(db)
    assert [c.name for c in menu] == ["soup"]
    assert [i.name for i in menu[0].items] == ["A", "B"]


@pytest.mark.asyncio
async def test_migrate_images_to_webp_records_each_change(db, soup):
    item = await menu_ops.create_menu_item(
        db, MenuItemCreate(name="Bao", price=300, category_id=soup.id, image_url="/img/bao.jpg")
    )
    await menu_ops.create_menu_item(
        db, MenuItemCreate(name="Tea", price=100, category_id=soup.id, image_url="/img/tea.webp")
    )

    assert await menu_ops.migrate_images_to_webp(db) == 1
    assert item.image_url == "/img/bao.webp"
    assert item.modification_count == 1
    assert len(await archive_ops.history_for(db, item.id)) == 2


@pytest.mark.asyncio
async def test_concurrent_updates_from_two_sessions_both_count(db, session_factory, wonton):
    async with session_factory() as first, session_factory() as second:
        await asyncio.gather(
            menu_ops.update_menu_item(first, wonton.id, MenuItemUpdate(price=500)),
            menu_ops.update_menu_item(second, wonton.id, MenuItemUpdate(is_available=False)),
        )

    item = await db.get(MenuItem, wonton.id, populate_existing=True)
    assert item.modification_count == 2
    assert item.version_id == 3
    assert (item.price, item.is_available) == (500, False)

    history = await archive_ops.history_for(db, wonton.id)
    assert sorted(e.snapshot["modification_count"] for e in history) == [0, 1, 2]
    assert history[0].snapshot["price"] == 500
    assert history[0].snapshot["is_available"] is False


@pytest.mark.asyncio
async def test_update_from_a_stale_read_rereads_and_keeps_the_other_write(db, session_factory, wonton):
    async with session_factory() as other:
        await menu_ops.update_menu_item(other, wonton.id, MenuItemUpdate(price=600))

    assert wonton.version_id == 1
    with pytest.raises(StaleDataError):
        await menu_ops.apply_item_update(db, wonton, {"sort_order": 7})

    item = await menu_ops.update_menu_item(db, wonton.id, MenuItemUpdate(sort_order=7))

    assert (item.price, item.sort_order, item.modification_count) == (600, 7, 2)


@pytest.mark.asyncio
async def test_explicit_null_clears_optional_field(db, wonton):
    item = await menu_ops.update_menu_item(db, wonton.id, MenuItemUpdate(description=None))

    assert item.description is None
    assert item.name == "Wonton Soup"
    assert item.price == 450
    history = await archive_ops.history_for(db, wonton.id)
    assert history[0].snapshot["description"] is None


@pytest.mark.asyncio
async def test_required_fields_cannot_be_cleared(db, wonton):
    with pytest.raises(ValidationError, match="price"):
        await menu_ops.update_menu_item(db, wonton.id, MenuItemUpdate(price=None))

    item = await db.get(MenuItem, wonton.id, populate_existing=True)
    assert item.price == 450
    assert item.modification_count == 0


@pytest.mark.asyncio
async def test_seed_menu_loads_starter_menu_once(db):
    result = await menu_ops.seed_menu(db)

    assert result.seeded is True
    assert (result.categories, result.items) == (6, 21)
    categories = (await db.execute(select(Category))).scalars().all()
    assert sorted(c.name for c in categories) == sorted(c["name"] for c in seed_data.CATEGORIES)

    items = await menu_ops.list_items(db)
    assert len(items) == 21
    assert all(i.modification_count == 0 for i in items)
    har_gow = next(i for i in items if i.name == "Shrimp Har Gow (4pc)")
    assert har_gow.is_available is False
    for item in items:
        history = await archive_ops.history_for(db, item.id)
        assert [e.change_type for e in history] == ["created"]

    again = await menu_ops.seed_menu(db)
    assert again.seeded is False
    assert again.message == "Database already has data. Skipping seed."
    assert len(await menu_ops.list_items(db)) == 21


@pytest.mark.asyncio
async def test_seed_menu_skips_when_categories_exist(db, soup):
    result = await menu_ops.seed_menu(db)
    assert result.seeded is False
    assert await menu_ops.list_items(db) == []
