"""
Upsert reconciler and the Google Sheets pull.
"""
import asyncio

import httpx
import pytest
from sqlalchemy import select

from menuboard.db import archive_ops, menu_ops, sync_ops
from menuboard.models.menu import Category, MenuItem
from menuboard.schemas.menu import MenuItemUpdate
from menuboard.schemas.sync import CategoryRow, MenuItemRow


def _names(rows):
    return sorted(r.name for r in rows)


@pytest.mark.asyncio
async def test_sync_categories_counts_created_and_unchanged(db, soup):
    result = await sync_ops.sync_categories(db, [
        CategoryRow(name="soup", display_name="Soups", sort_order=1, is_active=True),
        CategoryRow(name="salad", display_name="Salads", sort_order=2),
    ])

    assert (result.created, result.updated, result.unchanged) == (1, 0, 1)
    assert result.errors == []
    categories = (await db.execute(select(Category))).scalars().all()
    assert _names(categories) == ["salad", "soup"]


@pytest.mark.asyncio
async def test_sync_categories_updates_changed_fields(db, soup):
    result = await sync_ops.sync_categories(db, [
        CategoryRow(name="soup", display_name="Hot Soups", sort_order=1, is_active=False),
    ])
    assert (result.created, result.updated, result.unchanged) == (0, 1, 0)
    assert soup.display_name == "Hot Soups"
    assert soup.is_active is False


@pytest.mark.asyncio
async def test_unresolved_category_is_reported_and_siblings_still_sync(db, soup):
    result = await sync_ops.sync_menu_items(db, [
        MenuItemRow(name="Lemonade", price=300, category_name="drinks"),
        MenuItemRow(name="Hot and Sour", price=420, category_name="soup"),
    ])

    assert result.errors == ["Category not found: drinks"]
    assert result.created == 1
    items = (await db.execute(select(MenuItem))).scalars().all()
    assert _names(items) == ["Hot and Sour"]


@pytest.mark.asyncio
async def test_sync_items_update_bumps_revision_and_archives(db, soup, wonton):
    result = await sync_ops.sync_menu_items(db, [
        MenuItemRow(name="Wonton Soup", description="Pork wontons", price=450, category_name="soup"),
        MenuItemRow(name="Wonton Soup", description="Pork wontons", price=520, category_name="soup"),
    ])

    assert (result.created, result.updated, result.unchanged) == (0, 1, 1)
    assert wonton.price == 520
    assert wonton.modification_count == 1
    history = await archive_ops.history_for(db, wonton.id)
    assert [e.change_type for e in history] == ["updated", "created"]
    assert history[0].snapshot["price"] == 520


@pytest.mark.asyncio
async def test_sync_created_item_has_created_entry(db, soup):
    await sync_ops.sync_menu_items(db, [MenuItemRow(name="Congee", price=350, category_name="soup")])

    item = (await db.execute(select(MenuItem).where(MenuItem.name == "Congee"))).scalar_one()
    assert item.modification_count == 0
    assert item.category_id == soup.id
    history = await archive_ops.history_for(db, item.id)
    assert [e.change_type for e in history] == ["created"]


def test_parse_item_rows_converts_price_and_reports_bad_rows():
    rows, errors = sync_ops.parse_item_rows([
        ["Dumplings", "Steamed", "4.50", "dim-sum", "TRUE", "3"],
        ["Spring Roll", "", "abc", "dim-sum"],
        ["", "blank name row is ignored"],
        ["Tea", "", "1.005", "drinks", "false"],
    ])

    assert errors == ["Invalid price for Spring Roll: abc"]
    assert [(r.name, r.price, r.is_available, r.sort_order) for r in rows] == [
        ("Dumplings", 450, True, 3),
        ("Tea", 101, False, 0),
    ]
    assert rows[1].description is None


def test_parse_category_rows_defaults():
    rows = sync_ops.parse_category_rows([["soup"], ["salad", "Salads", "x", "FALSE"]])
    assert [(r.name, r.display_name, r.sort_order, r.is_active) for r in rows] == [
        ("soup", "soup", 0, True),
        ("salad", "Salads", 0, False),
    ]


def _sheets_transport(category_values, item_values, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["key"] == "test-key"
        if status_code != 200:
            return httpx.Response(status_code)
        if "Categories" in request.url.path:
            return httpx.Response(200, json={"values": category_values})
        return httpx.Response(200, json={"values": item_values})
    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_sync_from_google_sheets(db):
    transport = _sheets_transport(
        [["soup", "Soups", "1", "TRUE"]],
        [["Wonton Soup", "Pork", "4.5", "soup", "TRUE", "1"], ["Cola", "", "2", "drinks"]],
    )

    response = await sync_ops.sync_from_google_sheets(db, "sheet-1", api_key="test-key", transport=transport)

    assert response.success is True
    assert response.categories.created == 1
    assert response.items.created == 1
    assert response.items.errors == ["Category not found: drinks"]
    state = await sync_ops.get_sync_state(db)
    assert state.status == "idle"
    assert state.error_message is None


@pytest.mark.asyncio
async def test_sync_from_google_sheets_records_fetch_failure(db):
    transport = _sheets_transport([], [], status_code=403)

    response = await sync_ops.sync_from_google_sheets(db, "sheet-1", api_key="test-key", transport=transport)

    assert response.success is False
    assert "403" in response.error
    state = await sync_ops.get_sync_state(db)
    assert state.status == "error"
    assert state.error_message == response.error


@pytest.mark.asyncio
async def test_sync_from_google_sheets_without_api_key(db):
    response = await sync_ops.sync_from_google_sheets(db, "sheet-1")
    assert response.success is False
    assert response.error == "Google Sheets API key not configured"


@pytest.mark.asyncio
async def test_sync_state_defaults_to_idle(db):
    state = await sync_ops.get_sync_state(db)
    assert (state.status, state.last_sync_at) == ("idle", 0)


@pytest.mark.asyncio
async def test_sync_items_diff_against_current_row_not_preloaded_copy(db, session_factory, soup, wonton):
    async with session_factory() as admin:
        await menu_ops.update_menu_item(admin, wonton.id, MenuItemUpdate(description="Shrimp wontons"))

    result = await sync_ops.sync_menu_items(db, [
        MenuItemRow(name="Wonton Soup", description="Shrimp wontons", price=520, category_name="soup"),
    ])

    assert (result.updated, result.errors) == (1, [])
    item = await db.get(MenuItem, wonton.id, populate_existing=True)
    assert (item.price, item.description, item.modification_count) == (520, "Shrimp wontons", 2)
    history = await archive_ops.history_for(db, wonton.id)
    assert [e.snapshot["modification_count"] for e in history] == [2, 1, 0]


@pytest.mark.asyncio
async def test_sync_from_google_sheets_times_out(db, monkeypatch):
    monkeypatch.setattr(sync_ops.settings, "SYNC_TIMEOUT_SECONDS", 0.2)

    async def handler(request: httpx.Request) -> httpx.Response:
        if "Categories" in request.url.path:
            return httpx.Response(200, json={"values": [["soup", "Soups", "1", "TRUE"]]})
        await asyncio.sleep(5)
        return httpx.Response(200, json={"values": []})

    response = await sync_ops.sync_from_google_sheets(
        db, "sheet-1", api_key="test-key", transport=httpx.MockTransport(handler)
    )

    assert response.success is False
    assert response.error == "Sync timed out after 0.2s"
    state = await sync_ops.get_sync_state(db)
    assert state.status == "error"
    assert state.error_message == response.error


@pytest.mark.asyncio
async def test_rows_committed_before_a_timeout_stay_committed(db, monkeypatch):
    monkeypatch.setattr(sync_ops.settings, "SYNC_TIMEOUT_SECONDS", 0.2)

    async def stalled_items(db, rows):
        await asyncio.sleep(5)

    monkeypatch.setattr(sync_ops, "sync_menu_items", stalled_items)
    transport = _sheets_transport(
        [["soup", "Soups", "1", "TRUE"], ["salad", "Salads", "2", "TRUE"]],
        [["Wonton Soup", "Pork", "4.5", "soup"]],
    )

    response = await sync_ops.sync_from_google_sheets(db, "sheet-1", api_key="test-key", transport=transport)

    assert response.success is False
    assert (await sync_ops.get_sync_state(db)).status == "error"
    categories = (await db.execute(select(Category))).scalars().all()
    assert _names(categories) == ["salad", "soup"]
    assert (await db.execute(select(MenuItem))).scalars().all() == []
