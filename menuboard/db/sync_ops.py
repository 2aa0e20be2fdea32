"""
Menu Board — Upsert reconciler for externally sourced menu batches

Rows are matched to existing records by natural key (`name`). A rename
upstream therefore creates a new record and leaves the old one in place.

Each row commits on its own: a failing row is rolled back and recorded in
the batch result, rows already processed stay committed, and the batch
carries on. Matched items are re-read inside their row and written with
the same version check as admin edits.
"""
import asyncio
import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from urllib.parse import quote

import httpx
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.core import live
from menuboard.core.clock import now_ms
from menuboard.core.config import get_settings
from menuboard.core.errors import ExternalFetchError, UnresolvedForeignKey
from menuboard.core.optimistic_lock import StaleDataError, with_optimistic_retry
from menuboard.db.menu_ops import apply_item_update, insert_item
from menuboard.models.menu import Category, MenuItem
from menuboard.models.settings import SYNC_STATE_ID, SyncState
from menuboard.schemas.sync import CategoryRow, MenuItemRow, SyncResponse, SyncResult

settings = get_settings()
logger = logging.getLogger(__name__)

CATEGORY_FIELDS = ("display_name", "sort_order", "is_active")
ITEM_FIELDS = ("description", "price", "category_id", "is_available", "sort_order", "image_url")

CATEGORIES_RANGE = "Categories!A2:D"
ITEMS_RANGE = "Menu Items!A2:F"


def _changed_fields(record, incoming: dict, fields: tuple[str, ...]) -> dict:
    return {f: incoming[f] for f in fields if getattr(record, f) != incoming[f]}


async def _categories_by_name(db: AsyncSession) -> dict[str, Category]:
    result = await db.execute(select(Category))
    return {c.name: c for c in result.scalars().all()}


# ─── Reconcilers ──────────────────────────────────────────────────────────────

async def sync_categories(db: AsyncSession, rows: list[CategoryRow]) -> SyncResult:
    result = SyncResult()
    existing = await _categories_by_name(db)

    for row in rows:
        incoming = row.model_dump()
        try:
            category = existing.get(row.name)
            if category is None:
                category = Category(id=str(uuid.uuid4()), **incoming)
                db.add(category)
                await db.commit()
                existing[row.name] = category
                result.created += 1
                continue

            changes = _changed_fields(category, incoming, CATEGORY_FIELDS)
            if not changes:
                result.unchanged += 1
                continue
            for field, value in changes.items():
                setattr(category, field, value)
            await db.commit()
            result.updated += 1
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning("Category row '%s' failed: %s", row.name, exc)
            result.errors.append(f"Category '{row.name}': {exc.__class__.__name__}")
            existing = await _categories_by_name(db)

    if result.changed:
        await live.notify(live.MENU)
    return result


@with_optimistic_retry()
async def _reconcile_item(db: AsyncSession, incoming: dict) -> str:
    """
    Create, update or leave one item, committing on its own. The matched
    item is re-read here so the diff is taken against its current state.
    """
    result = await db.execute(
        select(MenuItem)
        .where(MenuItem.name == incoming["name"])
        .order_by(MenuItem.added_at)
        .limit(1)
        .execution_options(populate_existing=True)
    )
    item = result.scalar_one_or_none()
    if item is None:
        insert_item(db, incoming)
        await db.commit()
        return "created"

    changes = _changed_fields(item, incoming, ITEM_FIELDS)
    if not changes:
        return "unchanged"
    await apply_item_update(db, item, changes)
    await db.commit()
    return "updated"


async def sync_menu_items(db: AsyncSession, rows: list[MenuItemRow]) -> SyncResult:
    result = SyncResult()
    categories = await _categories_by_name(db)

    for row in rows:
        try:
            category = categories.get(row.category_name)
            if category is None:
                raise UnresolvedForeignKey(f"Category not found: {row.category_name}")

            incoming = row.model_dump(exclude={"category_name"})
            incoming["category_id"] = category.id
            outcome = await _reconcile_item(db, incoming)
            setattr(result, outcome, getattr(result, outcome) + 1)
        except (UnresolvedForeignKey, StaleDataError) as exc:
            result.errors.append(exc.message)
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning("Menu item row '%s' failed: %s", row.name, exc)
            result.errors.append(f"Menu item '{row.name}': {exc.__class__.__name__}")
            categories = await _categories_by_name(db)

    if result.changed:
        await live.notify(live.MENU)
    return result


# ─── Sync state ───────────────────────────────────────────────────────────────

async def get_sync_state(db: AsyncSession) -> SyncState:
    state = await db.get(SyncState, SYNC_STATE_ID)
    if state is None:
        return SyncState(id=SYNC_STATE_ID, last_sync_at=0, status="idle", error_message=None)
    return state


async def set_sync_state(db: AsyncSession, status: str, error_message: str | None = None) -> None:
    state = await db.get(SyncState, SYNC_STATE_ID)
    if state is None:
        state = SyncState(id=SYNC_STATE_ID)
        db.add(state)
    state.last_sync_at = now_ms()
    state.status = status
    state.error_message = error_message
    await db.commit()


# ─── Google Sheets ────────────────────────────────────────────────────────────

def _cell(row: list[str], index: int, default: str = "") -> str:
    return row[index].strip() if index < len(row) else default


def _as_int(value: str, default: int = 0) -> int:
    try:
        return int(value)
    except ValueError:
        return default


def _as_bool(value: str) -> bool:
    return (value or "true").lower() == "true"


def parse_category_rows(values: list[list[str]]) -> list[CategoryRow]:
    """Columns: name, display name, sort order, active."""
    rows = []
    for row in values:
        name = _cell(row, 0)
        if not name:
            continue
        rows.append(CategoryRow(
            name=name,
            display_name=_cell(row, 1) or name,
            sort_order=_as_int(_cell(row, 2, "0")),
            is_active=_as_bool(_cell(row, 3)),
        ))
    return rows


def parse_item_rows(values: list[list[str]]) -> tuple[list[MenuItemRow], list[str]]:
    """
    Columns: name, description, price (decimal, major unit), category name,
    available, sort order. Rows with an unreadable price are reported and skipped.
    """
    rows, errors = [], []
    for row in values:
        name = _cell(row, 0)
        if not name:
            continue
        try:
            price = int((Decimal(_cell(row, 2, "0") or "0") * 100).to_integral_value(rounding=ROUND_HALF_UP))
        except (InvalidOperation, ValueError, OverflowError):
            errors.append(f"Invalid price for {name}: {_cell(row, 2)}")
            continue
        if price < 0:
            errors.append(f"Invalid price for {name}: {_cell(row, 2)}")
            continue
        rows.append(MenuItemRow(
            name=name,
            description=_cell(row, 1) or None,
            price=price,
            category_name=_cell(row, 3),
            is_available=_as_bool(_cell(row, 4)),
            sort_order=_as_int(_cell(row, 5, "0")),
        ))
    return rows, errors


async def fetch_sheet_rows(
    client: httpx.AsyncClient,
    spreadsheet_id: str,
    range_name: str,
    api_key: str,
) -> list[list[str]]:
    url = f"{settings.GOOGLE_SHEETS_BASE_URL}/{spreadsheet_id}/values/{quote(range_name, safe='!:')}"
    try:
        response = await client.get(url, params={"key": api_key})
    except httpx.TimeoutException:
        raise ExternalFetchError(f"Timed out fetching '{range_name}'")
    except httpx.RequestError as exc:
        raise ExternalFetchError(f"Failed to fetch '{range_name}': {exc}")

    if response.status_code >= 400:
        raise ExternalFetchError(f"Failed to fetch '{range_name}': {response.status_code} {response.reason_phrase}")
    return response.json().get("values", [])


async def _run_sheets_sync(
    db: AsyncSession,
    spreadsheet_id: str,
    api_key: str,
    transport: httpx.AsyncBaseTransport | None,
) -> SyncResponse:
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS, transport=transport) as client:
        category_values = await fetch_sheet_rows(client, spreadsheet_id, CATEGORIES_RANGE, api_key)
        item_values = await fetch_sheet_rows(client, spreadsheet_id, ITEMS_RANGE, api_key)

    category_result = await sync_categories(db, parse_category_rows(category_values))
    item_rows, parse_errors = parse_item_rows(item_values)
    item_result = await sync_menu_items(db, item_rows)
    item_result.errors = parse_errors + item_result.errors

    return SyncResponse(success=True, categories=category_result, items=item_result)


async def sync_from_google_sheets(
    db: AsyncSession,
    spreadsheet_id: str,
    api_key: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SyncResponse:
    """
    Pull both sheets and reconcile them. Fetch failures and the overall
    SYNC_TIMEOUT_SECONDS bound are reported in the response and recorded
    in the sync state rather than raised.
    """
    api_key = api_key or settings.GOOGLE_SHEETS_API_KEY
    await set_sync_state(db, "syncing")

    try:
        if not api_key:
            raise ExternalFetchError("Google Sheets API key not configured")
        response = await asyncio.wait_for(
            _run_sheets_sync(db, spreadsheet_id, api_key, transport),
            timeout=settings.SYNC_TIMEOUT_SECONDS,
        )
    except (ExternalFetchError, asyncio.TimeoutError) as exc:
        message = getattr(exc, "message", None) or f"Sync timed out after {settings.SYNC_TIMEOUT_SECONDS}s"
        await db.rollback()
        await set_sync_state(db, "error", message)
        logger.warning("Sheets sync of %s failed: %s", spreadsheet_id, message)
        return SyncResponse(success=False, error=message)

    await set_sync_state(db, "idle")
    logger.info(
        "Sheets sync of %s done: categories %s, items %s",
        spreadsheet_id,
        response.categories.model_dump(exclude={"errors"}),
        response.items.model_dump(exclude={"errors"}),
    )
    return response
