"""
Menu Board — Session-scoped customer orders

[TRANSACTIONAL DATA] State machine:
    active --submit--> submitted --complete--> completed

At most one active order per session. Line items are addressed by their
line_id. subtotal/tax/total are recomputed from the lines on every item
mutation. Concurrent edits to the same cart are last-write-wins.
"""
import uuid
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.core import live
from menuboard.core.clock import now_ms
from menuboard.core.config import get_settings
from menuboard.core.errors import EmptyOrder, NotFound
from menuboard.models.order import CustomerOrder, OrderStatus
from menuboard.schemas.order import OrderItemRequest

settings = get_settings()
logger = logging.getLogger(__name__)


def compute_totals(items: list[dict[str, Any]], tax_rate: float | None = None) -> tuple[int, int, int]:
    """(subtotal, tax, total) in the smallest currency unit; tax rounds half up."""
    rate = Decimal(str(settings.TAX_RATE if tax_rate is None else tax_rate))
    subtotal = sum(line["unit_price"] * line["quantity"] for line in items)
    tax = int((Decimal(subtotal) * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return subtotal, tax, subtotal + tax


def recompute_totals(order: CustomerOrder) -> None:
    order.subtotal, order.tax, order.total = compute_totals(order.items)


def _new_line(item: OrderItemRequest) -> dict[str, Any]:
    line = item.model_dump(mode="json", exclude_none=True)
    line["line_id"] = str(uuid.uuid4())
    return line


def _set_items(order: CustomerOrder, items: list[dict[str, Any]]) -> None:
    # Always assign a new list: in-place edits of a JSON column are not tracked
    order.items = items
    recompute_totals(order)
    order.updated_at = now_ms()


async def _changed(order: CustomerOrder) -> None:
    await live.notify(live.order_topic(order.session_id), live.ORDERS)


# ─── Reads ────────────────────────────────────────────────────────────────────

async def find_active_order(db: AsyncSession, session_id: str) -> CustomerOrder | None:
    result = await db.execute(
        select(CustomerOrder)
        .where(CustomerOrder.session_id == session_id, CustomerOrder.status == OrderStatus.ACTIVE.value)
        .order_by(CustomerOrder.created_at)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def get_order(db: AsyncSession, session_id: str) -> CustomerOrder | None:
    """The session's active order, if any."""
    return await find_active_order(db, session_id)


async def list_orders(
    db: AsyncSession,
    status: OrderStatus | None = None,
    limit: int = 50,
) -> list[CustomerOrder]:
    query = select(CustomerOrder).order_by(CustomerOrder.created_at.desc()).limit(limit)
    if status is not None:
        query = query.where(CustomerOrder.status == status.value)
    result = await db.execute(query.execution_options(populate_existing=True))
    return list(result.scalars().all())


async def _require_active(db: AsyncSession, session_id: str) -> CustomerOrder:
    order = await find_active_order(db, session_id)
    if order is None:
        raise NotFound("No active order found")
    return order


# ─── Cart mutations ───────────────────────────────────────────────────────────

async def create_order(db: AsyncSession, session_id: str, table_number: str | None = None) -> CustomerOrder:
    """Open an order for the session, or return the one already active."""
    order = await find_active_order(db, session_id)
    if order is not None:
        return order

    order = CustomerOrder(
        id=str(uuid.uuid4()),
        session_id=session_id,
        status=OrderStatus.ACTIVE.value,
        items=[],
        subtotal=0,
        tax=0,
        total=0,
        table_number=table_number,
        created_at=now_ms(),
    )
    db.add(order)
    await db.commit()
    await _changed(order)
    return order


async def add_item(db: AsyncSession, session_id: str, item: OrderItemRequest) -> CustomerOrder:
    order = await find_active_order(db, session_id)
    if order is None:
        order = CustomerOrder(
            id=str(uuid.uuid4()),
            session_id=session_id,
            status=OrderStatus.ACTIVE.value,
            created_at=now_ms(),
        )
        db.add(order)
        _set_items(order, [_new_line(item)])
    else:
        _set_items(order, [*order.items, _new_line(item)])

    await db.commit()
    await _changed(order)
    return order


async def update_quantity(db: AsyncSession, session_id: str, line_id: str, quantity: int) -> CustomerOrder:
    """quantity <= 0 removes the line."""
    order = await _require_active(db, session_id)
    if not any(line["line_id"] == line_id for line in order.items):
        raise NotFound("Order line not found")

    if quantity <= 0:
        items = [line for line in order.items if line["line_id"] != line_id]
    else:
        items = [
            {**line, "quantity": quantity} if line["line_id"] == line_id else line
            for line in order.items
        ]
    _set_items(order, items)
    await db.commit()
    await _changed(order)
    return order


async def remove_item(db: AsyncSession, session_id: str, line_id: str) -> CustomerOrder:
    return await update_quantity(db, session_id, line_id, 0)


async def update_notes(db: AsyncSession, session_id: str, notes: str) -> CustomerOrder:
    order = await _require_active(db, session_id)
    order.notes = notes
    order.updated_at = now_ms()
    await db.commit()
    await _changed(order)
    return order


async def update_table_number(db: AsyncSession, session_id: str, table_number: str) -> CustomerOrder:
    order = await _require_active(db, session_id)
    order.table_number = table_number
    order.updated_at = now_ms()
    await db.commit()
    await _changed(order)
    return order


async def clear_order(db: AsyncSession, session_id: str) -> CustomerOrder | None:
    """Empty the cart, keeping the order id and status. No-op without an active order."""
    order = await find_active_order(db, session_id)
    if order is None:
        return None
    _set_items(order, [])
    await db.commit()
    await _changed(order)
    return order


# ─── Status transitions ───────────────────────────────────────────────────────

async def submit(db: AsyncSession, session_id: str) -> CustomerOrder:
    order = await _require_active(db, session_id)
    if not order.items:
        raise EmptyOrder("Cannot submit an empty order")

    order.status = OrderStatus.SUBMITTED.value
    order.updated_at = now_ms()
    await db.commit()
    logger.info("Order %s submitted (%d lines, total %d)", order.id, len(order.items), order.total)
    await _changed(order)
    return order


async def _require_order(db: AsyncSession, order_id: str) -> CustomerOrder:
    order = await db.get(CustomerOrder, order_id, populate_existing=True)
    if order is None:
        raise NotFound("Order not found")
    return order


async def complete(db: AsyncSession, order_id: str) -> CustomerOrder:
    """Mark an order completed. Completing a completed order changes nothing."""
    order = await _require_order(db, order_id)
    if order.status == OrderStatus.COMPLETED.value:
        return order

    order.status = OrderStatus.COMPLETED.value
    order.updated_at = now_ms()
    await db.commit()
    await _changed(order)
    return order


async def delete_order(db: AsyncSession, order_id: str) -> None:
    order = await _require_order(db, order_id)
    await db.delete(order)
    await db.commit()
    await _changed(order)
