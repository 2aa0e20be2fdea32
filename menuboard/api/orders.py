"""
Menu Board — Cart and order routes

The cart is addressed by a client-generated session id. Staff views
(list, complete, delete) live under /admin/orders.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.db import order_ops
from menuboard.db.database import get_db
from menuboard.models.order import OrderStatus
from menuboard.schemas.order import (
    CreateOrderRequest,
    NotesRequest,
    OrderItemRequest,
    OrderOut,
    QuantityRequest,
    TableRequest,
)

router = APIRouter(prefix="/orders/session/{session_id}", tags=["orders"])
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@router.get("", response_model=OrderOut | None)
async def get_order(session_id: str, db: AsyncSession = Depends(get_db)):
    """The session's active order, or null."""
    return await order_ops.get_order(db, session_id)


@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
async def create_order(session_id: str, payload: CreateOrderRequest, db: AsyncSession = Depends(get_db)):
    return await order_ops.create_order(db, session_id, payload.table_number)


@router.post("/items", response_model=OrderOut)
async def add_item(session_id: str, payload: OrderItemRequest, db: AsyncSession = Depends(get_db)):
    """Append a line, opening an order for the session if needed."""
    return await order_ops.add_item(db, session_id, payload)


@router.patch("/items/{line_id}", response_model=OrderOut)
async def update_quantity(
    session_id: str,
    line_id: str,
    payload: QuantityRequest,
    db: AsyncSession = Depends(get_db),
):
    return await order_ops.update_quantity(db, session_id, line_id, payload.quantity)


@router.delete("/items/{line_id}", response_model=OrderOut)
async def remove_item(session_id: str, line_id: str, db: AsyncSession = Depends(get_db)):
    return await order_ops.remove_item(db, session_id, line_id)


@router.put("/notes", response_model=OrderOut)
async def update_notes(session_id: str, payload: NotesRequest, db: AsyncSession = Depends(get_db)):
    return await order_ops.update_notes(db, session_id, payload.notes)


@router.put("/table", response_model=OrderOut)
async def update_table_number(session_id: str, payload: TableRequest, db: AsyncSession = Depends(get_db)):
    return await order_ops.update_table_number(db, session_id, payload.table_number)


@router.post("/submit", response_model=OrderOut)
async def submit_order(session_id: str, db: AsyncSession = Depends(get_db)):
    return await order_ops.submit(db, session_id)


@router.post("/clear", response_model=OrderOut | None)
async def clear_order(session_id: str, db: AsyncSession = Depends(get_db)):
    return await order_ops.clear_order(db, session_id)


# ─── Admin ────────────────────────────────────────────────────────────────────

@admin_router.get("", response_model=list[OrderOut])
async def list_orders(
    status_filter: OrderStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """Orders newest first, optionally filtered by status."""
    return await order_ops.list_orders(db, status_filter, limit)


@admin_router.post("/{order_id}/complete", response_model=OrderOut)
async def complete_order(order_id: str, db: AsyncSession = Depends(get_db)):
    return await order_ops.complete(db, order_id)


@admin_router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(order_id: str, db: AsyncSession = Depends(get_db)):
    await order_ops.delete_order(db, order_id)
