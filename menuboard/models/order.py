"""
Menu Board — Customer order model

[TRANSACTIONAL DATA] — one cart per client session.
Line items live in a JSON column; each line carries a stable line_id.
"""
import uuid
from enum import Enum as PyEnum
from typing import Any

from sqlalchemy import JSON, BigInteger, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from menuboard.db.database import Base


class OrderStatus(str, PyEnum):
    ACTIVE = "active"
    SUBMITTED = "submitted"
    COMPLETED = "completed"


class CustomerOrder(Base):
    """
    subtotal/tax/total are derived from `items` and only ever written by
    order_ops.recompute_totals().
    """
    __tablename__ = "customer_orders"
    __table_args__ = (Index("ix_customer_orders_session_status", "session_id", "status"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    session_id: Mapped[str] = mapped_column(String(128), index=True, nullable=False)
    status: Mapped[str] = mapped_column(String(16), index=True, nullable=False, default=OrderStatus.ACTIVE.value)
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    subtotal: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tax: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    table_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[int] = mapped_column(BigInteger, index=True, nullable=False)
    updated_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
