"""
Menu Board — Display layout models

[CONFIG DATA] display_layouts, layout_scopes

layout_scopes holds one row per page type mapping the scope to its
active layout. version_id is the optimistic locking column; activation
is a compare-and-swap on it (see db/layout_ops.py).
"""
import uuid
from enum import Enum as PyEnum
from typing import Any

from sqlalchemy import JSON, Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from menuboard.db.database import Base


class LayoutType(str, PyEnum):
    STANDARD_LIST = "standard-list"
    DIM_SUM_GRID = "dim-sum-grid"
    CARD_GRID = "card-grid"
    TRADITIONAL_CHINESE = "traditional-chinese"


class PageType(str, PyEnum):
    DISPLAY = "display"  # mobile and TV pages
    ORDER = "order"


class DisplayLayout(Base):
    __tablename__ = "display_layouts"
    __table_args__ = (Index("ix_display_layouts_page_active", "page_type", "is_active"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    layout_type: Mapped[str] = mapped_column(String(32), nullable=False)
    page_type: Mapped[str] = mapped_column(String(16), nullable=False, default=PageType.DISPLAY.value)
    config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class LayoutScope(Base):
    __tablename__ = "layout_scopes"

    page_type: Mapped[str] = mapped_column(String(16), primary_key=True)
    active_layout_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)  # optimistic lock
