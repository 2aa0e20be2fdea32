"""
Menu Board — Menu database models

[CONFIG DATA]   categories, menu_items — edited by admin or spreadsheet sync
[HISTORY DATA]  menu_archive, daily_snapshots — append/replace only, never edited by hand
"""
import uuid
from typing import Any

from sqlalchemy import JSON, BigInteger, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from menuboard.db.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Category(Base):
    """
    [CONFIG DATA] — `name` is the natural key used by spreadsheet sync.
    """
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name_local: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subtitle: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, index=True, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Category name={self.name} sort={self.sort_order}>"


class MenuItem(Base):
    """
    [CONFIG DATA] — every accepted mutation bumps modification_count by one
    and writes exactly one MenuArchive row in the same transaction.
    version_id guards those writes: UPDATE ... WHERE version_id = <read value>.

    category_id is indexed but not a foreign key: deleting a category
    leaves its items orphaned.
    """
    __tablename__ = "menu_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False)  # smallest currency unit
    category_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, index=True, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    added_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_modified_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    modification_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)  # optimistic lock
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # Localised names
    name_local: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name_chinese: Mapped[str | None] = mapped_column(String(255), nullable=True)
    item_code: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # EU allergen system
    allergen_numbers: Mapped[list[int] | None] = mapped_column(JSON, nullable=True)
    allergen_codes: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    # Display metadata
    is_featured: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    is_sweet: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    is_gluten_free: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    portion_grams: Mapped[int | None] = mapped_column(Integer, nullable=True)
    serving_size: Mapped[str | None] = mapped_column(String(255), nullable=True)
    price_tiers: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    # Ordering options
    modifiers: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    dietary_tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<MenuItem name={self.name} rev={self.modification_count}>"


class MenuArchive(Base):
    """
    [HISTORY DATA] — append-only. No code path updates or deletes a row.
    menu_item_id is not a foreign key so history outlives the item.
    """
    __tablename__ = "menu_archive"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    menu_item_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    snapshot: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    change_type: Mapped[str] = mapped_column(String(16), nullable=False)
    changed_at: Mapped[int] = mapped_column(BigInteger, index=True, nullable=False)


class DailySnapshot(Base):
    """
    [HISTORY DATA] — one row per calendar date; re-running replaces `snapshot`.
    """
    __tablename__ = "daily_snapshots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    date: Mapped[str] = mapped_column(String(10), unique=True, index=True, nullable=False)
    snapshot: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
