"""
Menu Board — Catalog models (events, catering, school meals)

[CONFIG DATA] — prices in the smallest currency unit.
"""
import uuid
from enum import Enum as PyEnum

from sqlalchemy import JSON, BigInteger, Boolean, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from menuboard.db.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Weekday(str, PyEnum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"


WEEKDAY_ORDER = {day.value: i for i, day in enumerate(Weekday, start=1)}


class EventPackage(Base):
    __tablename__ = "event_packages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    min_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    price_per_person: Mapped[int] = mapped_column(Integer, nullable=False)
    deposit_required: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    included_items: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, index=True, nullable=False, default=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class CateringMenu(Base):
    __tablename__ = "catering_menus"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    min_order_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    delivery_radius_km: Mapped[float | None] = mapped_column(Float, nullable=True)
    items: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, index=True, nullable=False, default=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class SchoolMeal(Base):
    """One meal per (year, week_number, day_of_week), enforced in catalog_ops."""
    __tablename__ = "school_meals"
    __table_args__ = (Index("ix_school_meals_week", "year", "week_number"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    day_of_week: Mapped[str] = mapped_column(String(16), nullable=False)
    items: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    price_per_meal: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
