"""
Menu Board — Event packages, catering menus and school meals
"""
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.core import live
from menuboard.core.clock import now_ms
from menuboard.core.errors import DuplicateConstraint, NotFound, ValidationError
from menuboard.models.catalog import WEEKDAY_ORDER, CateringMenu, EventPackage, SchoolMeal
from menuboard.schemas.catalog import (
    CateringMenuCreate,
    CateringMenuUpdate,
    EventPackageCreate,
    EventPackageUpdate,
    SchoolMealCreate,
    SchoolMealUpdate,
)


async def _list(db: AsyncSession, model, active_only: bool) -> list:
    query = select(model)
    if active_only:
        query = query.where(model.is_active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def _require(db: AsyncSession, model, record_id: str, label: str):
    record = await db.get(model, record_id)
    if record is None:
        raise NotFound(f"{label} not found")
    return record


async def _delete(db: AsyncSession, model, record_id: str, label: str) -> None:
    record = await _require(db, model, record_id, label)
    await db.delete(record)
    await db.commit()
    await live.notify(live.CATALOG)


# ─── Event packages ───────────────────────────────────────────────────────────

async def list_event_packages(db: AsyncSession, active_only: bool = False) -> list[EventPackage]:
    packages = await _list(db, EventPackage, active_only)
    return sorted(packages, key=lambda p: p.min_guests)


async def get_event_package(db: AsyncSession, package_id: str) -> EventPackage:
    return await _require(db, EventPackage, package_id, "Event package")


async def create_event_package(db: AsyncSession, payload: EventPackageCreate) -> EventPackage:
    package = EventPackage(id=str(uuid.uuid4()), created_at=now_ms(), **payload.model_dump())
    db.add(package)
    await db.commit()
    await live.notify(live.CATALOG)
    return package


async def update_event_package(db: AsyncSession, package_id: str, payload: EventPackageUpdate) -> EventPackage:
    package = await get_event_package(db, package_id)
    updates = payload.model_dump(exclude_none=True)
    min_guests = updates.get("min_guests", package.min_guests)
    max_guests = updates.get("max_guests", package.max_guests)
    if max_guests < min_guests:
        raise ValidationError("max_guests must be >= min_guests")

    for field, value in updates.items():
        setattr(package, field, value)
    await db.commit()
    await live.notify(live.CATALOG)
    return package


async def delete_event_package(db: AsyncSession, package_id: str) -> None:
    await _delete(db, EventPackage, package_id, "Event package")


# ─── Catering menus ───────────────────────────────────────────────────────────

async def list_catering_menus(db: AsyncSession, active_only: bool = False) -> list[CateringMenu]:
    return await _list(db, CateringMenu, active_only)


async def get_catering_menu(db: AsyncSession, menu_id: str) -> CateringMenu:
    return await _require(db, CateringMenu, menu_id, "Catering menu")


async def create_catering_menu(db: AsyncSession, payload: CateringMenuCreate) -> CateringMenu:
    menu = CateringMenu(id=str(uuid.uuid4()), created_at=now_ms(), **payload.model_dump())
    db.add(menu)
    await db.commit()
    await live.notify(live.CATALOG)
    return menu


async def update_catering_menu(db: AsyncSession, menu_id: str, payload: CateringMenuUpdate) -> CateringMenu:
    menu = await get_catering_menu(db, menu_id)
    for field, value in payload.model_dump(exclude_none=True).items():
        setattr(menu, field, value)
    await db.commit()
    await live.notify(live.CATALOG)
    return menu


async def delete_catering_menu(db: AsyncSession, menu_id: str) -> None:
    await _delete(db, CateringMenu, menu_id, "Catering menu")


# ─── School meals ─────────────────────────────────────────────────────────────

def _meal_sort_key(meal: SchoolMeal) -> tuple[int, int, int]:
    return meal.year, meal.week_number, WEEKDAY_ORDER.get(meal.day_of_week, 0)


async def _meal_for_day(db: AsyncSession, year: int, week_number: int, day_of_week: str) -> SchoolMeal | None:
    result = await db.execute(
        select(SchoolMeal).where(
            SchoolMeal.year == year,
            SchoolMeal.week_number == week_number,
            SchoolMeal.day_of_week == day_of_week,
        )
    )
    return result.scalars().first()


def _duplicate_meal(day_of_week: str, week_number: int, year: int) -> DuplicateConstraint:
    return DuplicateConstraint(f"A meal for {day_of_week} in week {week_number}, {year} already exists")


async def list_school_meals(
    db: AsyncSession,
    year: int | None = None,
    week_number: int | None = None,
    active_only: bool = False,
) -> list[SchoolMeal]:
    query = select(SchoolMeal)
    if year is not None:
        query = query.where(SchoolMeal.year == year)
    if week_number is not None:
        query = query.where(SchoolMeal.week_number == week_number)
    if active_only:
        query = query.where(SchoolMeal.is_active.is_(True))
    result = await db.execute(query)
    return sorted(result.scalars().all(), key=_meal_sort_key)


async def get_school_meal(db: AsyncSession, meal_id: str) -> SchoolMeal:
    return await _require(db, SchoolMeal, meal_id, "School meal")


async def create_school_meal(db: AsyncSession, payload: SchoolMealCreate) -> SchoolMeal:
    day = payload.day_of_week.value
    if await _meal_for_day(db, payload.year, payload.week_number, day):
        raise _duplicate_meal(day, payload.week_number, payload.year)

    meal = SchoolMeal(id=str(uuid.uuid4()), **payload.model_dump(mode="json"))
    db.add(meal)
    await db.commit()
    await live.notify(live.CATALOG)
    return meal


async def update_school_meal(db: AsyncSession, meal_id: str, payload: SchoolMealUpdate) -> SchoolMeal:
    meal = await get_school_meal(db, meal_id)
    updates = payload.model_dump(mode="json", exclude_none=True)

    year = updates.get("year", meal.year)
    week_number = updates.get("week_number", meal.week_number)
    day = updates.get("day_of_week", meal.day_of_week)
    clash = await _meal_for_day(db, year, week_number, day)
    if clash is not None and clash.id != meal.id:
        raise _duplicate_meal(day, week_number, year)

    for field, value in updates.items():
        setattr(meal, field, value)
    await db.commit()
    await live.notify(live.CATALOG)
    return meal


async def delete_school_meal(db: AsyncSession, meal_id: str) -> None:
    await _delete(db, SchoolMeal, meal_id, "School meal")
