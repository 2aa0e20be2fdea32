"""
Menu Board — Catalog routes (events, catering, school meals)
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.db import catalog_ops
from menuboard.db.database import get_db
from menuboard.schemas.catalog import (
    CateringMenuCreate,
    CateringMenuOut,
    CateringMenuUpdate,
    EventPackageCreate,
    EventPackageOut,
    EventPackageUpdate,
    SchoolMealCreate,
    SchoolMealOut,
    SchoolMealUpdate,
)

router = APIRouter(prefix="/catalog", tags=["catalog"])
admin_router = APIRouter(prefix="/admin/catalog", tags=["admin"])


# ─── Public ───────────────────────────────────────────────────────────────────

@router.get("/events", response_model=list[EventPackageOut])
async def list_event_packages(db: AsyncSession = Depends(get_db)):
    return await catalog_ops.list_event_packages(db, active_only=True)


@router.get("/catering", response_model=list[CateringMenuOut])
async def list_catering_menus(db: AsyncSession = Depends(get_db)):
    return await catalog_ops.list_catering_menus(db, active_only=True)


@router.get("/school-meals", response_model=list[SchoolMealOut])
async def list_school_meals(
    year: int | None = None,
    week_number: int | None = None,
    db: AsyncSession = Depends(get_db),
):
    return await catalog_ops.list_school_meals(db, year, week_number, active_only=True)


# ─── Admin: event packages ────────────────────────────────────────────────────

@admin_router.get("/events", response_model=list[EventPackageOut])
async def admin_list_event_packages(db: AsyncSession = Depends(get_db)):
    return await catalog_ops.list_event_packages(db)


@admin_router.post("/events", response_model=EventPackageOut, status_code=status.HTTP_201_CREATED)
async def create_event_package(payload: EventPackageCreate, db: AsyncSession = Depends(get_db)):
    return await catalog_ops.create_event_package(db, payload)


@admin_router.patch("/events/{package_id}", response_model=EventPackageOut)
async def update_event_package(package_id: str, payload: EventPackageUpdate, db: AsyncSession = Depends(get_db)):
    return await catalog_ops.update_event_package(db, package_id, payload)


@admin_router.delete("/events/{package_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event_package(package_id: str, db: AsyncSession = Depends(get_db)):
    await catalog_ops.delete_event_package(db, package_id)


# ─── Admin: catering menus ────────────────────────────────────────────────────

@admin_router.get("/catering", response_model=list[CateringMenuOut])
async def admin_list_catering_menus(db: AsyncSession = Depends(get_db)):
    return await catalog_ops.list_catering_menus(db)


@admin_router.post("/catering", response_model=CateringMenuOut, status_code=status.HTTP_201_CREATED)
async def create_catering_menu(payload: CateringMenuCreate, db: AsyncSession = Depends(get_db)):
    return await catalog_ops.create_catering_menu(db, payload)


@admin_router.patch("/catering/{menu_id}", response_model=CateringMenuOut)
async def update_catering_menu(menu_id: str, payload: CateringMenuUpdate, db: AsyncSession = Depends(get_db)):
    return await catalog_ops.update_catering_menu(db, menu_id, payload)


@admin_router.delete("/catering/{menu_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_catering_menu(menu_id: str, db: AsyncSession = Depends(get_db)):
    await catalog_ops.delete_catering_menu(db, menu_id)


# ─── Admin: school meals ──────────────────────────────────────────────────────

@admin_router.get("/school-meals", response_model=list[SchoolMealOut])
async def admin_list_school_meals(
    year: int | None = None,
    week_number: int | None = None,
    db: AsyncSession = Depends(get_db),
):
    return await catalog_ops.list_school_meals(db, year, week_number)


@admin_router.post("/school-meals", response_model=SchoolMealOut, status_code=status.HTTP_201_CREATED)
async def create_school_meal(payload: SchoolMealCreate, db: AsyncSession = Depends(get_db)):
    """409 when a meal already exists for that day of that week."""
    return await catalog_ops.create_school_meal(db, payload)


@admin_router.patch("/school-meals/{meal_id}", response_model=SchoolMealOut)
async def update_school_meal(meal_id: str, payload: SchoolMealUpdate, db: AsyncSession = Depends(get_db)):
    return await catalog_ops.update_school_meal(db, meal_id, payload)


@admin_router.delete("/school-meals/{meal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_school_meal(meal_id: str, db: AsyncSession = Depends(get_db)):
    await catalog_ops.delete_school_meal(db, meal_id)
