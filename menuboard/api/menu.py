"""
Menu Board — Menu API routes

Public reads for viewers, admin writes under /admin/menu.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.db import menu_ops
from menuboard.db.database import get_db
from menuboard.schemas.menu import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    FullMenuCategory,
    MenuItemCreate,
    MenuItemOut,
    MenuItemUpdate,
    SeedResult,
)

router = APIRouter(prefix="/menu", tags=["menu"])
admin_router = APIRouter(prefix="/admin/menu", tags=["admin"])


@router.get("/categories", response_model=list[CategoryOut])
async def list_categories(db: AsyncSession = Depends(get_db)):
    """Active categories in display order."""
    return await menu_ops.list_categories(db, active_only=True)


@router.get("/items", response_model=list[MenuItemOut])
async def list_items(db: AsyncSession = Depends(get_db)):
    return await menu_ops.list_items(db)


@router.get("/categories/{category_id}/items", response_model=list[MenuItemOut])
async def items_by_category(category_id: str, db: AsyncSession = Depends(get_db)):
    return await menu_ops.items_by_category(db, category_id)


@router.get("/full", response_model=list[FullMenuCategory])
async def full_menu(db: AsyncSession = Depends(get_db)):
    """Active categories with their items, as rendered by the display pages."""
    return await menu_ops.full_menu(db)


# ─── Admin: categories ────────────────────────────────────────────────────────

@admin_router.get("/categories", response_model=list[CategoryOut])
async def admin_list_categories(db: AsyncSession = Depends(get_db)):
    """All categories, inactive included."""
    return await menu_ops.list_categories(db, active_only=False)


@admin_router.post("/categories", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryCreate, db: AsyncSession = Depends(get_db)):
    return await menu_ops.create_category(db, payload)


@admin_router.patch("/categories/{category_id}", response_model=CategoryOut)
async def update_category(category_id: str, payload: CategoryUpdate, db: AsyncSession = Depends(get_db)):
    return await menu_ops.update_category(db, category_id, payload)


@admin_router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: str, db: AsyncSession = Depends(get_db)):
    await menu_ops.delete_category(db, category_id)


# ─── Admin: items ─────────────────────────────────────────────────────────────

@admin_router.post("/items", response_model=MenuItemOut, status_code=status.HTTP_201_CREATED)
async def create_item(payload: MenuItemCreate, db: AsyncSession = Depends(get_db)):
    return await menu_ops.create_menu_item(db, payload)


@admin_router.patch("/items/{item_id}", response_model=MenuItemOut)
async def update_item(item_id: str, payload: MenuItemUpdate, db: AsyncSession = Depends(get_db)):
    return await menu_ops.update_menu_item(db, item_id, payload)


@admin_router.post("/items/{item_id}/toggle", response_model=MenuItemOut)
async def toggle_availability(item_id: str, db: AsyncSession = Depends(get_db)):
    return await menu_ops.toggle_availability(db, item_id)


@admin_router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: str, db: AsyncSession = Depends(get_db)):
    await menu_ops.delete_menu_item(db, item_id)


@admin_router.post("/migrate-images-webp")
async def migrate_images_to_webp(db: AsyncSession = Depends(get_db)):
    return {"migrated": await menu_ops.migrate_images_to_webp(db)}


@admin_router.post("/seed", response_model=SeedResult)
async def seed_menu(db: AsyncSession = Depends(get_db)):
    """Load the starter menu into an empty database; a no-op once categories exist."""
    return await menu_ops.seed_menu(db)
