"""
Menu Board — Site settings routes
"""
from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.db import settings_ops
from menuboard.db.database import get_db
from menuboard.schemas.settings import (
    AnimationsRequest,
    CustomerInfo,
    ExchangeRates,
    MenuSchedule,
    PresetOut,
    PresetRequest,
    ThemeRequest,
)

router = APIRouter(prefix="/settings", tags=["settings"])
admin_router = APIRouter(prefix="/admin/settings", tags=["admin"])


@router.get("/theme")
async def get_theme(db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    return await settings_ops.get_theme(db)


@router.get("/schedule", response_model=MenuSchedule | None)
async def get_menu_schedule(db: AsyncSession = Depends(get_db)):
    return await settings_ops.get_menu_schedule(db)


@router.get("/animations")
async def get_animations_enabled(db: AsyncSession = Depends(get_db)):
    return {"enabled": await settings_ops.get_animations_enabled(db)}


@router.get("/customer-info", response_model=CustomerInfo | None)
async def get_customer_info(db: AsyncSession = Depends(get_db)):
    return await settings_ops.get_customer_info(db)


# ─── Admin: theme ─────────────────────────────────────────────────────────────

@admin_router.put("/theme")
async def update_theme(payload: ThemeRequest, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    return await settings_ops.update_theme(db, payload.theme)


@admin_router.post("/theme/reset")
async def reset_theme(db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    return await settings_ops.reset_theme(db)


@admin_router.get("/presets", response_model=list[PresetOut])
async def list_presets(db: AsyncSession = Depends(get_db)):
    return await settings_ops.list_presets(db)


@admin_router.post("/presets", response_model=PresetOut, status_code=status.HTTP_201_CREATED)
async def save_preset(payload: PresetRequest, db: AsyncSession = Depends(get_db)):
    """Create a preset, or overwrite the one with the same name."""
    return await settings_ops.save_preset(db, payload)


@admin_router.get("/presets/{name}", response_model=PresetOut)
async def get_preset(name: str, db: AsyncSession = Depends(get_db)):
    return await settings_ops.get_preset(db, name)


@admin_router.delete("/presets/{name}")
async def delete_preset(name: str, db: AsyncSession = Depends(get_db)):
    return {"deleted": await settings_ops.delete_preset(db, name)}


@admin_router.post("/presets/{name}/load")
async def load_preset(name: str, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    return await settings_ops.load_preset(db, name)


# ─── Admin: schedule, animations, customer info, rates ────────────────────────

@admin_router.put("/schedule", response_model=MenuSchedule)
async def update_menu_schedule(payload: MenuSchedule, db: AsyncSession = Depends(get_db)):
    return await settings_ops.update_menu_schedule(db, payload)


@admin_router.put("/animations")
async def update_animations_enabled(payload: AnimationsRequest, db: AsyncSession = Depends(get_db)):
    return {"enabled": await settings_ops.update_animations_enabled(db, payload.enabled)}


@admin_router.put("/customer-info", response_model=CustomerInfo)
async def update_customer_info(payload: CustomerInfo, db: AsyncSession = Depends(get_db)):
    return await settings_ops.update_customer_info(db, payload)


@admin_router.post("/exchange-rates/refresh", response_model=ExchangeRates | None)
async def refresh_exchange_rates(db: AsyncSession = Depends(get_db)):
    """Pull current rates into the stored theme. null when no theme is stored yet."""
    return await settings_ops.refresh_exchange_rates(db)
