"""
Menu Board — Display layout routes
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.db import layout_ops
from menuboard.db.database import get_db
from menuboard.models.layout import PageType
from menuboard.schemas.layout import LayoutCreate, LayoutOut, LayoutUpdate

router = APIRouter(prefix="/layouts", tags=["layouts"])
admin_router = APIRouter(prefix="/admin/layouts", tags=["admin"])


@router.get("/active", response_model=LayoutOut)
async def active_layout(page_type: PageType = Query(PageType.DISPLAY), db: AsyncSession = Depends(get_db)):
    """The active layout for a page type; falls back to the built-in default."""
    return await layout_ops.get_active_layout(db, page_type)


@router.get("", response_model=list[LayoutOut])
async def list_layouts(page_type: PageType | None = None, db: AsyncSession = Depends(get_db)):
    return await layout_ops.list_layouts(db, page_type)


@admin_router.post("", response_model=LayoutOut, status_code=status.HTTP_201_CREATED)
async def create_layout(payload: LayoutCreate, db: AsyncSession = Depends(get_db)):
    return await layout_ops.create_layout(db, payload)


@admin_router.patch("/{layout_id}", response_model=LayoutOut)
async def update_layout(layout_id: str, payload: LayoutUpdate, db: AsyncSession = Depends(get_db)):
    return await layout_ops.update_layout(db, layout_id, payload)


@admin_router.post("/{layout_id}/set-active", response_model=LayoutOut)
async def set_active_layout(layout_id: str, db: AsyncSession = Depends(get_db)):
    """
    Make this the only active layout of its page type.
    Concurrent activations are retried with backoff; 409 if still conflicting.
    """
    return await layout_ops.set_active_layout(db, layout_id)


@admin_router.delete("/{layout_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_layout(layout_id: str, db: AsyncSession = Depends(get_db)):
    await layout_ops.delete_layout(db, layout_id)


@admin_router.post("/initialize")
async def initialize_default_layouts(db: AsyncSession = Depends(get_db)):
    return {"seeded": await layout_ops.initialize_default_layouts(db)}
