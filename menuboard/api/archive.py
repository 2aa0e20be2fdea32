"""
Menu Board — Menu history and daily snapshot routes (admin)
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.db import archive_ops, snapshot_ops
from menuboard.db.database import get_db
from menuboard.schemas.menu import (
    ArchiveEntryOut,
    DailySnapshotOut,
    ItemStats,
    MenuStats,
    SnapshotRequest,
)

admin_router = APIRouter(prefix="/admin/archive", tags=["admin"])


@admin_router.get("/items/{menu_item_id}", response_model=list[ArchiveEntryOut])
async def item_history(menu_item_id: str, db: AsyncSession = Depends(get_db)):
    """Every recorded change of one item, newest first. Works for deleted items too."""
    return await archive_ops.history_for(db, menu_item_id)


@admin_router.get("/items/{menu_item_id}/stats", response_model=ItemStats)
async def item_stats(menu_item_id: str, db: AsyncSession = Depends(get_db)):
    return await archive_ops.item_stats(db, menu_item_id)


@admin_router.get("/recent", response_model=list[ArchiveEntryOut])
async def recent_changes(limit: int = Query(50, ge=1, le=500), db: AsyncSession = Depends(get_db)):
    return await archive_ops.recent(db, limit)


@admin_router.get("/range", response_model=list[ArchiveEntryOut])
async def changes_in_range(
    start: int = Query(..., ge=0),
    end: int = Query(..., ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Changes with start <= changed_at <= end (epoch milliseconds)."""
    return await archive_ops.in_range(db, start, end)


@admin_router.get("/stats", response_model=MenuStats)
async def menu_stats(db: AsyncSession = Depends(get_db)):
    return await archive_ops.menu_stats(db)


# ─── Snapshots ────────────────────────────────────────────────────────────────

@admin_router.post("/snapshots", status_code=status.HTTP_201_CREATED)
async def create_snapshot(payload: SnapshotRequest, db: AsyncSession = Depends(get_db)):
    """Snapshot the menu for a date (default today, UTC). Repeating a date replaces it."""
    snapshot_id = await snapshot_ops.create_daily_snapshot(db, payload.date)
    return {"id": snapshot_id}


@admin_router.get("/snapshots", response_model=list[str])
async def list_snapshot_dates(db: AsyncSession = Depends(get_db)):
    return await snapshot_ops.list_snapshot_dates(db)


@admin_router.get("/snapshots/{date}", response_model=DailySnapshotOut)
async def get_snapshot(date: str, db: AsyncSession = Depends(get_db)):
    return await snapshot_ops.get_snapshot(db, date)
