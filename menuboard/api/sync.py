"""
Menu Board — External sync routes

/api/sync is called by the spreadsheet's edit hook with the rows to
reconcile. Admins can also trigger a pull from Google Sheets directly.
"""
import hmac
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.core.config import get_settings
from menuboard.db import sync_ops
from menuboard.db.database import get_db
from menuboard.schemas.sync import SheetsSyncRequest, SyncPayload, SyncResponse, SyncStateOut

settings = get_settings()
router = APIRouter(prefix="/api/sync", tags=["sync"])
admin_router = APIRouter(prefix="/admin/sync", tags=["admin"])


def _check_webhook_secret(secret: str | None) -> None:
    if not settings.WEBHOOK_SECRET:
        return
    if secret is None or not hmac.compare_digest(secret, settings.WEBHOOK_SECRET):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook secret")


@router.post("", response_model=SyncResponse)
async def sync_webhook(
    payload: SyncPayload,
    x_webhook_secret: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
):
    """
    Reconcile pushed categories and/or menu items. Categories go first so
    items in the same payload can reference new categories. Per-row
    failures are returned in the result, not as an error status.
    """
    _check_webhook_secret(x_webhook_secret)
    if payload.categories is None and payload.menu_items is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing categories or menu_items in payload")

    response = SyncResponse(success=True)
    if payload.categories is not None:
        response.categories = await sync_ops.sync_categories(db, payload.categories)
    if payload.menu_items is not None:
        response.items = await sync_ops.sync_menu_items(db, payload.menu_items)
    return response


@router.get("")
async def sync_webhook_status():
    return {"status": "ok", "endpoint": "sync", "timestamp": datetime.now(tz=timezone.utc).isoformat()}


@admin_router.post("/sheets", response_model=SyncResponse)
async def sync_google_sheets(payload: SheetsSyncRequest, db: AsyncSession = Depends(get_db)):
    spreadsheet_id = payload.spreadsheet_id or settings.GOOGLE_SHEETS_ID
    if not spreadsheet_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No spreadsheet id given or configured")
    return await sync_ops.sync_from_google_sheets(db, spreadsheet_id, payload.api_key)


@admin_router.get("/state", response_model=SyncStateOut)
async def sync_state(db: AsyncSession = Depends(get_db)):
    return await sync_ops.get_sync_state(db)
