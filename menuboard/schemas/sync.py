"""
Menu Board — External sync Pydantic schemas
"""
from pydantic import BaseModel, Field


class CategoryRow(BaseModel):
    name: str = Field(..., min_length=1)
    display_name: str
    sort_order: int = 0
    is_active: bool = True


class MenuItemRow(BaseModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    price: int = Field(..., ge=0)
    category_name: str
    is_available: bool = True
    sort_order: int = 0
    image_url: str | None = None


class SyncResult(BaseModel):
    """Per-batch outcome. `errors` holds one message per skipped or failed row."""
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    errors: list[str] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.created or self.updated)


class SyncPayload(BaseModel):
    categories: list[CategoryRow] | None = None
    menu_items: list[MenuItemRow] | None = None
    spreadsheet_id: str | None = None


class SyncResponse(BaseModel):
    success: bool
    categories: SyncResult | None = None
    items: SyncResult | None = None
    error: str | None = None


class SheetsSyncRequest(BaseModel):
    spreadsheet_id: str | None = None  # falls back to GOOGLE_SHEETS_ID
    api_key: str | None = None


class SyncStateOut(BaseModel):
    last_sync_at: int
    status: str
    error_message: str | None = None

    model_config = {"from_attributes": True}
