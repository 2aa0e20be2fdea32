"""
Menu Board — Layout Pydantic schemas
"""
from typing import Literal

from pydantic import BaseModel

from menuboard.models.layout import LayoutType, PageType


class LayoutConfig(BaseModel):
    columns_per_row: int | None = None
    show_checkboxes: bool | None = None
    show_item_numbers: bool | None = None
    show_images: bool | None = None
    category_style: Literal["header", "tabs", "colored"] | None = None
    show_quantity_input: bool | None = None
    color_scheme: Literal["classic-red", "jade-green", "gold"] | None = None


class LayoutCreate(BaseModel):
    layout_type: LayoutType
    page_type: PageType = PageType.DISPLAY
    config: LayoutConfig
    is_active: bool = False


class LayoutUpdate(BaseModel):
    layout_type: LayoutType | None = None
    config: LayoutConfig | None = None
    is_active: bool | None = None


class LayoutOut(BaseModel):
    id: str | None
    layout_type: LayoutType
    page_type: PageType
    config: LayoutConfig
    is_active: bool

    model_config = {"from_attributes": True}
