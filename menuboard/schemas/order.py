"""
Menu Board — Order Pydantic schemas
"""
from pydantic import BaseModel, Field

from menuboard.models.order import OrderStatus


class SelectedModifiers(BaseModel):
    noodle_type: str | None = None
    temperature: str | None = None
    spice_level: str | None = None
    broth_type: str | None = None
    frying_degree: str | None = None
    add_ons: list[str] | None = None


class OrderItemRequest(BaseModel):
    menu_item_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., ge=1, le=99)
    unit_price: int = Field(..., ge=0)
    selected_modifiers: SelectedModifiers | None = None


class OrderLine(OrderItemRequest):
    line_id: str


class CreateOrderRequest(BaseModel):
    table_number: str | None = Field(None, max_length=32)


class QuantityRequest(BaseModel):
    quantity: int = Field(..., le=99)


class NotesRequest(BaseModel):
    notes: str = Field(..., max_length=500)


class TableRequest(BaseModel):
    table_number: str = Field(..., max_length=32)


class OrderOut(BaseModel):
    id: str
    session_id: str
    status: OrderStatus
    items: list[OrderLine]
    subtotal: int
    tax: int
    total: int
    table_number: str | None = None
    notes: str | None = None
    created_at: int
    updated_at: int | None = None

    model_config = {"from_attributes": True}
