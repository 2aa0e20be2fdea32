"""
Menu Board — Settings Pydantic schemas
"""
from typing import Any

from pydantic import BaseModel, Field


class ThemeRequest(BaseModel):
    theme: dict[str, Any]


class PresetRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    theme: dict[str, Any]
    is_default: bool = False


class PresetOut(BaseModel):
    id: str
    name: str
    theme: dict[str, Any]
    is_default: bool
    created_at: int

    model_config = {"from_attributes": True}


class MenuSchedule(BaseModel):
    week_number: int = Field(..., ge=1, le=53)
    month_label: str
    year: int
    start_date: str
    end_date: str


class AnimationsRequest(BaseModel):
    enabled: bool


class ExchangeRates(BaseModel):
    USD: float
    CZK: float
    EUR: float
    CNY: float


class CustomerInfoSection(BaseModel):
    title: str
    title_local: str | None = None
    description: str
    description_local: str | None = None


class CustomerInfo(BaseModel):
    """Information panels shown to customers (opening hours, ordering notes)."""
    sections: list[CustomerInfoSection]
