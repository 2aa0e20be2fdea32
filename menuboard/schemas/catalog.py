"""
Menu Board — Catalog Pydantic schemas
"""
from pydantic import BaseModel, Field, model_validator

from menuboard.models.catalog import Weekday


class EventPackageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    min_guests: int = Field(..., ge=1)
    max_guests: int = Field(..., ge=1)
    price_per_person: int = Field(..., ge=0)
    deposit_required: int = Field(0, ge=0)
    included_items: list[str] = Field(default_factory=list)
    is_active: bool = True

    @model_validator(mode="after")
    def _guest_range(self):
        if self.max_guests < self.min_guests:
            raise ValueError("max_guests must be >= min_guests")
        return self


class EventPackageUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    min_guests: int | None = Field(None, ge=1)
    max_guests: int | None = Field(None, ge=1)
    price_per_person: int | None = Field(None, ge=0)
    deposit_required: int | None = Field(None, ge=0)
    included_items: list[str] | None = None
    is_active: bool | None = None


class EventPackageOut(EventPackageCreate):
    id: str
    created_at: int

    model_config = {"from_attributes": True}


class CateringMenuCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    min_order_amount: int = Field(..., ge=0)
    delivery_radius_km: float | None = Field(None, ge=0)
    items: list[str] = Field(default_factory=list)
    is_active: bool = True


class CateringMenuUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    min_order_amount: int | None = Field(None, ge=0)
    delivery_radius_km: float | None = Field(None, ge=0)
    items: list[str] | None = None
    is_active: bool | None = None


class CateringMenuOut(CateringMenuCreate):
    id: str
    created_at: int

    model_config = {"from_attributes": True}


class SchoolMealCreate(BaseModel):
    week_number: int = Field(..., ge=1, le=53)
    year: int = Field(..., ge=2000)
    day_of_week: Weekday
    items: list[str] = Field(default_factory=list)
    price_per_meal: int = Field(..., ge=0)
    is_active: bool = True


class SchoolMealUpdate(BaseModel):
    week_number: int | None = Field(None, ge=1, le=53)
    year: int | None = Field(None, ge=2000)
    day_of_week: Weekday | None = None
    items: list[str] | None = None
    price_per_meal: int | None = Field(None, ge=0)
    is_active: bool | None = None


class SchoolMealOut(SchoolMealCreate):
    id: str

    model_config = {"from_attributes": True}
