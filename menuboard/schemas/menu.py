"""
Menu Board — Menu Pydantic schemas
"""
from typing import Any, Literal

from pydantic import BaseModel, Field

Temperature = Literal["hot", "cold", "room-temp"]
NoodleType = Literal["thin", "flat", "thick", "hand-pulled", "rice", "glass", "egg"]
FryingDegree = Literal["light", "golden", "crispy"]
BrothType = Literal["clear", "bone", "spicy", "tomato", "coconut"]
SpiceLevel = Literal["mild", "medium", "hot", "extra-hot"]
DietaryTag = Literal[
    "vegetarian", "vegan", "contains-seafood", "contains-pork", "contains-beef",
    "contains-chicken", "contains-nuts", "gluten-free", "dairy-free", "halal", "kosher",
]


class ItemModifiers(BaseModel):
    temperature: list[Temperature] | None = None
    noodle_type: list[NoodleType] | None = None
    frying_degree: list[FryingDegree] | None = None
    broth_type: list[BrothType] | None = None
    spice_level: list[SpiceLevel] | None = None


class PriceTier(BaseModel):
    quantity: str
    price: int = Field(..., ge=0)


# ─── Categories ───────────────────────────────────────────────────────────────

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    display_name: str = Field(..., min_length=1, max_length=255)
    display_name_local: str | None = None
    subtitle: str | None = None
    sort_order: int = 0
    is_active: bool = True


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    display_name: str | None = Field(None, min_length=1, max_length=255)
    display_name_local: str | None = None
    subtitle: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None


class CategoryOut(BaseModel):
    id: str
    name: str
    display_name: str
    display_name_local: str | None = None
    subtitle: str | None = None
    sort_order: int
    is_active: bool

    model_config = {"from_attributes": True}


# ─── Menu items ───────────────────────────────────────────────────────────────

class _MenuItemFields(BaseModel):
    description: str | None = None
    image_url: str | None = None
    name_local: str | None = None
    name_chinese: str | None = None
    item_code: str | None = Field(None, max_length=32)
    allergen_numbers: list[int] | None = None
    allergen_codes: list[str] | None = None
    is_featured: bool | None = None
    is_sweet: bool | None = None
    is_gluten_free: bool | None = None
    portion_grams: int | None = Field(None, ge=0)
    serving_size: str | None = None
    price_tiers: list[PriceTier] | None = None
    modifiers: ItemModifiers | None = None
    dietary_tags: list[DietaryTag] | None = None


class MenuItemCreate(_MenuItemFields):
    name: str = Field(..., min_length=1, max_length=255)
    price: int = Field(..., ge=0)
    category_id: str
    is_available: bool = True
    sort_order: int = 0


class MenuItemUpdate(_MenuItemFields):
    name: str | None = Field(None, min_length=1, max_length=255)
    price: int | None = Field(None, ge=0)
    category_id: str | None = None
    is_available: bool | None = None
    sort_order: int | None = None


class MenuItemOut(_MenuItemFields):
    id: str
    name: str
    price: int
    category_id: str
    is_available: bool
    sort_order: int
    added_at: int
    last_modified_at: int
    modification_count: int

    model_config = {"from_attributes": True}


class FullMenuCategory(CategoryOut):
    items: list[MenuItemOut]


# ─── History ──────────────────────────────────────────────────────────────────

class ArchiveEntryOut(BaseModel):
    id: str
    menu_item_id: str
    snapshot: dict[str, Any]
    change_type: Literal["created", "updated", "deleted"]
    changed_at: int

    model_config = {"from_attributes": True}


class DailySnapshotOut(BaseModel):
    id: str
    date: str
    snapshot: dict[str, Any]
    created_at: int

    model_config = {"from_attributes": True}


class SnapshotRequest(BaseModel):
    date: str | None = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$")


class ItemStats(BaseModel):
    item: MenuItemOut
    total_modifications: int
    price_change_count: int
    availability_change_count: int
    days_since_added: int
    last_modified: int


class MenuStats(BaseModel):
    total_categories: int
    active_categories: int
    total_items: int
    available_items: int
    unavailable_items: int
    average_price: int
    changes_last_24h: int
    changes_last_week: int


class SeedResult(BaseModel):
    seeded: bool
    message: str
    categories: int = 0
    items: int = 0
