"""MenuItem model — the tenant-owned resource."""

import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import field_validator
from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from menuboard.models.base import TimestampMixin, new_uuid, strip_text
from menuboard.models.restaurant import Currency

MAX_INGREDIENT_LENGTH = 100


class MenuCategory(StrEnum):
    APPETIZERS = "Appetizers"
    MAINS = "Mains"
    DESSERTS = "Desserts"
    BEVERAGES = "Beverages"
    SALADS = "Salads"
    SOUPS = "Soups"
    SPECIALS = "Specials"
    OTHER = "Other"


class Allergen(StrEnum):
    NUTS = "Nuts"
    DAIRY = "Dairy"
    GLUTEN = "Gluten"
    EGGS = "Eggs"
    SHELLFISH = "Shellfish"
    SOY = "Soy"
    FISH = "Fish"
    SESAME = "Sesame"


class DietaryTag(StrEnum):
    VEGETARIAN = "Vegetarian"
    VEGAN = "Vegan"
    GLUTEN_FREE = "Gluten-Free"
    KETO = "Keto"
    LOW_CARB = "Low-Carb"
    HALAL = "Halal"
    KOSHER = "Kosher"


class MenuItem(TimestampMixin, SQLModel, table=True):
    __tablename__ = "menu_items"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    restaurant_id: uuid.UUID = Field(foreign_key="restaurants.id", nullable=False, index=True)
    created_by: uuid.UUID = Field(foreign_key="users.id", nullable=False)

    name: str = Field(max_length=100, nullable=False)
    description: str = Field(default="", max_length=1000)
    price: float = Field(ge=0, nullable=False)
    currency: Currency = Field(default=Currency.USD)
    category: MenuCategory = Field(default=MenuCategory.OTHER, index=True)
    image: str = Field(default="", max_length=500)

    # JSON-encoded string lists
    ingredients: str = Field(default="[]", sa_column=Column(Text, nullable=False, server_default="[]"))
    allergens: str = Field(default="[]", sa_column=Column(Text, nullable=False, server_default="[]"))
    dietary: str = Field(default="[]", sa_column=Column(Text, nullable=False, server_default="[]"))

    is_available: bool = Field(default=True, index=True)
    is_spicy: bool = Field(default=False)
    spicy_level: int = Field(default=0, ge=0, le=5)
    preparation_time: int | None = Field(default=None, ge=0)
    calories: int | None = Field(default=None, ge=0)


class MenuItemIngredient(SQLModel, table=True):
    """One row per ingredient, so search matches whole elements, not JSON text."""

    __tablename__ = "menu_item_ingredients"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    menu_item_id: uuid.UUID = Field(foreign_key="menu_items.id", nullable=False, index=True)
    name: str = Field(max_length=MAX_INGREDIENT_LENGTH, nullable=False)


# ── Pydantic schemas ─────────────────────────────────────────

class MenuItemCreate(SQLModel):
    name: str = Field(min_length=2, max_length=100)
    description: str = Field(default="", max_length=1000)
    price: float = Field(ge=0)
    currency: Currency = Currency.USD
    category: MenuCategory
    ingredients: list[str] = Field(default_factory=list)
    allergens: list[Allergen] = Field(default_factory=list)
    dietary: list[DietaryTag] = Field(default_factory=list)
    is_spicy: bool = False
    spicy_level: int = Field(default=0, ge=0, le=5)
    preparation_time: int | None = Field(default=None, ge=0)
    calories: int | None = Field(default=None, ge=0)

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_values(cls, value: object) -> object:
        return strip_text(value)

    @field_validator("ingredients")
    @classmethod
    def clean_ingredients(cls, value: list[str]) -> list[str]:
        cleaned = [i.strip() for i in value if i.strip()]
        if any(len(i) > MAX_INGREDIENT_LENGTH for i in cleaned):
            raise ValueError(f"Ingredients are limited to {MAX_INGREDIENT_LENGTH} characters")
        return cleaned


class MenuItemUpdate(MenuItemCreate):
    """Full replacement. Availability is only changed when sent explicitly."""

    is_available: bool | None = None


class CreatorSummary(SQLModel):
    id: uuid.UUID
    name: str


class MenuItemRead(SQLModel):
    id: uuid.UUID
    restaurant_id: uuid.UUID
    created_by: uuid.UUID
    name: str
    description: str
    price: float
    currency: Currency
    category: MenuCategory
    image: str
    ingredients: list[str]
    allergens: list[Allergen]
    dietary: list[DietaryTag]
    is_available: bool
    is_spicy: bool
    spicy_level: int
    preparation_time: int | None
    calories: int | None
    creator: CreatorSummary | None = None
    created_at: datetime
    updated_at: datetime


class MenuItemPage(SQLModel):
    items: list[MenuItemRead]
    total_items: int
    total_pages: int
    current_page: int


class ImageUploaded(SQLModel):
    image_url: str
