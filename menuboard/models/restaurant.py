"""Restaurant model — the tenant, top-level isolation boundary."""

import re
import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import EmailStr, field_validator
from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from menuboard.models.base import TimestampMixin, lower_text, new_uuid, strip_text

_PHONE_RE = re.compile(r"^\+?[0-9()\-.\s]{5,30}$")


class Cuisine(StrEnum):
    ITALIAN = "Italian"
    CHINESE = "Chinese"
    INDIAN = "Indian"
    MEXICAN = "Mexican"
    AMERICAN = "American"
    THAI = "Thai"
    FRENCH = "French"
    JAPANESE = "Japanese"
    MEDITERRANEAN = "Mediterranean"
    OTHER = "Other"


class Currency(StrEnum):
    USD = "USD"
    EUR = "EUR"
    INR = "INR"


class Restaurant(TimestampMixin, SQLModel, table=True):
    __tablename__ = "restaurants"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    # users.restaurant_id already points here; no FK back to avoid a cycle.
    owner_id: uuid.UUID = Field(nullable=False, index=True)

    name: str = Field(max_length=100, nullable=False)
    description: str = Field(default="", max_length=1000)
    cuisine: Cuisine = Field(default=Cuisine.OTHER)
    logo: str = Field(default="", max_length=500)
    is_active: bool = Field(default=True)

    # Nested objects stored as JSON text.
    address: str = Field(default="{}", sa_column=Column(Text, nullable=False, server_default="{}"))
    contact: str = Field(default="{}", sa_column=Column(Text, nullable=False, server_default="{}"))
    settings: str = Field(default="{}", sa_column=Column(Text, nullable=False, server_default="{}"))


# ── Nested value objects ─────────────────────────────────────

class Address(SQLModel):
    street: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    zip_code: str | None = Field(default=None, max_length=20)
    country: str | None = Field(default=None, max_length=100)

    @field_validator("*", mode="before")
    @classmethod
    def strip_values(cls, value: object) -> object:
        return strip_text(value)


class Contact(SQLModel):
    phone: str | None = Field(default=None, max_length=30)
    email: EmailStr | None = None
    website: str | None = Field(default=None, max_length=255)

    @field_validator("phone", "website", mode="before")
    @classmethod
    def strip_values(cls, value: object) -> object:
        return strip_text(value)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str | None) -> str | None:
        if value and not _PHONE_RE.match(value):
            raise ValueError("Please provide a valid phone number")
        return value or None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: object) -> object:
        return lower_text(value) or None


class RestaurantSettings(SQLModel):
    currency: Currency = Currency.USD
    timezone: str = Field(default="UTC", max_length=64)


# ── Pydantic schemas ─────────────────────────────────────────

class RestaurantUpdate(SQLModel):
    """Profile edit. ``name`` is required, everything else is left as-is when omitted."""

    name: str = Field(min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    address: Address | None = None
    contact: Contact | None = None
    cuisine: Cuisine | None = None
    settings: RestaurantSettings | None = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_values(cls, value: object) -> object:
        return strip_text(value)


class OwnerSummary(SQLModel):
    id: uuid.UUID
    name: str
    email: str


class RestaurantSummary(SQLModel):
    id: uuid.UUID
    name: str
    description: str


class RestaurantRead(SQLModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    description: str
    address: Address
    contact: Contact
    cuisine: Cuisine
    logo: str
    is_active: bool
    settings: RestaurantSettings
    owner: OwnerSummary | None = None
    created_at: datetime
    updated_at: datetime


class LogoUploaded(SQLModel):
    logo_url: str
