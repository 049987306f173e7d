"""User model — an authenticated principal, optionally bound to a restaurant."""

import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import EmailStr, field_validator
from sqlmodel import Field, SQLModel

from menuboard.models.base import TimestampMixin, lower_text, new_uuid, strip_text


class UserRole(StrEnum):
    OWNER = "owner"
    MANAGER = "manager"
    STAFF = "staff"


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    # Nullable: a user may exist before (or after) being bound to a restaurant.
    restaurant_id: uuid.UUID | None = Field(
        default=None, foreign_key="restaurants.id", nullable=True, index=True,
    )
    name: str = Field(max_length=50, nullable=False)
    email: str = Field(max_length=320, unique=True, nullable=False, index=True)
    password_hash: str = Field(nullable=False)
    role: UserRole = Field(default=UserRole.STAFF)
    is_active: bool = Field(default=True)


# ── Pydantic schemas ─────────────────────────────────────────

class UserCreate(SQLModel):
    """A team member added by an owner or manager."""

    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: UserRole = UserRole.STAFF

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: object) -> object:
        return strip_text(value)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: object) -> object:
        return lower_text(value)

    @field_validator("role")
    @classmethod
    def reject_owner(cls, role: UserRole) -> UserRole:
        if role is UserRole.OWNER:
            raise ValueError("A restaurant has exactly one owner")
        return role


class UserUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=2, max_length=50)
    role: UserRole | None = None
    is_active: bool | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: object) -> object:
        return strip_text(value)

    @field_validator("role")
    @classmethod
    def reject_owner(cls, role: UserRole | None) -> UserRole | None:
        if role is UserRole.OWNER:
            raise ValueError("A restaurant has exactly one owner")
        return role


class ProfileUpdate(SQLModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: object) -> object:
        return strip_text(value)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: object) -> object:
        return lower_text(value)


class UserRead(SQLModel):
    id: uuid.UUID
    restaurant_id: uuid.UUID | None
    name: str
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime
