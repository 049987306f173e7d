"""Shared base fields and helpers for all models."""

import json
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


def dump_json(value: Any) -> str:
    """Serialise a nested value for storage in a Text column."""
    return json.dumps(value, default=str, ensure_ascii=False)


def load_json(raw: str | None, default: Any) -> Any:
    if not raw:
        return default
    return json.loads(raw)


class TimestampMixin(SQLModel):
    """Created / updated timestamps injected into every table."""

    created_at: datetime = Field(
        default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True),
    )
    updated_at: datetime = Field(
        default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True),
    )


def strip_text(value: Any) -> Any:
    """``mode="before"`` validator body: trim surrounding whitespace."""
    return value.strip() if isinstance(value, str) else value


def lower_text(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value
