"""Tenant-scoped data access.

Every query against a restaurant-owned table starts from ``tenant_select``
(or ``get_scoped_or_404``), so the tenant predicate is present no matter
which filters, sort or page the caller asks for afterwards.
"""

import uuid
from typing import Any, TypeVar

from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select
from sqlmodel.sql.expression import SelectOfScalar

from menuboard.core.errors import NotFound
from menuboard.models.base import utcnow

ModelT = TypeVar("ModelT", bound=SQLModel)

# Never writable through an update payload.
PROTECTED_FIELDS = frozenset({"id", "restaurant_id", "tenant_id", "created_by", "created_at"})


def tenant_filter(model: type[SQLModel], tenant_id: uuid.UUID) -> ColumnElement[bool]:
    """The predicate every tenant-owned query must carry."""
    return model.restaurant_id == tenant_id  # type: ignore[attr-defined]


def tenant_select(model: type[ModelT], tenant_id: uuid.UUID) -> SelectOfScalar[ModelT]:
    return select(model).where(tenant_filter(model, tenant_id))


async def get_scoped_or_404(
    session: AsyncSession,
    model: type[ModelT],
    object_id: uuid.UUID,
    tenant_id: uuid.UUID,
    label: str = "Resource",
) -> ModelT:
    """Fetch by id *and* tenant.

    A row that exists under another tenant is reported exactly like a
    missing one.
    """
    stmt = tenant_select(model, tenant_id).where(model.id == object_id)  # type: ignore[attr-defined]
    result = await session.execute(stmt)
    obj = result.scalar_one_or_none()
    if obj is None:
        raise NotFound(f"{label} not found")
    return obj


def apply_changes(instance: SQLModel, changes: dict[str, Any]) -> SQLModel:
    """Copy ``changes`` onto ``instance``, skipping protected fields."""
    for field, value in changes.items():
        if field in PROTECTED_FIELDS:
            continue
        setattr(instance, field, value)
    if hasattr(instance, "updated_at"):
        instance.updated_at = utcnow()  # type: ignore[attr-defined]
    return instance
