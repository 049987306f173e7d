"""Team members of the caller's restaurant, managed by owners and managers."""

import logging
import uuid

from fastapi import APIRouter, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from menuboard.api.deps import AdminAuth, Session, TenantAuth
from menuboard.core.errors import Conflict, Forbidden
from menuboard.core.security import hash_password
from menuboard.core.tenancy import apply_changes, get_scoped_or_404, tenant_select
from menuboard.models.user import User, UserCreate, UserRead, UserRole, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserRead])
async def list_users(ctx: TenantAuth, session: Session) -> list[UserRead]:
    stmt = tenant_select(User, ctx.tenant_id).order_by(User.email.asc())  # type: ignore[union-attr]
    result = await session.execute(stmt)
    return [UserRead.model_validate(u) for u in result.scalars().all()]


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, ctx: AdminAuth, session: Session) -> UserRead:
    """Add a manager or staff account bound to the caller's restaurant."""
    existing = await session.execute(select(User.id).where(User.email == body.email))
    if existing.scalar_one_or_none() is not None:
        raise Conflict("A user with this email already exists")

    user = User(
        restaurant_id=ctx.tenant_id,
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
        role=body.role,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise Conflict("A user with this email already exists") from exc
    await session.refresh(user)
    logger.info("User %s added to restaurant %s by %s", user.id, ctx.tenant_id, ctx.user_id)
    return UserRead.model_validate(user)


@router.patch("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    ctx: AdminAuth,
    session: Session,
) -> UserRead:
    user = await get_scoped_or_404(session, User, user_id, ctx.tenant_id, "User")
    _ensure_not_owner(user)

    apply_changes(user, body.model_dump(exclude_unset=True, exclude_none=True))
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return UserRead.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_user(
    user_id: uuid.UUID,
    ctx: AdminAuth,
    session: Session,
) -> None:
    """Soft-deactivate. Outstanding tokens for the user stop resolving."""
    user = await get_scoped_or_404(session, User, user_id, ctx.tenant_id, "User")
    _ensure_not_owner(user)

    apply_changes(user, {"is_active": False})
    session.add(user)
    await session.commit()
    logger.info("User %s deactivated by %s", user_id, ctx.user_id)


# ── Internal helper ───────────────────────────────────────────

def _ensure_not_owner(user: User) -> None:
    if user.role == UserRole.OWNER:
        raise Forbidden("The restaurant owner cannot be modified here")
