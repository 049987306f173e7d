"""Authentication endpoints: registration, login and the caller's own profile."""

import logging
import uuid

from fastapi import APIRouter, status
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from menuboard.api.deps import Auth, Identity, Session
from menuboard.core.errors import Conflict, Forbidden, NotFound, Unauthenticated
from menuboard.core.security import hash_password, verify_password
from menuboard.core.tenancy import apply_changes
from menuboard.models.base import lower_text, strip_text
from menuboard.models.restaurant import Restaurant, RestaurantSummary
from menuboard.models.user import ProfileUpdate, User, UserRead, UserRole

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Schemas ──────────────────────────────────────────────────

class RegisterRequest(BaseModel):
    """Everything needed to create an owner and their restaurant in one call."""

    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    restaurant_name: str = Field(min_length=2, max_length=100)
    restaurant_description: str = Field(default="", max_length=1000)

    @field_validator("name", "restaurant_name", "restaurant_description", mode="before")
    @classmethod
    def strip_values(cls, value: object) -> object:
        return strip_text(value)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: object) -> object:
        return lower_text(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: object) -> object:
        return lower_text(value)


class ProfileResponse(BaseModel):
    user: UserRead
    restaurant: RestaurantSummary | None


class TokenResponse(ProfileResponse):
    access_token: str
    token_type: str = "bearer"


# ── Routes ───────────────────────────────────────────────────

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, session: Session, identity: Identity) -> TokenResponse:
    """Create an owner account and its restaurant, then sign the owner in."""
    if await _find_by_email(body.email, session) is not None:
        raise Conflict("User already exists")

    # 1. Owner, not yet bound
    user = User(
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
        role=UserRole.OWNER,
    )
    session.add(user)
    await session.flush()  # populate user.id

    # 2. Restaurant owned by that user
    restaurant = Restaurant(
        owner_id=user.id,
        name=body.restaurant_name,
        description=body.restaurant_description,
    )
    session.add(restaurant)
    await session.flush()

    # 3. Bind
    user.restaurant_id = restaurant.id
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise Conflict("User already exists") from exc
    await session.refresh(user)
    await session.refresh(restaurant)

    logger.info("Registered restaurant %s for owner %s", restaurant.id, user.id)
    return TokenResponse(
        access_token=identity.issue_token(user.id),
        user=UserRead.model_validate(user),
        restaurant=RestaurantSummary.model_validate(restaurant),
    )


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, session: Session, identity: Identity) -> TokenResponse:
    """Authenticate with email + password, receive a bearer token."""
    user = await _find_by_email(body.email, session)
    if user is None or not verify_password(body.password, user.password_hash):
        raise Unauthenticated("Invalid email or password")

    if not user.is_active:
        raise Forbidden("Account is disabled")

    return TokenResponse(
        access_token=identity.issue_token(user.id),
        user=UserRead.model_validate(user),
        restaurant=await _restaurant_summary(user.restaurant_id, session),
    )


@router.get("/me", response_model=ProfileResponse)
async def get_me(principal: Auth, session: Session) -> ProfileResponse:
    """Return the current user and their restaurant (null when unbound)."""
    user = await session.get(User, principal.user_id)
    if user is None:
        raise NotFound("User not found")
    return ProfileResponse(
        user=UserRead.model_validate(user),
        restaurant=await _restaurant_summary(principal.tenant_id, session),
    )


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(body: ProfileUpdate, principal: Auth, session: Session) -> ProfileResponse:
    """Change the caller's own name and email."""
    if await _email_taken(body.email, principal.user_id, session):
        raise Conflict("Email already in use")

    user = await session.get(User, principal.user_id)
    if user is None:
        raise NotFound("User not found")

    apply_changes(user, body.model_dump())
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise Conflict("Email already in use") from exc
    await session.refresh(user)
    return ProfileResponse(
        user=UserRead.model_validate(user),
        restaurant=await _restaurant_summary(principal.tenant_id, session),
    )


# ── Internal helpers ──────────────────────────────────────────

async def _find_by_email(email: str, session: AsyncSession) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def _restaurant_summary(
    restaurant_id: uuid.UUID | None, session: AsyncSession
) -> RestaurantSummary | None:
    if restaurant_id is None:
        return None
    restaurant = await session.get(Restaurant, restaurant_id)
    if restaurant is None or not restaurant.is_active:
        return None
    return RestaurantSummary.model_validate(restaurant)


async def _email_taken(email: str, user_id: uuid.UUID, session: AsyncSession) -> bool:
    result = await session.execute(
        select(User.id).where(User.email == email, User.id != user_id)
    )
    return result.scalar_one_or_none() is not None
