"""Credential & identity resolution: bearer token → Principal."""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.core.errors import InvalidToken, MissingToken, UnknownPrincipal
from menuboard.core.security import TokenCodec
from menuboard.models.restaurant import Restaurant
from menuboard.models.user import User, UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Principal:
    """Resolved identity carried through a request.

    ``tenant_id`` is None when the user has no restaurant binding, or the
    bound restaurant has been deactivated.
    """

    user_id: uuid.UUID
    name: str
    email: str
    role: UserRole
    tenant_id: uuid.UUID | None
    tenant_name: str | None = None


class IdentityService:
    """Verifies bearer tokens and loads the caller from the user store.

    Missing, invalid and orphaned tokens all raise a subclass of
    ``Unauthenticated``; callers see one indistinguishable 401.
    """

    def __init__(self, codec: TokenCodec) -> None:
        self._codec = codec

    def issue_token(self, user_id: uuid.UUID) -> str:
        return self._codec.issue(str(user_id))

    async def resolve(self, token: str | None, session: AsyncSession) -> Principal:
        if not token:
            logger.info("auth.rejected reason=missing_token")
            raise MissingToken()

        try:
            claims = self._codec.decode(token)
            user_id = uuid.UUID(claims.subject)
        except (InvalidToken, ValueError) as exc:
            logger.info("auth.rejected reason=invalid_token")
            raise InvalidToken() from exc

        user = await session.get(User, user_id)
        if user is None or not user.is_active:
            logger.info("auth.rejected reason=unknown_principal user_id=%s", user_id)
            raise UnknownPrincipal()

        return await self._build_principal(user, session)

    async def _build_principal(self, user: User, session: AsyncSession) -> Principal:
        tenant_id = None
        tenant_name = None
        if user.restaurant_id is not None:
            restaurant = await session.get(Restaurant, user.restaurant_id)
            if restaurant is not None and restaurant.is_active:
                tenant_id = restaurant.id
                tenant_name = restaurant.name

        return Principal(
            user_id=user.id,
            name=user.name,
            email=user.email,
            role=UserRole(user.role),
            tenant_id=tenant_id,
            tenant_name=tenant_name,
        )
