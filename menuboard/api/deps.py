"""FastAPI dependencies for authentication, authorization and tenant resolution.

Gates chain through ``Depends`` so they always run in the same order:
token → tenant binding → role. A failing gate raises before the route body
(or any later gate) runs.
"""

import uuid
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.core.authorization import ELEVATED_ROLES, require_role, require_tenant_binding
from menuboard.core.config import get_settings
from menuboard.core.database import get_session
from menuboard.core.identity import IdentityService, Principal
from menuboard.core.security import TokenCodec
from menuboard.models.user import UserRole
from menuboard.services.storage import FileStorage, get_file_storage

# auto_error=False: a missing header must produce our uniform 401.
bearer_scheme = HTTPBearer(auto_error=False)


class TenantContext:
    """A principal that passed the tenant-binding gate."""

    __slots__ = ("principal", "tenant_id")

    def __init__(self, principal: Principal, tenant_id: uuid.UUID) -> None:
        self.principal = principal
        self.tenant_id = tenant_id

    @property
    def user_id(self) -> uuid.UUID:
        return self.principal.user_id

    @property
    def role(self) -> UserRole:
        return self.principal.role


@lru_cache
def get_identity_service() -> IdentityService:
    """Built once from settings; signing key and expiry are fixed for the process."""
    settings = get_settings()
    codec = TokenCodec(
        secret=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.jwt_expire_minutes,
    )
    return IdentityService(codec)


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_session)],
    identity: Annotated[IdentityService, Depends(get_identity_service)],
) -> Principal:
    token = credentials.credentials if credentials is not None else None
    return await identity.resolve(token, session)


async def get_tenant_context(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> TenantContext:
    tenant_id = require_tenant_binding(principal)
    return TenantContext(principal, tenant_id)


def role_gate(*roles: UserRole):
    """Build a dependency that admits only the given roles (after tenant binding)."""
    allowed = frozenset(roles)

    async def _gate(
        ctx: Annotated[TenantContext, Depends(get_tenant_context)],
    ) -> TenantContext:
        require_role(ctx.principal, allowed)
        return ctx

    return _gate


require_elevated = role_gate(*ELEVATED_ROLES)


# Typed shorthand for use in route signatures
Auth = Annotated[Principal, Depends(get_current_principal)]
TenantAuth = Annotated[TenantContext, Depends(get_tenant_context)]
AdminAuth = Annotated[TenantContext, Depends(require_elevated)]
Session = Annotated[AsyncSession, Depends(get_session)]
Identity = Annotated[IdentityService, Depends(get_identity_service)]
Storage = Annotated[FileStorage, Depends(get_file_storage)]
