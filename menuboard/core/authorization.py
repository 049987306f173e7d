"""Authorization gate predicates.

Each predicate either returns the principal unchanged or raises ``Forbidden``.
Routes compose them in a fixed order: authentication, tenant binding, role.
"""

import logging
import uuid
from collections.abc import Iterable

from menuboard.core.errors import Forbidden
from menuboard.core.identity import Principal
from menuboard.models.user import UserRole

logger = logging.getLogger(__name__)

ELEVATED_ROLES: frozenset[UserRole] = frozenset({UserRole.OWNER, UserRole.MANAGER})


def require_tenant_binding(principal: Principal) -> uuid.UUID:
    """Return the caller's tenant id, or raise if there is none."""
    if principal.tenant_id is None:
        logger.info("gate.rejected check=tenant_binding user_id=%s", principal.user_id)
        raise Forbidden("No restaurant associated with this user")
    return principal.tenant_id


def require_role(principal: Principal, allowed_roles: Iterable[UserRole]) -> Principal:
    allowed = frozenset(allowed_roles)
    if principal.role not in allowed:
        logger.info(
            "gate.rejected check=role user_id=%s role=%s",
            principal.user_id,
            principal.role,
        )
        raise Forbidden("Access denied. Admin privileges required")
    return principal
