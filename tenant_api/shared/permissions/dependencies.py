import logging
from typing import Awaitable, Callable

from fastapi import Depends

from tenant_api.domains.auth.dependencies import get_auth_context
from tenant_api.domains.auth.types import AuthContext
from tenant_api.shared.exceptions import (
    NoOrganizationContextError,
    PermissionDeniedError,
)

from .models import Permission
from .services import has_permission

logger = logging.getLogger(__name__)


def require_permission(
    permission: Permission,
) -> Callable[..., Awaitable[AuthContext]]:
    """
    Dependency factory for role-based authorization.

    Creates a dependency that validates the current user has the specified
    permission in the request's active organization.

    Args:
        permission: The permission required to access the endpoint

    Returns:
        Async dependency function that validates permission and returns the
        request's AuthContext
    """

    async def check_permission(
        auth: AuthContext = Depends(get_auth_context),
    ) -> AuthContext:
        """
        Validate user has required permission for the active organization.

        Raises:
            PermissionDeniedError: If user lacks required permission
        """
        if auth.organization is None:
            raise NoOrganizationContextError()

        if not has_permission(auth.role, permission):
            logger.warning(
                f"Member {auth.membership_id} lacks {permission.value} "
                f"in organization {auth.active_organization_id}"
            )
            raise PermissionDeniedError(
                f"Insufficient permissions: {permission.value} required"
            )

        return auth

    return check_permission
