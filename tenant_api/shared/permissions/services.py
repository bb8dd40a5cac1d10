from typing import Optional

from tenant_api.shared.enums import OrganizationRole

from .models import ROLE_PERMISSIONS, Permission


def has_permission(role: Optional[OrganizationRole], permission: Permission) -> bool:
    """
    Check if a role has a specific permission.

    Args:
        role: The organization role to check, None for an unrecognised role
        permission: The permission to validate

    Returns:
        True if the role has the permission, False otherwise
    """
    if role is None:
        return False
    return permission in ROLE_PERMISSIONS.get(role, set())
