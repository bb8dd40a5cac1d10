from enum import Enum
from typing import Set

from tenant_api.shared.enums import OrganizationRole


class Permission(Enum):
    """
    Organization-level permissions.

    Permissions should follow the pattern: ACTION_RESOURCE
    Outline access depends on ownership as well as role and is decided in
    `outlines.py` instead.
    """

    VIEW_ORGANIZATION = "view_organization"  # View organization profile
    UPDATE_ORGANIZATION = "update_organization"  # Update name and slug
    VIEW_MEMBERS = "view_members"  # View organization member list
    MANAGE_MEMBERS = "manage_members"  # Revoke memberships


ROLE_PERMISSIONS: dict[OrganizationRole, Set[Permission]] = {
    OrganizationRole.OWNER: {
        # Owners have all permissions
        Permission.VIEW_ORGANIZATION,
        Permission.UPDATE_ORGANIZATION,
        Permission.VIEW_MEMBERS,
        Permission.MANAGE_MEMBERS,
    },
    OrganizationRole.REVIEWER: {
        Permission.VIEW_ORGANIZATION,
        Permission.VIEW_MEMBERS,
    },
    OrganizationRole.MEMBER: {
        Permission.VIEW_ORGANIZATION,
        Permission.VIEW_MEMBERS,
    },
    # USER holds a membership without tenant privileges
    OrganizationRole.USER: set(),
}
