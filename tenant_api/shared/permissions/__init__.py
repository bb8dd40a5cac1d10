"""
Shared permission system for role-based access control.

Organization-level checks are a plain role -> permission mapping.
Outline checks also depend on who created the outline and who reviews it,
and return field-level decisions for updates.

Usage:
    from tenant_api.shared.permissions import Permission, require_permission

    @router.get("/current/members")
    async def list_members(
        auth: AuthContext = Depends(require_permission(Permission.VIEW_MEMBERS))
    ):
        pass
"""

from .decisions import Allowed, AllowedSubset, Denied, UpdateDecision, apply_decision
from .dependencies import require_permission
from .models import ROLE_PERMISSIONS, Permission
from .outlines import (
    OutlineRef,
    can_create_outline,
    can_delete_outline,
    can_list_outlines,
    can_update_outline,
    can_view_outline,
    check_create_outline,
    check_delete_outline,
    check_list_outlines,
    check_view_outline,
)
from .services import has_permission

__all__ = [
    "Allowed",
    "AllowedSubset",
    "Denied",
    "OutlineRef",
    "Permission",
    "ROLE_PERMISSIONS",
    "UpdateDecision",
    "apply_decision",
    "can_create_outline",
    "can_delete_outline",
    "can_list_outlines",
    "can_update_outline",
    "can_view_outline",
    "check_create_outline",
    "check_delete_outline",
    "check_list_outlines",
    "check_view_outline",
    "has_permission",
    "require_permission",
]
