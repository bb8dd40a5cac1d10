# tenant_api/domains/organizations/routes.py
from typing import Any, List

from fastapi import APIRouter, Depends, status

from tenant_api.core.database import get_db, get_store
from tenant_api.core.store import MembershipStore
from tenant_api.domains.auth.dependencies import get_onboarding_context
from tenant_api.domains.auth.models import OrganizationMembership, SessionState
from tenant_api.domains.auth.types import AuthContext
from tenant_api.domains.organizations.models import (
    CreateOrganizationResponse,
    OrganizationCreate,
    OrganizationMemberResponse,
    OrganizationResponse,
    OrganizationUpdate,
)
from tenant_api.domains.organizations.service import OrganizationService
from tenant_api.shared.permissions import Permission, require_permission

# Add a prefix and tag to group this route clearly in OpenAPI
router = APIRouter(prefix="/organizations", tags=["Organizations"])


@router.get(
    "",
    response_model=List[OrganizationMembership],
    operation_id="listOrganizations",
)
async def list_organizations(
    auth: AuthContext = Depends(get_onboarding_context),
    db: Any = Depends(get_db),
) -> List[OrganizationMembership]:
    """Organizations the current user is an active member of."""
    service = OrganizationService(db)
    return service.list_organizations(auth)


@router.post(
    "",
    response_model=CreateOrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createOrganization",
)
async def create_organization(
    organization_data: OrganizationCreate,
    auth: AuthContext = Depends(get_onboarding_context),
    db: Any = Depends(get_db),
) -> CreateOrganizationResponse:
    """
    Create a new organization and add the current user as owner.

    This endpoint is typically used when a user signs up directly and needs
    to create their first organization.
    """
    service = OrganizationService(db)
    return await service.create_organization(organization_data, auth.user.id)


@router.post(
    "/switch/{org_id}",
    response_model=SessionState,
    operation_id="switchOrganization",
)
async def switch_organization(
    org_id: str,
    auth: AuthContext = Depends(get_onboarding_context),
    db: Any = Depends(get_db),
    store: MembershipStore = Depends(get_store),
) -> SessionState:
    """
    Switch the user's active organization.

    This endpoint verifies the user is a member of the target organization
    and returns the session state with that organization active.
    """
    service = OrganizationService(db)
    return await service.switch_organization(auth, org_id, store)


@router.get(
    "/current",
    response_model=OrganizationResponse,
    operation_id="getCurrentOrganization",
)
async def get_current_organization(
    auth: AuthContext = Depends(require_permission(Permission.VIEW_ORGANIZATION)),
    db: Any = Depends(get_db),
) -> OrganizationResponse:
    service = OrganizationService(db)
    return await service.get_organization(auth.active_organization_id)


@router.patch(
    "/current",
    response_model=OrganizationResponse,
    operation_id="updateCurrentOrganization",
)
async def update_current_organization(
    updates: OrganizationUpdate,
    auth: AuthContext = Depends(require_permission(Permission.UPDATE_ORGANIZATION)),
    db: Any = Depends(get_db),
) -> OrganizationResponse:
    """Update the active organization's name or slug (owners only)."""
    service = OrganizationService(db)
    return await service.update_organization(auth.active_organization_id, updates)


@router.get(
    "/current/members",
    response_model=List[OrganizationMemberResponse],
    operation_id="getOrganizationMembers",
)
async def get_organization_members(
    auth: AuthContext = Depends(require_permission(Permission.VIEW_MEMBERS)),
    db: Any = Depends(get_db),
) -> List[OrganizationMemberResponse]:
    """
    Get all members of the active organization.

    Returns:
        Active members with their user details, earliest joined first
    """
    service = OrganizationService(db)
    return await service.get_organization_members(auth.active_organization_id)


@router.delete(
    "/current/members/{member_id}",
    response_model=OrganizationMemberResponse,
    operation_id="revokeOrganizationMember",
)
async def revoke_organization_member(
    member_id: str,
    auth: AuthContext = Depends(require_permission(Permission.MANAGE_MEMBERS)),
    db: Any = Depends(get_db),
) -> OrganizationMemberResponse:
    """
    Revoke a member's access to the active organization.

    Business rules:
    - Cannot remove yourself from the organization
    - Cannot remove the last owner (maintains organization access)
    - Can only remove active members

    Args:
        member_id: Membership ID of the member to revoke

    Returns:
        The revoked membership
    """
    service = OrganizationService(db)
    return await service.revoke_member(
        auth.active_organization_id, member_id, auth.organization
    )
