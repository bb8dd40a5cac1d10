# tenant_api/domains/organizations/service.py
import logging
import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, List

from prisma.errors import UniqueViolationError

from tenant_api.core.store import MembershipStore
from tenant_api.domains.auth.models import OrganizationMembership, SessionState
from tenant_api.domains.auth.service import SessionService, validate_organization_access
from tenant_api.domains.auth.types import AuthContext, OrgContext
from tenant_api.domains.organizations.models import (
    CreateOrganizationResponse,
    OrganizationCreate,
    OrganizationMemberResponse,
    OrganizationResponse,
    OrganizationUpdate,
)
from tenant_api.shared.enums import OrganizationRole
from tenant_api.shared.exceptions import (
    ConflictError,
    InvalidDataError,
    MemberNotFoundError,
    OrganizationNotFoundError,
)

if TYPE_CHECKING:
    from prisma import Prisma

logger = logging.getLogger(__name__)

SLUG_CONFLICT = (
    "Organization with this slug already exists. Please choose a different slug."
)
SLUG_MAX_LENGTH = 50


def generate_slug(name: str) -> str:
    """Lowercase, hyphen-separated slug derived from an organization name."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug[:SLUG_MAX_LENGTH].rstrip("-")


class OrganizationService:
    def __init__(self, db: "Prisma"):
        self.db = db

    async def create_organization(
        self, organization_data: OrganizationCreate, user_id: str
    ) -> CreateOrganizationResponse:
        """
        Create a new organization and add the current user as owner.

        This is the onboarding path for users without any organization, so
        it must not depend on an organization context.

        Raises:
            InvalidDataError: If no slug can be derived from the name
            ConflictError: If the slug is already taken
        """
        slug = organization_data.slug or generate_slug(organization_data.name)
        if not slug:
            raise InvalidDataError(
                "Organization name must contain letters or numbers"
            )

        existing = await self.db.organization.find_unique(where={"slug": slug})
        if existing:
            raise ConflictError(SLUG_CONFLICT)

        # The organization and its owner are written together or not at all
        try:
            async with self.db.tx() as tx:
                organization = await tx.organization.create(
                    data={"name": organization_data.name, "slug": slug}
                )
                membership = await tx.organizationmember.create(
                    data={
                        "userId": user_id,
                        "organizationId": organization.id,
                        "role": OrganizationRole.OWNER.value,
                    }
                )
        except UniqueViolationError as e:
            # Slug taken between the check above and the insert
            logger.warning(f"Slug {slug} claimed concurrently: {e}")
            raise ConflictError(SLUG_CONFLICT) from e

        logger.info(f"Organization {organization.id} ({slug}) created by user {user_id}")

        return CreateOrganizationResponse(
            organization=OrganizationResponse.from_prisma(organization),
            role=OrganizationRole.OWNER,
            member_id=membership.id,
        )

    def list_organizations(self, auth: AuthContext) -> List[OrganizationMembership]:
        """The caller's organizations, in default-selection order."""
        return SessionService.organizations_from(auth.memberships)

    async def switch_organization(
        self, auth: AuthContext, organization_id: str, store: MembershipStore
    ) -> SessionState:
        """
        Validate access to another organization and return the session
        state as it looks with that organization active.

        Nothing is persisted; clients send the organization header on
        subsequent requests.
        """
        membership = await validate_organization_access(
            auth.user.id, organization_id, store
        )

        switched = auth.model_copy(
            update={
                "organization": OrgContext(
                    organization_id=membership.organization_id,
                    organization=membership.organization,
                    membership_id=membership.id,
                    role=membership.role,
                )
            }
        )
        logger.info(f"User {auth.user.id} switched to organization {organization_id}")

        session_service = SessionService(store)
        return session_service.get_session_state(switched)

    async def get_organization(self, organization_id: str) -> OrganizationResponse:
        organization = await self.db.organization.find_unique(
            where={"id": organization_id}
        )
        if not organization:
            raise OrganizationNotFoundError()
        return OrganizationResponse.from_prisma(organization)

    async def update_organization(
        self, organization_id: str, updates: OrganizationUpdate
    ) -> OrganizationResponse:
        """
        Update organization name and/or slug.

        Raises:
            ConflictError: If the new slug belongs to another organization
            OrganizationNotFoundError: If the organization does not exist
        """
        if updates.slug:
            existing = await self.db.organization.find_first(
                where={"slug": updates.slug, "id": {"not": organization_id}}
            )
            if existing:
                raise ConflictError(SLUG_CONFLICT)

        try:
            organization = await self.db.organization.update(
                where={"id": organization_id},
                data=updates.model_dump(exclude_none=True),
            )
        except UniqueViolationError as e:
            logger.warning(f"Slug {updates.slug} claimed concurrently: {e}")
            raise ConflictError(SLUG_CONFLICT) from e
        if not organization:
            raise OrganizationNotFoundError()

        logger.info(f"Organization {organization_id} updated")
        return OrganizationResponse.from_prisma(organization)

    async def get_organization_members(
        self, organization_id: str
    ) -> List[OrganizationMemberResponse]:
        """
        Get all active members of an organization, earliest joined first.

        Args:
            organization_id: The organization ID to get members for
        """
        members = await self.db.organizationmember.find_many(
            where={
                "organizationId": organization_id,
                "deletedAt": None,
            },
            include={"user": True},
            order={"joinedAt": "asc"},
        )
        return [OrganizationMemberResponse.from_prisma(member) for member in members]

    async def revoke_member(
        self, organization_id: str, member_id: str, requester: OrgContext
    ) -> OrganizationMemberResponse:
        """
        Revoke a membership by soft deleting it.

        Args:
            organization_id: The organization ID
            member_id: The membership ID to revoke
            requester: Organization context of the caller

        Returns:
            The revoked membership

        Raises:
            MemberNotFoundError: If the membership is not in this organization
            InvalidDataError: If the revocation breaks a membership rule
        """
        member = await self.db.organizationmember.find_first(
            where={"id": member_id, "organizationId": organization_id},
            include={"user": True},
        )
        if not member:
            raise MemberNotFoundError()

        await self._validate_member_removal(member, requester, organization_id)

        updated_member = await self.db.organizationmember.update(
            where={"id": member.id},
            data={"deletedAt": datetime.now(timezone.utc)},
            include={"user": True},
        )
        if not updated_member:
            raise MemberNotFoundError()

        logger.info(
            f"Member {member_id} revoked from organization {organization_id} "
            f"by member {requester.membership_id}"
        )
        return OrganizationMemberResponse.from_prisma(updated_member)

    async def _validate_member_removal(
        self, member: Any, requester: OrgContext, organization_id: str
    ) -> None:
        """
        Validate that a member can be removed.

        Raises:
            InvalidDataError: If validation fails
        """
        # Cannot remove yourself
        if member.id == requester.membership_id:
            raise InvalidDataError("Cannot remove yourself from the organization")

        # Member must be active to be removed
        if member.deletedAt is not None:
            raise InvalidDataError("Member is not active")

        # Cannot remove last owner
        if OrganizationRole.parse(member.role) == OrganizationRole.OWNER:
            owner_count = await self.db.organizationmember.count(
                where={
                    "organizationId": organization_id,
                    "role": OrganizationRole.OWNER.value,
                    "deletedAt": None,
                }
            )
            if owner_count <= 1:
                raise InvalidDataError("Cannot remove the last owner")
