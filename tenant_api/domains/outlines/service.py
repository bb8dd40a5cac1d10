# tenant_api/domains/outlines/service.py
import logging
import math
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from tenant_api.domains.auth.types import OrgContext
from tenant_api.domains.organizations.models import OrganizationMemberResponse
from tenant_api.domains.outlines.models import (
    OutlineCreate,
    OutlineListResponse,
    OutlineResponse,
    OutlineStatsResponse,
    OutlineUpdate,
    PaginationMetadata,
)
from tenant_api.shared.enums import OrganizationRole, OutlineStatus
from tenant_api.shared.exceptions import (
    ConflictError,
    InvalidDataError,
    MemberNotFoundError,
    OrganizationNotFoundError,
    OutlineNotFoundError,
    PermissionDeniedError,
)
from tenant_api.shared.permissions import (
    AllowedSubset,
    OutlineRef,
    apply_decision,
    can_update_outline,
    check_create_outline,
    check_delete_outline,
    check_list_outlines,
    check_view_outline,
)
from tenant_api.shared.permissions.outlines import NOT_SAME_ORGANIZATION

if TYPE_CHECKING:
    from prisma import Prisma

logger = logging.getLogger(__name__)

DUPLICATE_HEADER = "An outline with this header already exists in your organization"
REVIEWER_NOT_FOUND = "Reviewer member not found in this organization"

ASSIGNABLE_REVIEWER_ROLES = (OrganizationRole.OWNER, OrganizationRole.REVIEWER)

# Members are embedded with their user so responses can show names
OUTLINE_INCLUDE = {
    "createdBy": {"include": {"user": True}},
    "reviewerMember": {"include": {"user": True}},
}


class OutlineService:
    """
    Outline operations scoped to the caller's organization.

    Every query filters on the context's organization and excludes soft
    deleted outlines, and every action is checked by the outline
    permission rules before anything is written.
    """

    def __init__(self, db: "Prisma"):
        self.db = db

    async def create_outline(
        self, context: OrgContext, outline_data: OutlineCreate
    ) -> OutlineResponse:
        """
        Create an outline in the caller's organization.

        Raises:
            PermissionDeniedError: If the caller may not create outlines here
            ConflictError: If the header is already used in the organization
            MemberNotFoundError: If the reviewer is not an active member
            InvalidDataError: If the reviewer assignment is not allowed
        """
        denied = check_create_outline(context, outline_data.organizationId)
        if denied:
            raise PermissionDeniedError(denied.reason)

        organization_id = context.organization_id
        await self._ensure_unique_header(organization_id, outline_data.header)

        if outline_data.reviewerMemberId:
            await self._validate_reviewer(context, outline_data.reviewerMemberId)

        outline = await self.db.outline.create(
            data={
                "header": outline_data.header,
                "sectionType": outline_data.sectionType.value,
                "status": outline_data.status.value,
                "target": outline_data.target,
                "limit": outline_data.limit,
                "organizationId": organization_id,
                "createdByMemberId": context.membership_id,
                "reviewerMemberId": outline_data.reviewerMemberId,
            },
            include=OUTLINE_INCLUDE,
        )

        logger.info(
            f"Outline {outline.id} created by member {context.membership_id} "
            f"in organization {organization_id}"
        )
        return OutlineResponse.from_prisma(outline)

    async def list_outlines(
        self, context: OrgContext, page: int, per_page: int
    ) -> OutlineListResponse:
        self._ensure_can_list(context)
        return await self._paginate(
            {"organizationId": context.organization_id}, page, per_page
        )

    async def get_assigned_outlines(
        self, context: OrgContext, page: int, per_page: int
    ) -> OutlineListResponse:
        """Outlines the caller is the assigned reviewer of."""
        self._ensure_can_list(context)
        return await self._paginate(
            {
                "organizationId": context.organization_id,
                "reviewerMemberId": context.membership_id,
            },
            page,
            per_page,
        )

    async def get_my_outlines(
        self, context: OrgContext, page: int, per_page: int
    ) -> OutlineListResponse:
        """Outlines the caller created."""
        self._ensure_can_list(context)
        return await self._paginate(
            {
                "organizationId": context.organization_id,
                "createdByMemberId": context.membership_id,
            },
            page,
            per_page,
        )

    async def get_outline(self, context: OrgContext, outline_id: str) -> OutlineResponse:
        outline = await self._get_outline(context.organization_id, outline_id)

        denied = check_view_outline(context, OutlineRef.from_prisma(outline))
        if denied:
            raise PermissionDeniedError(denied.reason)

        return OutlineResponse.from_prisma(outline)

    async def update_outline(
        self, context: OrgContext, outline_id: str, updates: OutlineUpdate
    ) -> OutlineResponse:
        """
        Apply the permitted part of an update.

        The permission decision may strip fields from the request; only the
        allowed fields are validated and written.

        Raises:
            InvalidDataError: If the request contains no updatable fields
            OutlineNotFoundError: If the outline is not in the organization
            PermissionDeniedError: If the update is denied in full
        """
        if updates.organizationId and updates.organizationId != context.organization_id:
            raise PermissionDeniedError(NOT_SAME_ORGANIZATION)

        requested = updates.requested_updates()
        if not requested:
            raise InvalidDataError("At least one field must be provided for update")

        outline = await self._get_outline(context.organization_id, outline_id)

        decision = can_update_outline(
            context, OutlineRef.from_prisma(outline), requested.keys()
        )
        if not decision.allowed:
            logger.warning(
                f"Update of outline {outline_id} denied for member "
                f"{context.membership_id}: {decision.reason}"
            )
            raise PermissionDeniedError(decision.reason)

        if isinstance(decision, AllowedSubset):
            logger.info(
                f"Stripped {sorted(decision.denied_fields)} from update of outline "
                f"{outline_id}: {decision.reason}"
            )

        data = apply_decision(decision, requested)

        if "header" in data and data["header"] != outline.header:
            await self._ensure_unique_header(
                context.organization_id, data["header"], exclude_id=outline_id
            )

        if data.get("reviewerMemberId"):
            await self._validate_reviewer(context, data["reviewerMemberId"])

        updated = await self.db.outline.update(
            where={"id": outline_id},
            data=data,
            include=OUTLINE_INCLUDE,
        )
        if not updated:
            raise OutlineNotFoundError(outline_id)

        logger.info(
            f"Outline {outline_id} updated by member {context.membership_id}: "
            f"{sorted(data)}"
        )
        return OutlineResponse.from_prisma(updated)

    async def delete_outline(
        self, context: OrgContext, outline_id: str
    ) -> OutlineResponse:
        """Soft delete an outline. Owners may delete any, others only their own."""
        outline = await self._get_outline(context.organization_id, outline_id)

        denied = check_delete_outline(context, OutlineRef.from_prisma(outline))
        if denied:
            raise PermissionDeniedError(denied.reason)

        deleted = await self.db.outline.update(
            where={"id": outline_id},
            data={"deletedAt": datetime.now(timezone.utc)},
            include=OUTLINE_INCLUDE,
        )
        if not deleted:
            raise OutlineNotFoundError(outline_id)

        logger.info(f"Outline {outline_id} deleted by member {context.membership_id}")
        return OutlineResponse.from_prisma(deleted)

    async def get_stats(self, context: OrgContext) -> OutlineStatsResponse:
        """Outline counts by status for the caller's organization."""
        self._ensure_can_list(context)
        organization_id = context.organization_id

        organization = await self.db.organization.find_unique(
            where={"id": organization_id}
        )
        if not organization:
            raise OrganizationNotFoundError()

        base_where = {"organizationId": organization_id, "deletedAt": None}
        total = await self.db.outline.count(where=base_where)
        by_status = {}
        for outline_status in OutlineStatus:
            by_status[outline_status] = await self.db.outline.count(
                where={**base_where, "status": outline_status.value}
            )

        completed = by_status[OutlineStatus.COMPLETED]
        return OutlineStatsResponse(
            organizationId=organization_id,
            organizationName=organization.name,
            organizationSlug=organization.slug,
            totalOutlines=total,
            completedOutlines=completed,
            inProgressOutlines=by_status[OutlineStatus.IN_PROGRESS],
            pendingOutlines=by_status[OutlineStatus.PENDING],
            completionRate=(completed / total) * 100 if total > 0 else 0.0,
        )

    async def get_available_reviewers(
        self, context: OrgContext
    ) -> List[OrganizationMemberResponse]:
        """
        Members the caller could assign as reviewer.

        Owners may assign anyone, including themselves; everyone else may
        assign other reviewers and owners.
        """
        self._ensure_can_list(context)

        where: Dict[str, Any] = {
            "organizationId": context.organization_id,
            "deletedAt": None,
        }
        if context.role != OrganizationRole.OWNER:
            where["id"] = {"not": context.membership_id}
            where["role"] = {"in": [role.value for role in ASSIGNABLE_REVIEWER_ROLES]}

        members = await self.db.organizationmember.find_many(
            where=where,
            include={"user": True},
            order={"joinedAt": "asc"},
        )
        reviewers = [OrganizationMemberResponse.from_prisma(member) for member in members]

        # Most privileged first, earliest joined within a role
        reviewers.sort(key=lambda member: -member.role.rank if member.role else 0)
        return reviewers

    def _ensure_can_list(self, context: OrgContext) -> None:
        denied = check_list_outlines(context)
        if denied:
            raise PermissionDeniedError(denied.reason)

    async def _get_outline(self, organization_id: str, outline_id: str) -> Any:
        outline = await self.db.outline.find_first(
            where={
                "id": outline_id,
                "organizationId": organization_id,
                "deletedAt": None,
            },
            include=OUTLINE_INCLUDE,
        )
        if not outline:
            raise OutlineNotFoundError(outline_id)
        return outline

    async def _paginate(
        self, where: Dict[str, Any], page: int, per_page: int
    ) -> OutlineListResponse:
        where = {**where, "deletedAt": None}
        offset = (page - 1) * per_page

        outlines = await self.db.outline.find_many(
            where=where,
            skip=offset,
            take=per_page,
            include=OUTLINE_INCLUDE,
            order={"createdAt": "desc"},
        )
        total = await self.db.outline.count(where=where)

        pagination = PaginationMetadata(
            page=page,
            per_page=per_page,
            total=total,
            pages=math.ceil(total / per_page) if total > 0 else 1,
            has_next=page * per_page < total,
            has_prev=page > 1,
        )
        return OutlineListResponse(
            outlines=[OutlineResponse.from_prisma(outline) for outline in outlines],
            pagination=pagination,
        )

    async def _ensure_unique_header(
        self, organization_id: str, header: str, exclude_id: Optional[str] = None
    ) -> None:
        where: Dict[str, Any] = {
            "header": header,
            "organizationId": organization_id,
            "deletedAt": None,
        }
        if exclude_id:
            where["id"] = {"not": exclude_id}

        existing = await self.db.outline.find_first(where=where)
        if existing:
            raise ConflictError(DUPLICATE_HEADER)

    async def _validate_reviewer(
        self, context: OrgContext, reviewer_member_id: str
    ) -> None:
        """
        Validate a reviewer assignment.

        The reviewer must be an active member of the same organization.
        Non-owners may not assign themselves and may only assign reviewers
        or owners.
        """
        reviewer = await self.db.organizationmember.find_first(
            where={
                "id": reviewer_member_id,
                "organizationId": context.organization_id,
                "deletedAt": None,
            }
        )
        if not reviewer:
            raise MemberNotFoundError(REVIEWER_NOT_FOUND)

        if context.role == OrganizationRole.OWNER:
            return

        if reviewer_member_id == context.membership_id:
            raise InvalidDataError("You cannot assign yourself as a reviewer")

        if OrganizationRole.parse(reviewer.role) not in ASSIGNABLE_REVIEWER_ROLES:
            raise InvalidDataError(
                "Only REVIEWER or OWNER role members can be assigned as reviewers"
            )
