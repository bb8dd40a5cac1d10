"""
Outline permission rules.

Pure functions over an organization context and an outline. Rules are
evaluated in order and the first match wins:

1. Different organization: deny.
2. USER role: deny everything.
3. OWNER: allow everything, every requested field on update.
4. REVIEWER: view and create; delete own outlines; update only the
   status of outlines assigned to them, and nothing else.
5. MEMBER: view and create; delete and update own outlines; status is
   stripped from updates unless they are also the assigned reviewer.
6. Anything else: deny.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from tenant_api.domains.auth.types import OrgContext
from tenant_api.shared.enums import OrganizationRole

from .decisions import Allowed, AllowedSubset, Denied, UpdateDecision

logger = logging.getLogger(__name__)

STATUS_FIELD = "status"

NOT_SAME_ORGANIZATION = "Not in same organization"
USER_ROLE_DENIED = "USER role cannot access outlines"
INSUFFICIENT_PERMISSIONS = "Insufficient permissions"
REVIEWER_STATUS_ONLY = "Reviewers can only update status of outlines assigned to them"
CREATOR_ONLY_UPDATE = "Only creators can update their outlines"
CREATOR_ONLY_DELETE = (
    "You do not have permission to delete this outline. "
    "Only owners and the outline creator can delete outlines."
)
CREATOR_STATUS_DENIED = (
    "Creators cannot update status unless they are also the assigned reviewer"
)

CONTRIBUTOR_ROLES = (
    OrganizationRole.OWNER,
    OrganizationRole.REVIEWER,
    OrganizationRole.MEMBER,
)


@dataclass(frozen=True)
class OutlineRef:
    """The ownership facts about an outline that permission rules need."""

    id: str
    organization_id: str
    created_by_member_id: str
    reviewer_member_id: Optional[str] = None

    @classmethod
    def from_prisma(cls, outline: Any) -> "OutlineRef":
        return cls(
            id=outline.id,
            organization_id=outline.organizationId,
            created_by_member_id=outline.createdByMemberId,
            reviewer_member_id=getattr(outline, "reviewerMemberId", None),
        )


def _precheck(context: OrgContext, outline: Optional[OutlineRef]) -> Optional[Denied]:
    """Rules 1, 2 and 6: checks that do not depend on the action."""
    if outline is not None and context.organization_id != outline.organization_id:
        logger.warning(
            f"Organization mismatch: {context.organization_id} vs "
            f"{outline.organization_id}"
        )
        return Denied(NOT_SAME_ORGANIZATION)
    if context.role == OrganizationRole.USER:
        return Denied(USER_ROLE_DENIED)
    if context.role not in CONTRIBUTOR_ROLES:
        logger.warning(f"Invalid role for outline access: {context.role}")
        return Denied(INSUFFICIENT_PERMISSIONS)
    return None


def check_create_outline(
    context: OrgContext, organization_id: Optional[str] = None
) -> Optional[Denied]:
    """Return a denial, or None when the context may create an outline.

    `organization_id` is the organization the outline would be created in,
    when it differs from the context it is denied like any other
    cross-tenant action.
    """
    if organization_id is not None and organization_id != context.organization_id:
        return Denied(NOT_SAME_ORGANIZATION)
    return _precheck(context, None)


def check_list_outlines(context: OrgContext) -> Optional[Denied]:
    """Listing and statistics need the same rights as viewing a single outline."""
    return _precheck(context, None)


def check_view_outline(context: OrgContext, outline: OutlineRef) -> Optional[Denied]:
    return _precheck(context, outline)


def check_delete_outline(context: OrgContext, outline: OutlineRef) -> Optional[Denied]:
    denied = _precheck(context, outline)
    if denied:
        return denied
    if context.role == OrganizationRole.OWNER:
        return None
    if outline.created_by_member_id == context.membership_id:
        return None
    return Denied(CREATOR_ONLY_DELETE)


def can_create_outline(
    context: OrgContext, organization_id: Optional[str] = None
) -> bool:
    return check_create_outline(context, organization_id) is None


def can_list_outlines(context: OrgContext) -> bool:
    return check_list_outlines(context) is None


def can_view_outline(context: OrgContext, outline: OutlineRef) -> bool:
    return check_view_outline(context, outline) is None


def can_delete_outline(context: OrgContext, outline: OutlineRef) -> bool:
    allowed = check_delete_outline(context, outline) is None
    logger.debug(
        f"Member {context.membership_id} can delete outline {outline.id}: {allowed}"
    )
    return allowed


def can_update_outline(
    context: OrgContext, outline: OutlineRef, requested_fields: Iterable[str]
) -> UpdateDecision:
    """
    Decide which of the requested fields the context may update.

    Args:
        context: Organization context of the caller
        outline: Outline being updated
        requested_fields: Field names present in the update payload

    Returns:
        Allowed, AllowedSubset or Denied
    """
    fields = frozenset(requested_fields)

    denied = _precheck(context, outline)
    if denied:
        return denied

    is_creator = outline.created_by_member_id == context.membership_id
    is_assigned_reviewer = (
        outline.reviewer_member_id is not None
        and outline.reviewer_member_id == context.membership_id
    )
    logger.debug(
        f"Update check on outline {outline.id}: role={context.role}, "
        f"is_creator={is_creator}, is_assigned_reviewer={is_assigned_reviewer}"
    )

    if context.role == OrganizationRole.OWNER:
        return Allowed(fields)

    if context.role == OrganizationRole.REVIEWER:
        if is_assigned_reviewer and fields == {STATUS_FIELD}:
            return Allowed(fields)
        return Denied(REVIEWER_STATUS_ONLY)

    # MEMBER
    if not is_creator:
        return Denied(CREATOR_ONLY_UPDATE)
    if is_assigned_reviewer or STATUS_FIELD not in fields:
        return Allowed(fields)

    remaining = fields - {STATUS_FIELD}
    if not remaining:
        return Denied(CREATOR_STATUS_DENIED)
    return AllowedSubset(
        fields=remaining,
        denied_fields=frozenset({STATUS_FIELD}),
        reason=CREATOR_STATUS_DENIED,
    )
