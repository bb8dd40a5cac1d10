"""
Organization context resolution.

Decides which organization a request acts within. Candidates are taken
from, in strict order: the organization header, the query parameter,
the JSON body field, and finally the user's default membership. The
first source with a value wins even if that value turns out to be
invalid for the user; a candidate the user is not an active member of
is rejected, never replaced by another organization.
"""

import logging
from enum import Enum
from typing import Any, Optional, Sequence, Tuple

from tenant_api.domains.auth.types import Membership, OrgContext
from tenant_api.shared.exceptions import NotAMemberError

logger = logging.getLogger(__name__)


class OrganizationSource(str, Enum):
    HEADER = "header"
    QUERY = "query"
    BODY = "body"
    DEFAULT_MEMBERSHIP = "default_membership"


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def default_membership(memberships: Sequence[Membership]) -> Optional[Membership]:
    """The membership used when a request names no organization: the first
    active one in loader order (most recently joined)."""
    for membership in memberships:
        if membership.is_active:
            return membership
    return None


def select_candidate_organization_id(
    header_value: Any,
    query_value: Any,
    body_value: Any,
    memberships: Sequence[Membership],
) -> Tuple[Optional[str], Optional[OrganizationSource]]:
    """Pick the candidate organization id and report which source supplied it."""
    explicit = (
        (header_value, OrganizationSource.HEADER),
        (query_value, OrganizationSource.QUERY),
        (body_value, OrganizationSource.BODY),
    )
    for raw, source in explicit:
        candidate = _clean(raw)
        if candidate:
            return candidate, source

    fallback = default_membership(memberships)
    if fallback:
        return fallback.organization_id, OrganizationSource.DEFAULT_MEMBERSHIP

    return None, None


def resolve_organization_context(
    memberships: Sequence[Membership],
    header_value: Any = None,
    query_value: Any = None,
    body_value: Any = None,
) -> Optional[OrgContext]:
    """
    Resolve the active organization for a request.

    Args:
        memberships: The user's active memberships, in loader order
        header_value: Organization header value, if any
        query_value: Organization query parameter, if any
        body_value: Organization body field, if any

    Returns:
        OrgContext for the matched membership, or None when nothing was
        requested and the user has no memberships

    Raises:
        NotAMemberError: A candidate was found but the user holds no active
            membership in it
    """
    candidate, source = select_candidate_organization_id(
        header_value, query_value, body_value, memberships
    )

    if candidate is None:
        logger.debug("User has no organization memberships")
        return None

    membership = next(
        (
            m
            for m in memberships
            if m.is_active and m.organization_id == candidate
        ),
        None,
    )
    if membership is None:
        logger.warning(
            f"Organization {candidate} from {source.value} is not an active membership"
        )
        raise NotAMemberError(candidate)

    logger.debug(
        f"Organization context set from {source.value}: {candidate}, "
        f"role: {membership.role}"
    )
    return OrgContext(
        organization_id=membership.organization_id,
        organization=membership.organization,
        membership_id=membership.id,
        role=membership.role,
    )
