import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence
from urllib.parse import unquote

from tenant_api.core.store import MembershipStore
from tenant_api.domains.auth.models import OrganizationMembership, SessionState
from tenant_api.domains.auth.types import AuthContext, Membership, ResolvedSession
from tenant_api.shared.exceptions import (
    NotAMemberError,
    SessionExpiredError,
    UnauthenticatedError,
)

logger = logging.getLogger(__name__)


def parse_session_cookie(raw_value: Optional[str]) -> str:
    """
    Extract the store lookup key from a raw session cookie value.

    The cookie may be URL-encoded and may be a signed "token.signature"
    composite. Only the part before the first "." is used; the signature
    was checked by the identity provider when it issued the cookie.

    Raises:
        UnauthenticatedError: If no usable key is present
    """
    if not raw_value:
        raise UnauthenticatedError()

    decoded = unquote(raw_value).strip()
    key = decoded.split(".", 1)[0]
    if not key:
        raise UnauthenticatedError("Invalid session")
    return key


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SessionService:
    """Resolves sessions and memberships for the route guard"""

    def __init__(self, store: MembershipStore):
        self.store = store

    async def resolve_session(
        self, raw_cookie: Optional[str], now: Optional[datetime] = None
    ) -> ResolvedSession:
        """
        Turn a raw session cookie into a validated session and its user

        Args:
            raw_cookie: Cookie value as sent by the client
            now: Reference time, defaults to the current UTC time

        Returns:
            ResolvedSession with the owning user's public fields

        Raises:
            UnauthenticatedError: No cookie, unknown session, or unknown user
            SessionExpiredError: Session found but past its expiry
        """
        key = parse_session_cookie(raw_cookie)

        session = await self.store.find_session_by_key(key)
        if not session:
            logger.warning(f"Invalid session token {key[:8]}...")
            raise UnauthenticatedError("Invalid session")

        current = _as_utc(now or datetime.now(timezone.utc))
        if current >= _as_utc(session.expires_at):
            logger.warning(f"Session {session.id} expired at {session.expires_at}")
            raise SessionExpiredError()

        user = await self.store.find_user_by_id(session.user_id)
        if not user:
            logger.warning(f"Session {session.id} references missing user")
            raise UnauthenticatedError("Invalid session")

        if user.banned:
            logger.warning(f"Banned user {user.id} attempted to authenticate")
            raise UnauthenticatedError("Account is banned")

        return ResolvedSession(
            session_id=session.id,
            user_id=user.id,
            expires_at=session.expires_at,
            user=user,
        )

    async def load_memberships(self, user_id: str) -> List[Membership]:
        """
        Load a user's active memberships, most recently joined first

        An empty list means the user has no organization yet.
        """
        memberships = await self.store.list_active_memberships_by_user(user_id)

        # Default organization selection depends on this order
        active = [m for m in memberships if m.is_active]
        active.sort(key=lambda m: _as_utc(m.joined_at), reverse=True)

        logger.debug(f"User {user_id} has {len(active)} active memberships")
        return active

    @staticmethod
    def organizations_from(
        memberships: Sequence[Membership],
    ) -> List[OrganizationMembership]:
        return [
            OrganizationMembership(
                id=membership.organization_id,
                name=membership.organization.name if membership.organization else None,
                slug=membership.organization.slug if membership.organization else None,
                role=membership.role,
                member_id=membership.id,
                joined_at=membership.joined_at,
            )
            for membership in memberships
        ]

    def get_session_state(self, auth: AuthContext) -> SessionState:
        """
        Build the session state returned to clients

        Args:
            auth: Context produced by the route guard

        Returns:
            SessionState with user info, active org, and all org memberships
        """
        current = auth.organization
        return SessionState(
            user_id=auth.user.id,
            user_email=auth.user.email,
            user_display_name=auth.user.name,
            organization_id=current.organization_id if current else None,
            organization_name=(
                current.organization.name
                if current and current.organization
                else None
            ),
            role=current.role if current else None,
            member_id=current.membership_id if current else None,
            organizations=self.organizations_from(auth.memberships),
        )


async def validate_organization_access(
    user_id: str, organization_id: str, store: MembershipStore
) -> Membership:
    """
    Validate that a user has an active membership in an organization

    Args:
        user_id: User's ID
        organization_id: Organization ID to check access for
        store: Membership store

    Returns:
        Membership with role and organization details

    Raises:
        NotAMemberError: If user doesn't have access to organization
    """
    membership = await store.find_membership(user_id, organization_id)

    if not membership or not membership.is_active:
        logger.warning(f"User {user_id} not member of organization {organization_id}")
        raise NotAMemberError(organization_id)

    return membership
