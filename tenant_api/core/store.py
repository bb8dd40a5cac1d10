# tenant_api/core/store.py
import logging
from typing import TYPE_CHECKING, List, Optional, Protocol

from tenant_api.domains.auth.types import Membership, Session, User
from tenant_api.shared.exceptions import StoreUnavailableError

if TYPE_CHECKING:
    from prisma import Prisma

logger = logging.getLogger(__name__)


class MembershipStore(Protocol):
    """
    Read-only lookups the authorization chain depends on.

    Implementations must exclude soft-deleted memberships from every
    active query and embed the organization on returned memberships.
    Failures surface as StoreUnavailableError; callers do not retry.
    """

    async def find_session_by_key(self, key: str) -> Optional[Session]: ...

    async def find_user_by_id(self, user_id: str) -> Optional[User]: ...

    async def list_active_memberships_by_user(
        self, user_id: str
    ) -> List[Membership]: ...

    async def find_membership(
        self, user_id: str, organization_id: str
    ) -> Optional[Membership]: ...


class PrismaMembershipStore:
    """MembershipStore backed by the Prisma client."""

    def __init__(self, db: "Prisma"):
        self.db = db

    async def find_session_by_key(self, key: str) -> Optional[Session]:
        try:
            session = await self.db.session.find_unique(where={"token": key})
        except Exception as e:
            logger.error(f"Session lookup failed: {e}")
            raise StoreUnavailableError() from e
        return Session.from_prisma(session) if session else None

    async def find_user_by_id(self, user_id: str) -> Optional[User]:
        try:
            user = await self.db.user.find_unique(where={"id": user_id})
        except Exception as e:
            logger.error(f"User lookup failed for {user_id}: {e}")
            raise StoreUnavailableError() from e
        return User.from_prisma(user) if user else None

    async def list_active_memberships_by_user(self, user_id: str) -> List[Membership]:
        try:
            members = await self.db.organizationmember.find_many(
                where={"userId": user_id, "deletedAt": None},
                include={"organization": True},
                order={"joinedAt": "desc"},
            )
        except Exception as e:
            logger.error(f"Membership listing failed for user {user_id}: {e}")
            raise StoreUnavailableError() from e
        return [Membership.from_prisma(member) for member in members]

    async def find_membership(
        self, user_id: str, organization_id: str
    ) -> Optional[Membership]:
        try:
            member = await self.db.organizationmember.find_first(
                where={
                    "userId": user_id,
                    "organizationId": organization_id,
                    "deletedAt": None,  # Only active members
                },
                include={"organization": True},
                order={"joinedAt": "desc"},
            )
        except Exception as e:
            logger.error(
                f"Membership lookup failed for user {user_id} "
                f"in organization {organization_id}: {e}"
            )
            raise StoreUnavailableError() from e
        return Membership.from_prisma(member) if member else None
