# tenant_api/core/database.py
from typing import TYPE_CHECKING

from fastapi import Request

from tenant_api.core.store import MembershipStore

if TYPE_CHECKING:
    from prisma import Prisma


async def get_db(request: Request) -> "Prisma":
    """Database dependency for FastAPI dependency injection.

    The client is created once per process in the application lifespan.
    """
    return request.app.state.db


async def get_store(request: Request) -> MembershipStore:
    """Membership store dependency used by the authorization chain."""
    return request.app.state.store
