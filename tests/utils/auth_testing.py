"""
Helpers for driving the route guard in tests.
"""

from typing import List, Optional
from unittest.mock import Mock

from tenant_api.domains.auth.types import Membership, Session, User
from tests.fixtures.auth_fixtures import AuthTestData


def configure_store(
    store: Mock,
    memberships: List[Membership],
    user: Optional[User] = None,
    session: Optional[Session] = None,
) -> Mock:
    """Point a mock store at one valid session, its user and memberships."""
    user = user or AuthTestData.user()
    store.find_session_by_key.return_value = session or AuthTestData.session(
        user_id=user.id
    )
    store.find_user_by_id.return_value = user
    store.list_active_memberships_by_user.return_value = memberships
    return store
