# tenant_api/domains/auth/dependencies.py
import logging
from typing import Any, Awaitable, Callable, Optional

from fastapi import Depends, Request

from tenant_api.core.database import get_store
from tenant_api.core.settings import settings
from tenant_api.core.store import MembershipStore
from tenant_api.domains.auth.context import resolve_organization_context
from tenant_api.domains.auth.service import SessionService
from tenant_api.domains.auth.types import AuthContext, OrgContext
from tenant_api.shared.exceptions import NoOrganizationContextError

logger = logging.getLogger(__name__)


def get_session_cookie(request: Request) -> Optional[str]:
    """Read the identity provider's session cookie, plain name first."""
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or request.cookies.get(
        settings.SECURE_SESSION_COOKIE_NAME
    )


async def get_body_organization_id(request: Request) -> Optional[Any]:
    """
    Organization id from a JSON request body, if there is one.

    Non-JSON and malformed bodies count as "not supplied"; validating the
    body is the handler's job.
    """
    content_type = request.headers.get("content-type", "")
    if "application/json" not in content_type.lower():
        return None
    try:
        body = await request.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get(settings.ORGANIZATION_FIELD)
    return None


async def authenticate_request(
    request: Request,
    store: MembershipStore,
    require_organization: bool = True,
) -> AuthContext:
    """
    Run the full authorization chain for a request.

    Session cookie -> session and user -> active memberships ->
    organization context. Any failure is raised as its typed error and
    the handler never runs.

    Raises:
        UnauthenticatedError, SessionExpiredError: Session problems
        NotAMemberError: Requested organization is not an active membership
        NoOrganizationContextError: No organization and one is required
        StoreUnavailableError: The membership store failed
    """
    service = SessionService(store)

    resolved = await service.resolve_session(get_session_cookie(request))
    memberships = await service.load_memberships(resolved.user_id)

    organization = resolve_organization_context(
        memberships,
        header_value=request.headers.get(settings.ORGANIZATION_HEADER),
        query_value=request.query_params.get(settings.ORGANIZATION_FIELD),
        body_value=await get_body_organization_id(request),
    )

    if organization is None and require_organization:
        logger.warning(f"User {resolved.user_id} has no organization context")
        raise NoOrganizationContextError()

    logger.debug(
        f"Authenticated user: {resolved.user_id} ({resolved.user.email}) "
        f"with {len(memberships)} organization memberships"
    )
    return AuthContext(
        user=resolved.user,
        session_id=resolved.session_id,
        memberships=memberships,
        organization=organization,
    )


def require_auth(
    *, require_organization: bool = True, public: bool = False
) -> Callable[..., Awaitable[Optional[AuthContext]]]:
    """
    Dependency factory for the route guard.

    Args:
        require_organization: Fail with NoOrganizationContextError when the
            user has no organization to act in
        public: Skip authentication entirely, the dependency yields None

    Returns:
        Async dependency returning the request's AuthContext
    """

    async def guard(
        request: Request,
        store: MembershipStore = Depends(get_store),
    ) -> Optional[AuthContext]:
        if public:
            logger.debug("Public route accessed")
            return None
        return await authenticate_request(
            request, store, require_organization=require_organization
        )

    return guard


# Guard variants shared by the routers
get_auth_context = require_auth()
get_onboarding_context = require_auth(require_organization=False)


async def get_org_context(
    auth: AuthContext = Depends(get_auth_context),
) -> OrgContext:
    """Organization context for handlers that always act within a tenant."""
    if auth.organization is None:
        raise NoOrganizationContextError()
    return auth.organization
