# tenant_api/domains/auth/routes.py
from fastapi import APIRouter, Depends

from tenant_api.core.database import get_store
from tenant_api.core.store import MembershipStore
from tenant_api.domains.auth.dependencies import get_onboarding_context
from tenant_api.domains.auth.models import SessionState
from tenant_api.domains.auth.service import SessionService
from tenant_api.domains.auth.types import AuthContext

# Add a prefix and tag to group this route clearly in OpenAPI
router = APIRouter(prefix="/session", tags=["Sessions"])


@router.get(
    "",
    response_model=SessionState,
    operation_id="getSessionState",
)
async def get_session_state(
    auth: AuthContext = Depends(get_onboarding_context),
    store: MembershipStore = Depends(get_store),
) -> SessionState:
    """
    Current session state.

    Works before the user belongs to any organization, in which case the
    organization fields are empty.
    """
    service = SessionService(store)
    return service.get_session_state(auth)
