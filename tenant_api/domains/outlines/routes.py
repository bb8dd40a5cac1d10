# tenant_api/domains/outlines/routes.py
from typing import Any, List

from fastapi import APIRouter, Depends, Query, status

from tenant_api.core.database import get_db
from tenant_api.core.settings import settings
from tenant_api.domains.auth.dependencies import get_org_context
from tenant_api.domains.auth.types import OrgContext
from tenant_api.domains.organizations.models import OrganizationMemberResponse
from tenant_api.domains.outlines.models import (
    OutlineCreate,
    OutlineListResponse,
    OutlineResponse,
    OutlineStatsResponse,
    OutlineUpdate,
)
from tenant_api.domains.outlines.service import OutlineService

# Create router with prefix and tags
router = APIRouter(prefix="/outlines", tags=["Outlines"])


@router.post(
    "",
    response_model=OutlineResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createOutline",
)
async def create_outline(
    outline_data: OutlineCreate,
    context: OrgContext = Depends(get_org_context),
    db: Any = Depends(get_db),
) -> OutlineResponse:
    service = OutlineService(db)
    return await service.create_outline(context, outline_data)


@router.get(
    "",
    response_model=OutlineListResponse,
    operation_id="getOutlines",
)
async def get_outlines(
    context: OrgContext = Depends(get_org_context),
    db: Any = Depends(get_db),
    page: int = Query(1, description="Page number for pagination", ge=1),
    per_page: int = Query(
        settings.DEFAULT_PAGE_SIZE,
        description="Number of outlines per page",
        ge=1,
        le=settings.MAX_PAGE_SIZE,
    ),
) -> OutlineListResponse:
    """Outlines in the active organization, newest first."""
    service = OutlineService(db)
    return await service.list_outlines(context, page, per_page)


@router.get(
    "/assigned",
    response_model=OutlineListResponse,
    operation_id="getAssignedOutlines",
)
async def get_assigned_outlines(
    context: OrgContext = Depends(get_org_context),
    db: Any = Depends(get_db),
    page: int = Query(1, description="Page number for pagination", ge=1),
    per_page: int = Query(
        settings.DEFAULT_PAGE_SIZE,
        description="Number of outlines per page",
        ge=1,
        le=settings.MAX_PAGE_SIZE,
    ),
) -> OutlineListResponse:
    """Outlines assigned to the current member for review."""
    service = OutlineService(db)
    return await service.get_assigned_outlines(context, page, per_page)


@router.get(
    "/mine",
    response_model=OutlineListResponse,
    operation_id="getMyOutlines",
)
async def get_my_outlines(
    context: OrgContext = Depends(get_org_context),
    db: Any = Depends(get_db),
    page: int = Query(1, description="Page number for pagination", ge=1),
    per_page: int = Query(
        settings.DEFAULT_PAGE_SIZE,
        description="Number of outlines per page",
        ge=1,
        le=settings.MAX_PAGE_SIZE,
    ),
) -> OutlineListResponse:
    """Outlines created by the current member."""
    service = OutlineService(db)
    return await service.get_my_outlines(context, page, per_page)


@router.get(
    "/stats",
    response_model=OutlineStatsResponse,
    operation_id="getOutlineStats",
)
async def get_outline_stats(
    context: OrgContext = Depends(get_org_context),
    db: Any = Depends(get_db),
) -> OutlineStatsResponse:
    service = OutlineService(db)
    return await service.get_stats(context)


@router.get(
    "/reviewers",
    response_model=List[OrganizationMemberResponse],
    operation_id="getAvailableReviewers",
)
async def get_available_reviewers(
    context: OrgContext = Depends(get_org_context),
    db: Any = Depends(get_db),
) -> List[OrganizationMemberResponse]:
    """Members the current member may assign as reviewer."""
    service = OutlineService(db)
    return await service.get_available_reviewers(context)


@router.get(
    "/{outline_id}",
    response_model=OutlineResponse,
    operation_id="getOutline",
)
async def get_outline(
    outline_id: str,
    context: OrgContext = Depends(get_org_context),
    db: Any = Depends(get_db),
) -> OutlineResponse:
    service = OutlineService(db)
    return await service.get_outline(context, outline_id)


@router.patch(
    "/{outline_id}",
    response_model=OutlineResponse,
    operation_id="updateOutline",
)
async def update_outline(
    outline_id: str,
    updates: OutlineUpdate,
    context: OrgContext = Depends(get_org_context),
    db: Any = Depends(get_db),
) -> OutlineResponse:
    """
    Update an outline.

    Which fields are written depends on the caller's role and relation to
    the outline. Members who created an outline but do not review it have
    status changes dropped from the request while the rest is applied.
    """
    service = OutlineService(db)
    return await service.update_outline(context, outline_id, updates)


@router.delete(
    "/{outline_id}",
    response_model=OutlineResponse,
    operation_id="deleteOutline",
)
async def delete_outline(
    outline_id: str,
    context: OrgContext = Depends(get_org_context),
    db: Any = Depends(get_db),
) -> OutlineResponse:
    service = OutlineService(db)
    return await service.delete_outline(context, outline_id)
