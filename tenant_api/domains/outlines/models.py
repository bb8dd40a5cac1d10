# tenant_api/domains/outlines/models.py
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from tenant_api.shared.enums import OrganizationRole, OutlineStatus, SectionType

# Fields that may not be cleared with an explicit null
NON_NULLABLE_FIELDS = ("header", "sectionType", "status", "target", "limit")


def _strip_header(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Header is required")
    return v


class OutlineCreate(BaseModel):
    """Request model for creating an outline"""

    header: str = Field(..., max_length=255)
    sectionType: SectionType
    status: OutlineStatus = OutlineStatus.PENDING
    target: int = Field(0, ge=0)
    limit: int = Field(0, ge=0)
    reviewerMemberId: Optional[str] = None
    # Organization context only, never written to the outline
    organizationId: Optional[str] = None

    @field_validator("header")
    @classmethod
    def strip_header(cls, v: str) -> str:
        return _strip_header(v)


class OutlineUpdate(BaseModel):
    """
    Request model for partial outline updates.

    Only fields present in the request body are considered, so the set of
    requested fields is `model_dump(exclude_unset=True)`.
    """

    header: Optional[str] = Field(None, max_length=255)
    sectionType: Optional[SectionType] = None
    status: Optional[OutlineStatus] = None
    target: Optional[int] = Field(None, ge=0)
    limit: Optional[int] = Field(None, ge=0)
    reviewerMemberId: Optional[str] = None
    organizationId: Optional[str] = None

    @field_validator("header")
    @classmethod
    def strip_header(cls, v: Optional[str]) -> Optional[str]:
        return _strip_header(v)

    @model_validator(mode="after")
    def reject_null_fields(self) -> "OutlineUpdate":
        for name in NON_NULLABLE_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def requested_updates(self) -> dict[str, Any]:
        """Fields the client asked to change, without the context field."""
        updates = self.model_dump(exclude_unset=True, mode="json")
        updates.pop("organizationId", None)
        return updates


class OutlineMemberSummary(BaseModel):
    id: str
    userId: str
    role: Optional[OrganizationRole] = None
    name: Optional[str] = None
    email: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v: object) -> Optional[OrganizationRole]:
        return OrganizationRole.parse(v)

    @classmethod
    def from_prisma(cls, member: Any) -> Optional["OutlineMemberSummary"]:
        if member is None:
            return None
        user = getattr(member, "user", None)
        return cls(
            id=member.id,
            userId=member.userId,
            role=member.role,
            name=user.name if user else None,
            email=user.email if user else None,
        )


class OutlineResponse(BaseModel):
    """Response model for outline data"""

    id: str
    header: str
    sectionType: SectionType
    status: OutlineStatus
    target: int
    limit: int
    organizationId: str
    createdByMemberId: str
    reviewerMemberId: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    createdBy: Optional[OutlineMemberSummary] = None
    reviewerMember: Optional[OutlineMemberSummary] = None

    @classmethod
    def from_prisma(cls, outline: Any) -> "OutlineResponse":
        return cls(
            id=outline.id,
            header=outline.header,
            sectionType=outline.sectionType,
            status=outline.status,
            target=outline.target,
            limit=outline.limit,
            organizationId=outline.organizationId,
            createdByMemberId=outline.createdByMemberId,
            reviewerMemberId=outline.reviewerMemberId,
            createdAt=outline.createdAt,
            updatedAt=outline.updatedAt,
            createdBy=OutlineMemberSummary.from_prisma(
                getattr(outline, "createdBy", None)
            ),
            reviewerMember=OutlineMemberSummary.from_prisma(
                getattr(outline, "reviewerMember", None)
            ),
        )


class PaginationMetadata(BaseModel):
    """Pagination metadata for list responses"""

    page: int
    per_page: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool


class OutlineListResponse(BaseModel):
    """Response model for outline list with pagination"""

    outlines: List[OutlineResponse]
    pagination: PaginationMetadata


class OutlineStatsResponse(BaseModel):
    organizationId: str
    organizationName: str
    organizationSlug: str
    totalOutlines: int
    completedOutlines: int
    inProgressOutlines: int
    pendingOutlines: int
    completionRate: float
