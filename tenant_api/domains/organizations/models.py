# tenant_api/domains/organizations/models.py
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from tenant_api.shared.enums import OrganizationRole

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100, pattern=SLUG_PATTERN)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Organization name cannot be blank")
        return v


class OrganizationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100, pattern=SLUG_PATTERN)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Organization name cannot be blank")
        return v

    @model_validator(mode="after")
    def validate_has_update(self) -> "OrganizationUpdate":
        if self.name is None and self.slug is None:
            raise ValueError("At least one field must be provided for update")
        return self


class OrganizationResponse(BaseModel):
    id: str
    name: str
    slug: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_prisma(cls, organization: Any) -> "OrganizationResponse":
        return cls(
            id=organization.id,
            name=organization.name,
            slug=organization.slug,
            created_at=organization.createdAt,
            updated_at=organization.updatedAt,
        )


class CreateOrganizationResponse(BaseModel):
    organization: OrganizationResponse
    role: OrganizationRole
    member_id: str


class OrganizationMemberResponse(BaseModel):
    id: str
    user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    role: Optional[OrganizationRole] = None
    joined_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v: object) -> Optional[OrganizationRole]:
        return OrganizationRole.parse(v)

    @classmethod
    def from_prisma(cls, member: Any) -> "OrganizationMemberResponse":
        user = getattr(member, "user", None)
        return cls(
            id=member.id,
            user_id=member.userId,
            email=user.email if user else None,
            display_name=user.name if user else None,
            role=member.role,
            joined_at=member.joinedAt,
            deleted_at=member.deletedAt,
        )
