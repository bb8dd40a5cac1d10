"""Auth domain type definitions shared by the resolver chain and handlers."""

from datetime import datetime
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tenant_api.shared.enums import OrganizationRole


class User(BaseModel):
    """Public user fields. Credential columns are never loaded into this model."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: Optional[str] = None
    role: Optional[str] = Field(None, description="Platform-level role flag")
    banned: bool = False
    email_verified: bool = False
    image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_prisma(cls, user: Any) -> "User":
        return cls(
            id=user.id,
            email=user.email,
            name=getattr(user, "name", None),
            role=getattr(user, "role", None),
            banned=bool(getattr(user, "banned", False)),
            email_verified=bool(getattr(user, "emailVerified", False)),
            image=getattr(user, "image", None),
            created_at=getattr(user, "createdAt", None),
            updated_at=getattr(user, "updatedAt", None),
        )


class Session(BaseModel):
    """Session row as issued by the identity provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    token: str
    user_id: str
    expires_at: datetime

    @classmethod
    def from_prisma(cls, session: Any) -> "Session":
        return cls(
            id=session.id,
            token=session.token,
            user_id=session.userId,
            expires_at=session.expiresAt,
        )


class Organization(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    slug: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_prisma(cls, organization: Any) -> "Organization":
        return cls(
            id=organization.id,
            name=organization.name,
            slug=organization.slug,
            created_at=getattr(organization, "createdAt", None),
            updated_at=getattr(organization, "updatedAt", None),
        )


class Membership(BaseModel):
    """
    A user's role within one organization.

    `role` is None when the stored value is not a recognised role; every
    permission rule denies such memberships.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    organization_id: str
    role: Optional[OrganizationRole] = None
    joined_at: datetime
    deleted_at: Optional[datetime] = None
    organization: Optional[Organization] = None

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v: object) -> Optional[OrganizationRole]:
        return OrganizationRole.parse(v)

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    @classmethod
    def from_prisma(cls, member: Any) -> "Membership":
        organization = getattr(member, "organization", None)
        return cls(
            id=member.id,
            user_id=member.userId,
            organization_id=member.organizationId,
            role=member.role,
            joined_at=member.joinedAt,
            deleted_at=getattr(member, "deletedAt", None),
            organization=(
                Organization.from_prisma(organization) if organization else None
            ),
        )


class ResolvedSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    user_id: str
    expires_at: datetime
    user: User


class OrgContext(BaseModel):
    """The organization a request acts within, and the caller's role there."""

    model_config = ConfigDict(frozen=True)

    organization_id: str
    organization: Optional[Organization] = None
    membership_id: str
    role: Optional[OrganizationRole] = None


class AuthContext(BaseModel):
    """
    Immutable per-request context produced by the route guard.

    Handlers receive it as an explicit dependency and must treat it as
    read-only.
    """

    model_config = ConfigDict(frozen=True)

    user: User
    session_id: str
    memberships: Tuple[Membership, ...] = ()
    organization: Optional[OrgContext] = None

    @property
    def active_organization_id(self) -> Optional[str]:
        return self.organization.organization_id if self.organization else None

    @property
    def membership_id(self) -> Optional[str]:
        return self.organization.membership_id if self.organization else None

    @property
    def role(self) -> Optional[OrganizationRole]:
        return self.organization.role if self.organization else None
