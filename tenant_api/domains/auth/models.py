# tenant_api/domains/auth/models.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from tenant_api.shared.enums import OrganizationRole


class OrganizationMembership(BaseModel):
    id: str
    name: Optional[str] = None
    slug: Optional[str] = None
    role: Optional[OrganizationRole] = None
    member_id: str
    joined_at: Optional[datetime] = None


class SessionState(BaseModel):
    user_id: str
    user_email: str
    user_display_name: Optional[str] = None
    organization_id: Optional[str] = None
    organization_name: Optional[str] = None
    role: Optional[OrganizationRole] = None
    member_id: Optional[str] = None
    organizations: List[OrganizationMembership] = []
