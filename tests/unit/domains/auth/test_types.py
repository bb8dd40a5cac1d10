"""
Tests for auth context types in tenant_api/domains/auth/types.py
"""

import pytest
from pydantic import ValidationError

from tenant_api.shared.enums import OrganizationRole
from tests.fixtures.auth_fixtures import AuthTestData


class TestAuthContext:
    def test_memberships_are_read_only(self):
        membership = AuthTestData.membership()
        auth = AuthTestData.auth_context(memberships=[membership])

        assert auth.memberships == (membership,)
        with pytest.raises(AttributeError):
            auth.memberships.append(AuthTestData.membership(member_id="extra"))

    def test_fields_cannot_be_reassigned(self):
        auth = AuthTestData.auth_context()

        with pytest.raises(ValidationError):
            auth.memberships = ()

    def test_defaults_without_organization(self):
        auth = AuthTestData.auth_context()

        assert auth.memberships == ()
        assert auth.active_organization_id is None
        assert auth.membership_id is None
        assert auth.role is None

    def test_organization_shortcuts(self):
        auth = AuthTestData.auth_context(
            organization=AuthTestData.org_context(
                OrganizationRole.REVIEWER, member_id="m-9"
            )
        )

        assert auth.membership_id == "m-9"
        assert auth.role == OrganizationRole.REVIEWER


class TestMembership:
    def test_role_is_normalized(self):
        assert AuthTestData.membership(" owner ").role == OrganizationRole.OWNER

    def test_unknown_role_is_none(self):
        assert AuthTestData.membership("SUPERADMIN").role is None
