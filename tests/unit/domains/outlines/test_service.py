"""
Tests for OutlineService in tenant_api/domains/outlines/service.py
"""

from unittest.mock import Mock

import pytest

from tenant_api.domains.outlines.models import OutlineCreate, OutlineUpdate
from tenant_api.domains.outlines.service import (
    DUPLICATE_HEADER,
    OUTLINE_INCLUDE,
    REVIEWER_NOT_FOUND,
    OutlineService,
)
from tenant_api.shared.enums import OutlineStatus
from tenant_api.shared.exceptions import (
    ConflictError,
    InvalidDataError,
    MemberNotFoundError,
    OrganizationNotFoundError,
    OutlineNotFoundError,
    PermissionDeniedError,
)
from tenant_api.shared.permissions.outlines import (
    CREATOR_ONLY_DELETE,
    CREATOR_ONLY_UPDATE,
    CREATOR_STATUS_DENIED,
    NOT_SAME_ORGANIZATION,
    REVIEWER_STATUS_ONLY,
    USER_ROLE_DENIED,
)
from tests.fixtures.auth_fixtures import OTHER_ORG_ID, TEST_ORG_ID
from tests.fixtures.organization_fixtures import OrganizationTestData
from tests.fixtures.outline_fixtures import OutlineTestData


class TestCreateOutline:
    @pytest.mark.asyncio
    async def test_member_creates_outline(
        self, mock_prisma: Mock, member_context, mock_outline, outline_create_data
    ):
        mock_prisma.outline.find_first.return_value = None
        mock_prisma.outline.create.return_value = mock_outline
        service = OutlineService(mock_prisma)

        result = await service.create_outline(
            member_context, OutlineCreate(**outline_create_data)
        )

        assert result.id == "test-outline-id"
        mock_prisma.outline.create.assert_called_once_with(
            data={
                "header": "Executive Summary",
                "sectionType": "EXECUTIVE_SUMMARY",
                "status": "PENDING",
                "target": 10,
                "limit": 20,
                "organizationId": TEST_ORG_ID,
                "createdByMemberId": "creator-member-id",
                "reviewerMemberId": None,
            },
            include=OUTLINE_INCLUDE,
        )

    @pytest.mark.asyncio
    async def test_user_role_cannot_create(
        self, mock_prisma: Mock, user_role_context, outline_create_data
    ):
        service = OutlineService(mock_prisma)

        with pytest.raises(PermissionDeniedError) as exc_info:
            await service.create_outline(
                user_role_context, OutlineCreate(**outline_create_data)
            )

        assert exc_info.value.reason == USER_ROLE_DENIED
        mock_prisma.outline.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_cross_tenant_create_denied(
        self, mock_prisma: Mock, owner_context, outline_create_data
    ):
        service = OutlineService(mock_prisma)
        data = OutlineCreate(**outline_create_data, organizationId=OTHER_ORG_ID)

        with pytest.raises(PermissionDeniedError) as exc_info:
            await service.create_outline(owner_context, data)

        assert exc_info.value.reason == NOT_SAME_ORGANIZATION

    @pytest.mark.asyncio
    async def test_duplicate_header(
        self, mock_prisma: Mock, member_context, mock_outline, outline_create_data
    ):
        mock_prisma.outline.find_first.return_value = mock_outline
        service = OutlineService(mock_prisma)

        with pytest.raises(ConflictError) as exc_info:
            await service.create_outline(
                member_context, OutlineCreate(**outline_create_data)
            )

        assert exc_info.value.detail == DUPLICATE_HEADER
        mock_prisma.outline.find_first.assert_called_once_with(
            where={
                "header": "Executive Summary",
                "organizationId": TEST_ORG_ID,
                "deletedAt": None,
            }
        )

    @pytest.mark.asyncio
    async def test_unknown_reviewer(
        self, mock_prisma: Mock, member_context, outline_create_data
    ):
        mock_prisma.outline.find_first.return_value = None
        mock_prisma.organizationmember.find_first.return_value = None
        service = OutlineService(mock_prisma)
        data = OutlineCreate(**outline_create_data, reviewerMemberId="ghost")

        with pytest.raises(MemberNotFoundError) as exc_info:
            await service.create_outline(member_context, data)

        assert exc_info.value.detail == REVIEWER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_member_cannot_assign_member_reviewer(
        self, mock_prisma: Mock, member_context, outline_create_data
    ):
        mock_prisma.outline.find_first.return_value = None
        mock_prisma.organizationmember.find_first.return_value = (
            OrganizationTestData.member_record(member_id="plain", role="MEMBER")
        )
        service = OutlineService(mock_prisma)
        data = OutlineCreate(**outline_create_data, reviewerMemberId="plain")

        with pytest.raises(InvalidDataError):
            await service.create_outline(member_context, data)

    @pytest.mark.asyncio
    async def test_member_cannot_assign_self(
        self, mock_prisma: Mock, member_context, outline_create_data
    ):
        mock_prisma.outline.find_first.return_value = None
        mock_prisma.organizationmember.find_first.return_value = (
            OrganizationTestData.member_record(member_id="creator-member-id")
        )
        service = OutlineService(mock_prisma)
        data = OutlineCreate(**outline_create_data, reviewerMemberId="creator-member-id")

        with pytest.raises(InvalidDataError) as exc_info:
            await service.create_outline(member_context, data)

        assert "yourself" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_owner_may_assign_self(
        self, mock_prisma: Mock, owner_context, mock_outline, outline_create_data
    ):
        mock_prisma.outline.find_first.return_value = None
        mock_prisma.organizationmember.find_first.return_value = (
            OrganizationTestData.member_record(member_id="owner-member-id", role="OWNER")
        )
        mock_prisma.outline.create.return_value = mock_outline
        service = OutlineService(mock_prisma)
        data = OutlineCreate(**outline_create_data, reviewerMemberId="owner-member-id")

        await service.create_outline(owner_context, data)

        mock_prisma.outline.create.assert_called_once()


class TestListOutlines:
    @pytest.mark.asyncio
    async def test_pagination(self, mock_prisma: Mock, member_context, mock_outline):
        mock_prisma.outline.find_many.return_value = [mock_outline]
        mock_prisma.outline.count.return_value = 25
        service = OutlineService(mock_prisma)

        result = await service.list_outlines(member_context, page=2, per_page=10)

        assert len(result.outlines) == 1
        assert result.pagination.total == 25
        assert result.pagination.pages == 3
        assert result.pagination.has_next is True
        assert result.pagination.has_prev is True
        mock_prisma.outline.find_many.assert_called_once_with(
            where={"organizationId": TEST_ORG_ID, "deletedAt": None},
            skip=10,
            take=10,
            include=OUTLINE_INCLUDE,
            order={"createdAt": "desc"},
        )

    @pytest.mark.asyncio
    async def test_empty_list_has_one_page(self, mock_prisma: Mock, member_context):
        mock_prisma.outline.find_many.return_value = []
        mock_prisma.outline.count.return_value = 0
        service = OutlineService(mock_prisma)

        result = await service.list_outlines(member_context, page=1, per_page=10)

        assert result.pagination.pages == 1
        assert result.pagination.has_next is False
        assert result.pagination.has_prev is False

    @pytest.mark.asyncio
    async def test_assigned_filters_on_reviewer(
        self, mock_prisma: Mock, reviewer_context
    ):
        mock_prisma.outline.find_many.return_value = []
        mock_prisma.outline.count.return_value = 0
        service = OutlineService(mock_prisma)

        await service.get_assigned_outlines(reviewer_context, page=1, per_page=10)

        where = mock_prisma.outline.find_many.call_args[1]["where"]
        assert where["reviewerMemberId"] == "reviewer-member-id"
        assert where["organizationId"] == TEST_ORG_ID

    @pytest.mark.asyncio
    async def test_mine_filters_on_creator(self, mock_prisma: Mock, member_context):
        mock_prisma.outline.find_many.return_value = []
        mock_prisma.outline.count.return_value = 0
        service = OutlineService(mock_prisma)

        await service.get_my_outlines(member_context, page=1, per_page=10)

        where = mock_prisma.outline.find_many.call_args[1]["where"]
        assert where["createdByMemberId"] == "creator-member-id"

    @pytest.mark.asyncio
    async def test_user_role_cannot_list(self, mock_prisma: Mock, user_role_context):
        service = OutlineService(mock_prisma)

        with pytest.raises(PermissionDeniedError):
            await service.list_outlines(user_role_context, page=1, per_page=10)

        mock_prisma.outline.find_many.assert_not_called()


class TestGetOutline:
    @pytest.mark.asyncio
    async def test_reviewer_views_any_outline(
        self, mock_prisma: Mock, reviewer_context, mock_outline
    ):
        mock_prisma.outline.find_first.return_value = mock_outline
        service = OutlineService(mock_prisma)

        result = await service.get_outline(reviewer_context, "test-outline-id")

        assert result.header == "Executive Summary"
        mock_prisma.outline.find_first.assert_called_once_with(
            where={
                "id": "test-outline-id",
                "organizationId": TEST_ORG_ID,
                "deletedAt": None,
            },
            include=OUTLINE_INCLUDE,
        )

    @pytest.mark.asyncio
    async def test_missing_outline(self, mock_prisma: Mock, member_context):
        mock_prisma.outline.find_first.return_value = None
        service = OutlineService(mock_prisma)

        with pytest.raises(OutlineNotFoundError):
            await service.get_outline(member_context, "missing")


class TestUpdateOutline:
    @pytest.mark.asyncio
    async def test_owner_updates_everything(
        self, mock_prisma: Mock, owner_context, mock_outline
    ):
        mock_prisma.outline.find_first.side_effect = [mock_outline, None]
        mock_prisma.outline.update.return_value = mock_outline
        service = OutlineService(mock_prisma)

        await service.update_outline(
            owner_context,
            "test-outline-id",
            OutlineUpdate(header="Renamed", status=OutlineStatus.COMPLETED),
        )

        mock_prisma.outline.update.assert_called_once_with(
            where={"id": "test-outline-id"},
            data={"header": "Renamed", "status": "COMPLETED"},
            include=OUTLINE_INCLUDE,
        )

    @pytest.mark.asyncio
    async def test_creator_status_is_stripped(
        self, mock_prisma: Mock, member_context, mock_outline
    ):
        mock_prisma.outline.find_first.return_value = mock_outline
        mock_prisma.outline.update.return_value = mock_outline
        service = OutlineService(mock_prisma)

        await service.update_outline(
            member_context,
            "test-outline-id",
            OutlineUpdate(target=50, status=OutlineStatus.COMPLETED),
        )

        assert mock_prisma.outline.update.call_args[1]["data"] == {"target": 50}

    @pytest.mark.asyncio
    async def test_creator_status_only_is_denied(
        self, mock_prisma: Mock, member_context, mock_outline
    ):
        mock_prisma.outline.find_first.return_value = mock_outline
        service = OutlineService(mock_prisma)

        with pytest.raises(PermissionDeniedError) as exc_info:
            await service.update_outline(
                member_context,
                "test-outline-id",
                OutlineUpdate(status=OutlineStatus.COMPLETED),
            )

        assert exc_info.value.reason == CREATOR_STATUS_DENIED
        mock_prisma.outline.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_creator_who_reviews_may_set_status(
        self, mock_prisma: Mock, member_context
    ):
        outline = OutlineTestData.outline_record(reviewer="creator-member-id")
        mock_prisma.outline.find_first.return_value = outline
        mock_prisma.outline.update.return_value = outline
        service = OutlineService(mock_prisma)

        await service.update_outline(
            member_context,
            "test-outline-id",
            OutlineUpdate(status=OutlineStatus.IN_PROGRESS),
        )

        assert mock_prisma.outline.update.call_args[1]["data"] == {
            "status": "IN_PROGRESS"
        }

    @pytest.mark.asyncio
    async def test_other_member_cannot_update(self, mock_prisma: Mock, member_context):
        mock_prisma.outline.find_first.return_value = OutlineTestData.outline_record(
            created_by="someone-else"
        )
        service = OutlineService(mock_prisma)

        with pytest.raises(PermissionDeniedError) as exc_info:
            await service.update_outline(
                member_context, "test-outline-id", OutlineUpdate(target=1)
            )

        assert exc_info.value.reason == CREATOR_ONLY_UPDATE

    @pytest.mark.asyncio
    async def test_assigned_reviewer_updates_status(
        self, mock_prisma: Mock, reviewer_context
    ):
        outline = OutlineTestData.outline_record(reviewer="reviewer-member-id")
        mock_prisma.outline.find_first.return_value = outline
        mock_prisma.outline.update.return_value = outline
        service = OutlineService(mock_prisma)

        await service.update_outline(
            reviewer_context,
            "test-outline-id",
            OutlineUpdate(status=OutlineStatus.COMPLETED),
        )

        mock_prisma.outline.update.assert_called_once()

    @pytest.mark.asyncio
    async def test_reviewer_cannot_edit_other_fields(
        self, mock_prisma: Mock, reviewer_context
    ):
        mock_prisma.outline.find_first.return_value = OutlineTestData.outline_record(
            reviewer="reviewer-member-id"
        )
        service = OutlineService(mock_prisma)

        with pytest.raises(PermissionDeniedError) as exc_info:
            await service.update_outline(
                reviewer_context,
                "test-outline-id",
                OutlineUpdate(status=OutlineStatus.COMPLETED, header="Sneaky"),
            )

        assert exc_info.value.reason == REVIEWER_STATUS_ONLY

    @pytest.mark.asyncio
    async def test_empty_update(self, mock_prisma: Mock, owner_context):
        service = OutlineService(mock_prisma)

        with pytest.raises(InvalidDataError):
            await service.update_outline(owner_context, "test-outline-id", OutlineUpdate())

        mock_prisma.outline.find_first.assert_not_called()

    @pytest.mark.asyncio
    async def test_foreign_organization_in_body(self, mock_prisma: Mock, owner_context):
        service = OutlineService(mock_prisma)

        with pytest.raises(PermissionDeniedError) as exc_info:
            await service.update_outline(
                owner_context,
                "test-outline-id",
                OutlineUpdate(target=1, organizationId=OTHER_ORG_ID),
            )

        assert exc_info.value.reason == NOT_SAME_ORGANIZATION

    @pytest.mark.asyncio
    async def test_renamed_header_must_be_unique(
        self, mock_prisma: Mock, owner_context, mock_outline
    ):
        clash = OutlineTestData.outline_record(outline_id="other", header="Taken")
        mock_prisma.outline.find_first.side_effect = [mock_outline, clash]
        service = OutlineService(mock_prisma)

        with pytest.raises(ConflictError):
            await service.update_outline(
                owner_context, "test-outline-id", OutlineUpdate(header="Taken")
            )

        unique_check = mock_prisma.outline.find_first.call_args_list[1]
        assert unique_check[1]["where"]["id"] == {"not": "test-outline-id"}

    @pytest.mark.asyncio
    async def test_unchanged_header_skips_unique_check(
        self, mock_prisma: Mock, owner_context, mock_outline
    ):
        mock_prisma.outline.find_first.return_value = mock_outline
        mock_prisma.outline.update.return_value = mock_outline
        service = OutlineService(mock_prisma)

        await service.update_outline(
            owner_context,
            "test-outline-id",
            OutlineUpdate(header="Executive Summary", target=3),
        )

        assert mock_prisma.outline.find_first.call_count == 1

    def test_explicit_null_is_rejected(self):
        with pytest.raises(ValueError):
            OutlineUpdate(status=None)

    def test_reviewer_may_be_cleared(self):
        assert OutlineUpdate(reviewerMemberId=None).requested_updates() == {
            "reviewerMemberId": None
        }


class TestDeleteOutline:
    @pytest.mark.asyncio
    async def test_creator_deletes_own(
        self, mock_prisma: Mock, member_context, mock_outline
    ):
        mock_prisma.outline.find_first.return_value = mock_outline
        mock_prisma.outline.update.return_value = mock_outline
        service = OutlineService(mock_prisma)

        await service.delete_outline(member_context, "test-outline-id")

        call = mock_prisma.outline.update.call_args[1]
        assert call["where"] == {"id": "test-outline-id"}
        assert call["data"]["deletedAt"] is not None

    @pytest.mark.asyncio
    async def test_reviewer_cannot_delete_others(
        self, mock_prisma: Mock, reviewer_context, mock_outline
    ):
        mock_prisma.outline.find_first.return_value = mock_outline
        service = OutlineService(mock_prisma)

        with pytest.raises(PermissionDeniedError) as exc_info:
            await service.delete_outline(reviewer_context, "test-outline-id")

        assert exc_info.value.reason == CREATOR_ONLY_DELETE
        mock_prisma.outline.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_owner_deletes_any(self, mock_prisma: Mock, owner_context, mock_outline):
        mock_prisma.outline.find_first.return_value = mock_outline
        mock_prisma.outline.update.return_value = mock_outline
        service = OutlineService(mock_prisma)

        await service.delete_outline(owner_context, "test-outline-id")

        mock_prisma.outline.update.assert_called_once()


class TestStats:
    @pytest.mark.asyncio
    async def test_counts_by_status(
        self, mock_prisma: Mock, member_context, mock_organization
    ):
        mock_prisma.organization.find_unique.return_value = mock_organization
        # total, then PENDING, IN_PROGRESS, COMPLETED
        mock_prisma.outline.count.side_effect = [8, 3, 3, 2]
        service = OutlineService(mock_prisma)

        stats = await service.get_stats(member_context)

        assert stats.totalOutlines == 8
        assert stats.pendingOutlines == 3
        assert stats.inProgressOutlines == 3
        assert stats.completedOutlines == 2
        assert stats.completionRate == 25.0
        assert stats.organizationSlug == "test-organization"

    @pytest.mark.asyncio
    async def test_no_outlines(self, mock_prisma: Mock, member_context, mock_organization):
        mock_prisma.organization.find_unique.return_value = mock_organization
        mock_prisma.outline.count.return_value = 0
        service = OutlineService(mock_prisma)

        stats = await service.get_stats(member_context)

        assert stats.completionRate == 0.0

    @pytest.mark.asyncio
    async def test_missing_organization(self, mock_prisma: Mock, member_context):
        mock_prisma.organization.find_unique.return_value = None
        service = OutlineService(mock_prisma)

        with pytest.raises(OrganizationNotFoundError):
            await service.get_stats(member_context)


class TestAvailableReviewers:
    @pytest.mark.asyncio
    async def test_owner_sees_everyone(self, mock_prisma: Mock, owner_context):
        mock_prisma.organizationmember.find_many.return_value = []
        service = OutlineService(mock_prisma)

        await service.get_available_reviewers(owner_context)

        where = mock_prisma.organizationmember.find_many.call_args[1]["where"]
        assert where == {"organizationId": TEST_ORG_ID, "deletedAt": None}

    @pytest.mark.asyncio
    async def test_member_sees_other_reviewers_and_owners(
        self, mock_prisma: Mock, member_context
    ):
        mock_prisma.organizationmember.find_many.return_value = [
            OrganizationTestData.member_record(member_id="r-1", role="REVIEWER")
        ]
        service = OutlineService(mock_prisma)

        reviewers = await service.get_available_reviewers(member_context)

        assert [r.id for r in reviewers] == ["r-1"]
        where = mock_prisma.organizationmember.find_many.call_args[1]["where"]
        assert where["id"] == {"not": "creator-member-id"}
        assert where["role"] == {"in": ["OWNER", "REVIEWER"]}

    @pytest.mark.asyncio
    async def test_ordered_by_role_then_join_date(self, mock_prisma: Mock, owner_context):
        # Store returns members by join date only
        mock_prisma.organizationmember.find_many.return_value = [
            OrganizationTestData.member_record(member_id="member-1", role="MEMBER"),
            OrganizationTestData.member_record(member_id="reviewer-1", role="REVIEWER"),
            OrganizationTestData.member_record(member_id="odd-1", role="LEGACY"),
            OrganizationTestData.member_record(member_id="owner-1", role="OWNER"),
            OrganizationTestData.member_record(member_id="reviewer-2", role="REVIEWER"),
        ]
        service = OutlineService(mock_prisma)

        reviewers = await service.get_available_reviewers(owner_context)

        assert [r.id for r in reviewers] == [
            "owner-1",
            "reviewer-1",
            "reviewer-2",
            "member-1",
            "odd-1",
        ]
        assert mock_prisma.organizationmember.find_many.call_args[1]["order"] == {
            "joinedAt": "asc"
        }
