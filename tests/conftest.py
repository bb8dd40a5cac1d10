"""
Global pytest configuration and fixtures for the Tenant API test suite.
"""

from typing import Dict
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tenant_api.core.settings import settings
from tenant_api.main import create_app

# Import fixtures from fixture modules
from tests.fixtures.auth_fixtures import *  # noqa: F403, F401
from tests.fixtures.auth_fixtures import TEST_SESSION_TOKEN
from tests.fixtures.organization_fixtures import *  # noqa: F403, F401
from tests.fixtures.outline_fixtures import *  # noqa: F403, F401


@pytest.fixture
def mock_prisma() -> Mock:
    """
    Mock Prisma client for unit tests that don't need real database.
    """
    mock_db = Mock()
    # Make async methods return AsyncMock
    mock_db.session.find_unique = AsyncMock()
    mock_db.user.find_unique = AsyncMock()
    mock_db.organization.find_unique = AsyncMock()
    mock_db.organization.find_first = AsyncMock()
    mock_db.organization.create = AsyncMock()
    mock_db.organization.update = AsyncMock()
    mock_db.organizationmember.find_first = AsyncMock()
    mock_db.organizationmember.find_many = AsyncMock()
    mock_db.organizationmember.create = AsyncMock()
    mock_db.organizationmember.update = AsyncMock()
    mock_db.organizationmember.count = AsyncMock()
    mock_db.outline.find_first = AsyncMock()
    mock_db.outline.find_many = AsyncMock()
    mock_db.outline.create = AsyncMock()
    mock_db.outline.update = AsyncMock()
    mock_db.outline.count = AsyncMock()

    # Interactive transactions run against the same mocked models
    transaction = MagicMock()
    transaction.__aenter__.return_value = mock_db
    transaction.__aexit__.return_value = False
    mock_db.tx = Mock(return_value=transaction)
    return mock_db


@pytest.fixture
def app(mock_prisma: Mock, mock_store: Mock) -> FastAPI:
    """
    Application with mocked state.

    The lifespan only runs when TestClient is used as a context manager,
    so no database connection is attempted.
    """
    application = create_app()
    application.state.db = mock_prisma
    application.state.store = mock_store
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """FastAPI test client for API endpoint testing."""
    return TestClient(app)


@pytest.fixture
def session_headers() -> Dict[str, str]:
    """Request headers carrying a signed session cookie."""
    return {"Cookie": f"{settings.SESSION_COOKIE_NAME}={TEST_SESSION_TOKEN}.signature"}
