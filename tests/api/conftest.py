"""API test fixtures - TestClient around the assembled app with mocked storage."""

from datetime import timedelta
from unittest.mock import Mock

import pytest
from starlette.testclient import TestClient

from api.app import create_app
from auth.config import AuthConfig
from auth.exceptions import SessionExpiredError
from auth.rate_limiter import RateLimiter
from auth.session import SessionManager
from auth.types import Session
from core.order_book import OrderBookCache
from core.services.order_store import OrderStore
from utils.timezone import now_utc


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def store():
    """OrderStore double; tests set return values per call."""
    mock = Mock(spec=OrderStore)
    mock.list_by_owner.return_value = []
    return mock


@pytest.fixture
def books(store):
    return OrderBookCache(store)


@pytest.fixture
def rate_limiter(valkey):
    return RateLimiter(valkey, AuthConfig(track_lookup_attempts=3))


# =============================================================================
# AUTH FIXTURES
# =============================================================================


@pytest.fixture
def mock_session_manager(test_owner_id):
    now = now_utc()
    mock = Mock(spec=SessionManager)

    def validate(token):
        if token != "test-token":
            raise SessionExpiredError("Session not found or expired")
        return Session(
            token=token,
            owner_id=test_owner_id,
            email="tech-a@test.local",
            created_at=now,
            expires_at=now + timedelta(hours=24),
            last_activity_at=now,
        )

    mock.validate_session.side_effect = validate
    return mock


# =============================================================================
# SERVICES DICT
# =============================================================================


@pytest.fixture
def services(store, books, mock_session_manager, rate_limiter):
    return {
        "store": store,
        "books": books,
        "sessions": mock_session_manager,
        "rate_limiter": rate_limiter,
    }


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(services):
    """Full application: middleware, error handlers, every router."""
    return create_app(services)


@pytest.fixture
def client(app):
    """Authenticated test client."""
    c = TestClient(app, raise_server_exceptions=False)
    c.cookies.set("session_token", "test-token")
    return c


@pytest.fixture
def unauthed_client(app):
    """Unauthenticated test client (no session cookie)."""
    return TestClient(app, raise_server_exceptions=False)
