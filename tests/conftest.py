"""Shared test fixtures for the repair order test suite."""

import json
from datetime import timedelta
from decimal import Decimal
from pathlib import Path
from uuid import uuid4

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

from clients.vault_client import reset_vault_cache
from core.context import OwnerContext
from core.models import DeviceCondition, RepairOrder, RepairOrderStatus
from utils.timezone import now_utc

# Reset vault client singleton to pick up env vars
reset_vault_cache()


# =============================================================================
# TEST OWNER CONSTANTS
# =============================================================================

# Primary technician - use for single-owner tests
TEST_OWNER_ID = "owner-a-0001"
TEST_OWNER_EMAIL = "tech-a@test.local"

# Secondary technician - use for isolation tests
TEST_OWNER_B_ID = "owner-b-0002"


# =============================================================================
# OWNER CONTEXT FIXTURES
# =============================================================================


@pytest.fixture
def test_owner_id() -> str:
    """The primary technician's owner id."""
    return TEST_OWNER_ID


@pytest.fixture
def test_owner_b_id() -> str:
    """The secondary technician's owner id (for isolation tests)."""
    return TEST_OWNER_B_ID


@pytest.fixture
def owner_context(test_owner_id) -> OwnerContext:
    """Authenticated context for the primary technician."""
    return OwnerContext(owner_id=test_owner_id, session_token="test-token")


@pytest.fixture
def anonymous_context() -> OwnerContext:
    return OwnerContext.anonymous()


# =============================================================================
# ORDER FIXTURES
# =============================================================================


@pytest.fixture
def make_order(test_owner_id):
    """
    Factory for stored RepairOrder instances.

    Each call is one second older than the previous one unless created_at
    is given, so a list built in call order is newest first.
    """
    base = now_utc().replace(microsecond=0)
    counter = {"n": 0}

    def _make(**overrides) -> RepairOrder:
        created_at = overrides.pop("created_at", base - timedelta(seconds=counter["n"]))
        counter["n"] += 1
        fields = {
            "id": uuid4(),
            "owner_id": test_owner_id,
            "customer_name": "Jane Doe",
            "phone_number": "+1 555 0100",
            "device_brand": "Apple",
            "device_model": "iPhone 13",
            "imei": None,
            "problem_description": "Cracked screen",
            "device_condition": DeviceCondition.DAMAGED,
            "estimated_cost": Decimal("100.00"),
            "status": RepairOrderStatus.PENDING,
            "track_code": f"TRK{counter['n']:05d}",
            "created_at": created_at,
            "updated_at": created_at,
        }
        fields.update(overrides)
        return RepairOrder(**fields)

    return _make


@pytest.fixture
def order_row(make_order):
    """Factory for repair_orders rows as PostgresClient returns them."""

    def _row(**overrides) -> dict:
        order = make_order(**overrides)
        row = order.model_dump()
        row["id"] = str(order.id)
        row["device_condition"] = order.device_condition.value
        row["status"] = order.status.value
        return row

    return _row


# =============================================================================
# VALKEY FIXTURES
# =============================================================================


class InMemoryValkey:
    """
    Dict-backed stand-in for ValkeyClient with the same method surface.

    TTLs are recorded, not enforced; tests that need expiry delete keys.
    """

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def ping(self) -> bool:
        return True

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, expire_seconds=None):
        self.data[key] = value
        if expire_seconds is not None:
            self.ttls[key] = expire_seconds
        else:
            self.ttls.pop(key, None)

    def delete(self, key):
        self.ttls.pop(key, None)
        return self.data.pop(key, None) is not None

    def incr(self, key):
        value = int(self.data.get(key, "0")) + 1
        self.data[key] = str(value)
        return value

    def expire(self, key, seconds):
        if key not in self.data:
            return False
        self.ttls[key] = seconds
        return True

    def ttl(self, key):
        if key not in self.data:
            return -2
        return self.ttls.get(key, -1)

    def set_json(self, key, value, expire_seconds=None):
        self.set(key, json.dumps(value), expire_seconds)

    def get_json(self, key):
        value = self.get(key)
        return None if value is None else json.loads(value)

    def close(self):
        pass


@pytest.fixture
def valkey():
    """In-memory Valkey double."""
    return InMemoryValkey()
