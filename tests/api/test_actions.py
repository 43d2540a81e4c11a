"""Tests for POST /api/actions."""

from decimal import Decimal
from uuid import uuid4

import pytest

from core.exceptions import PersistenceError
from core.models import RepairOrderCreate, RepairOrderStatus, RepairOrderUpdate


def _action(action: str, data: dict) -> dict:
    return {"domain": "repair_order", "action": action, "data": data}


@pytest.fixture
def create_payload():
    return {
        "customer_name": "Jane Doe",
        "phone_number": "0101",
        "device_brand": "Apple",
        "device_model": "iPhone 13",
        "problem_description": "Cracked screen",
        "device_condition": "Damaged",
        "estimated_cost": "80.00",
    }


class TestActionRouting:
    """Domain and action validation."""

    def test_unknown_domain(self, client):
        response = client.post("/api/actions", json={"domain": "invoice", "action": "create", "data": {}})

        assert response.status_code == 400
        assert "repair_order" in response.json()["error"]["message"]

    def test_unknown_action(self, client):
        response = client.post("/api/actions", json=_action("archive", {}))

        assert response.status_code == 400
        assert "change_status" in response.json()["error"]["message"]

    def test_malformed_body(self, client):
        response = client.post("/api/actions", json={"domain": "repair_order"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_requires_session(self, unauthed_client, create_payload, store):
        response = unauthed_client.post("/api/actions", json=_action("create", create_payload))

        assert response.status_code == 401
        store.create.assert_not_called()


class TestCreateAction:
    """action=create."""

    def test_creates_order(self, client, store, make_order, create_payload, test_owner_id):
        created = make_order(estimated_cost=Decimal("80.00"))
        store.create.return_value = created

        response = client.post("/api/actions", json=_action("create", create_payload))

        assert response.status_code == 200
        assert response.json()["data"]["track_code"] == created.track_code
        owner_id, data = store.create.call_args.args
        assert owner_id == test_owner_id
        assert isinstance(data, RepairOrderCreate)

    def test_missing_field_rejected_before_store(self, client, store, create_payload):
        del create_payload["customer_name"]

        response = client.post("/api/actions", json=_action("create", create_payload))

        assert response.status_code == 422
        assert "customer_name" in response.json()["error"]["message"]
        store.create.assert_not_called()

    def test_new_order_appears_first_in_list(self, client, store, make_order, create_payload):
        existing = make_order(customer_name="Old")
        store.list_by_owner.return_value = [existing]
        client.get("/api/data?type=orders")

        store.create.return_value = make_order(customer_name="New")
        client.post("/api/actions", json=_action("create", create_payload))

        data = client.get("/api/data?type=orders").json()["data"]
        assert [o["customer_name"] for o in data["orders"]] == ["New", "Old"]


class TestChangeStatusAction:
    """action=change_status."""

    def test_any_status_to_any_status(self, client, store, make_order, test_owner_id):
        order = make_order(status=RepairOrderStatus.READY)
        store.update_status.return_value = order.model_copy(update={"status": RepairOrderStatus.PENDING})

        response = client.post(
            "/api/actions",
            json=_action("change_status", {"id": str(order.id), "status": "Pending"}),
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "Pending"
        store.update_status.assert_called_once_with(test_owner_id, order.id, RepairOrderStatus.PENDING)

    def test_unknown_status(self, client, store):
        response = client.post(
            "/api/actions",
            json=_action("change_status", {"id": str(uuid4()), "status": "Lost"}),
        )

        assert response.status_code == 422
        store.update_status.assert_not_called()

    def test_persistence_failure_keeps_cached_status(self, client, store, make_order):
        order = make_order(status=RepairOrderStatus.PENDING)
        store.list_by_owner.return_value = [order]
        client.get("/api/data?type=orders")
        store.update_status.side_effect = PersistenceError()

        response = client.post(
            "/api/actions",
            json=_action("change_status", {"id": str(order.id), "status": "Collected"}),
        )

        assert response.status_code == 503
        data = client.get("/api/data?type=orders").json()["data"]
        assert data["orders"][0]["status"] == "Pending"


class TestUpdateAction:
    """action=update."""

    def test_updates_fields(self, client, store, make_order):
        order = make_order()
        store.update_fields.return_value = order.model_copy(update={"phone_number": "0999"})

        response = client.post(
            "/api/actions",
            json=_action("update", {"id": str(order.id), "phone_number": "0999"}),
        )

        assert response.status_code == 200
        _, order_id, data = store.update_fields.call_args.args
        assert order_id == order.id
        assert isinstance(data, RepairOrderUpdate)
        assert data.model_dump(exclude_unset=True) == {"phone_number": "0999"}

    def test_status_not_editable_through_update(self, client, store, make_order):
        response = client.post(
            "/api/actions",
            json=_action("update", {"id": str(uuid4()), "status": "Collected"}),
        )

        assert response.status_code == 422
        store.update_fields.assert_not_called()

    def test_missing_id(self, client):
        response = client.post("/api/actions", json=_action("update", {"phone_number": "1"}))

        assert response.status_code == 400


class TestDeleteAction:
    """action=delete."""

    def test_deletes(self, client, store):
        store.delete.return_value = True

        response = client.post("/api/actions", json=_action("delete", {"id": str(uuid4())}))

        assert response.status_code == 200
        assert response.json()["data"] == {"deleted": True}

    def test_not_found(self, client, store):
        store.delete.return_value = False

        response = client.post("/api/actions", json=_action("delete", {"id": str(uuid4())}))

        assert response.status_code == 404
