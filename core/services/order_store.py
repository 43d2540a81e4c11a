"""
Order store: the persistence side of repair orders.

Translates between repair_orders rows and RepairOrder models. Every
owner-scoped statement carries the owner id in its WHERE clause, so an
order belonging to someone else is indistinguishable from a missing one.

Driver failures never leave this module as psycopg2 errors: they are
logged and re-raised as PersistenceError.
"""

import logging
from contextlib import contextmanager
from typing import Any
from uuid import UUID, uuid4

import psycopg2

from clients.postgres_client import PostgresClient
from core.audit import AuditLogger, AuditAction, compute_changes
from core.config import ShopConfig
from core.exceptions import OrderNotFoundError, PersistenceError
from core.lifecycle import INITIAL_STATUS, ensure_valid_transition
from core.models import RepairOrder, RepairOrderCreate, RepairOrderStatus, RepairOrderUpdate
from core.track_codes import generate_track_code, normalize_track_code
from utils.timezone import now_utc, as_utc

logger = logging.getLogger(__name__)

ENTITY_TYPE = "repair_order"

_UPDATABLE_COLUMNS = {
    "customer_name", "phone_number", "device_brand", "device_model",
    "imei", "problem_description", "device_condition", "estimated_cost",
}

_NULLABLE_COLUMNS = {"imei"}


@contextmanager
def _translate_errors(operation: str):
    """Turn driver errors into PersistenceError, keeping the cause."""
    try:
        yield
    except psycopg2.Error as e:
        logger.error(f"Order store {operation} failed: {e}")
        raise PersistenceError() from e


def _to_order(row: dict[str, Any]) -> RepairOrder:
    row = dict(row)
    row["created_at"] = as_utc(row["created_at"])
    row["updated_at"] = as_utc(row["updated_at"])
    return RepairOrder.model_validate(row)


class OrderStore:
    """Persistence operations for repair orders."""

    def __init__(self, postgres: PostgresClient, audit: AuditLogger, config: ShopConfig | None = None):
        self.postgres = postgres
        self.audit = audit
        self.config = config or ShopConfig()

    def _log_audit(self, owner_id: str, order_id: UUID, action: AuditAction, changes: dict) -> None:
        # The order write has already committed; a lost audit row must not undo it.
        try:
            self.audit.log_change(
                owner_id=owner_id,
                entity_type=ENTITY_TYPE,
                entity_id=order_id,
                action=action,
                changes=changes,
            )
        except Exception:
            logger.exception(
                "Audit write failed for %s %s (action=%s)", ENTITY_TYPE, order_id, action.value
            )

    def _track_code_exists(self, code: str) -> bool:
        return bool(self.postgres.execute_scalar(
            "SELECT EXISTS (SELECT 1 FROM repair_orders WHERE track_code = %s)",
            (code,)
        ))

    def _allocate_track_code(self) -> str:
        """
        Draw a track code not already used by any order.

        Raises:
            PersistenceError: If every attempt collided
        """
        for attempt in range(1, self.config.track_code_max_attempts + 1):
            code = generate_track_code(self.config.track_code_length)
            if not self._track_code_exists(code):
                return code
            logger.warning(f"Track code collision on attempt {attempt}, regenerating")

        raise PersistenceError("Could not allocate a track code. Please try again later.")

    def create(self, owner_id: str, data: RepairOrderCreate) -> RepairOrder:
        """
        Persist a new repair order.

        Assigns id, track code, Pending status and both timestamps.

        Args:
            owner_id: Owner the order belongs to from now on
            data: Validated submission fields

        Returns:
            The stored order
        """
        with _translate_errors("create"):
            track_code = self._allocate_track_code()
            order_id = uuid4()
            now = now_utc()

            row = self.postgres.execute_returning(
                """
                INSERT INTO repair_orders (
                    id, owner_id, customer_name, phone_number,
                    device_brand, device_model, imei,
                    problem_description, device_condition, estimated_cost,
                    status, track_code, created_at, updated_at
                ) VALUES (
                    %s, %s, %s, %s,
                    %s, %s, %s,
                    %s, %s, %s,
                    %s, %s, %s, %s
                )
                RETURNING *
                """,
                (
                    order_id, owner_id, data.customer_name, data.phone_number,
                    data.device_brand, data.device_model, data.imei or None,
                    data.problem_description, data.device_condition.value, data.estimated_cost,
                    INITIAL_STATUS.value, track_code, now, now
                )
            )[0]

        order = _to_order(row)
        logger.info(f"Created repair order {order.id} ({order.track_code})")

        self._log_audit(
            owner_id, order.id, AuditAction.CREATE,
            {"created": order.model_dump(mode="json", exclude={"owner_id"})},
        )

        return order

    def get_by_id(self, owner_id: str, order_id: UUID) -> RepairOrder | None:
        """
        Get one of the owner's orders.

        Returns:
            Order if found and owned by owner_id, None otherwise.
        """
        with _translate_errors("get"):
            row = self.postgres.execute_single(
                "SELECT * FROM repair_orders WHERE id = %s AND owner_id = %s",
                (order_id, owner_id)
            )

        if row is None:
            return None

        return _to_order(row)

    def list_by_owner(self, owner_id: str) -> list[RepairOrder]:
        """
        List every order of an owner, with no row cap.

        Returns:
            Orders ordered by created_at DESC (newest first)
        """
        with _translate_errors("list"):
            rows = self.postgres.execute(
                """
                SELECT * FROM repair_orders
                WHERE owner_id = %s
                ORDER BY created_at DESC
                """,
                (owner_id,)
            )

        return [_to_order(row) for row in rows]

    def update_fields(self, owner_id: str, order_id: UUID, data: RepairOrderUpdate) -> RepairOrder:
        """
        Update editable fields and refresh updated_at.

        Raises:
            OrderNotFoundError: If the owner has no such order
            PersistenceError: If the write fails
        """
        current = self.get_by_id(owner_id, order_id)
        if current is None:
            raise OrderNotFoundError(f"Repair order {order_id} not found")

        updates = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if field in _UPDATABLE_COLUMNS and (value is not None or field in _NULLABLE_COLUMNS)
        }
        if not updates:
            return current

        if "device_condition" in updates:
            updates["device_condition"] = updates["device_condition"].value
        if "imei" in updates and not updates["imei"]:
            updates["imei"] = None

        set_parts = []
        params: list[Any] = []
        for field, value in updates.items():
            set_parts.append(f"{field} = %s")
            params.append(value)

        set_parts.append("updated_at = %s")
        params.extend([now_utc(), order_id, owner_id])

        with _translate_errors("update"):
            rows = self.postgres.execute_returning(
                f"""
                UPDATE repair_orders
                SET {', '.join(set_parts)}
                WHERE id = %s AND owner_id = %s
                RETURNING *
                """,
                tuple(params)
            )

        if not rows:
            raise OrderNotFoundError(f"Repair order {order_id} not found")

        updated = _to_order(rows[0])

        changes = compute_changes(
            current.model_dump(mode="json"),
            updated.model_dump(mode="json")
        )
        if changes:
            self._log_audit(owner_id, order_id, AuditAction.UPDATE, changes)

        return updated

    def update_status(self, owner_id: str, order_id: UUID, status: RepairOrderStatus) -> RepairOrder:
        """
        Move an order to a new status and refresh updated_at.

        Raises:
            OrderNotFoundError: If the owner has no such order
            OrderValidationError: If the transition table refuses the move
            PersistenceError: If the write fails
        """
        current = self.get_by_id(owner_id, order_id)
        if current is None:
            raise OrderNotFoundError(f"Repair order {order_id} not found")

        ensure_valid_transition(current.status, status)

        with _translate_errors("status update"):
            rows = self.postgres.execute_returning(
                """
                UPDATE repair_orders
                SET status = %s, updated_at = %s
                WHERE id = %s AND owner_id = %s
                RETURNING *
                """,
                (status.value, now_utc(), order_id, owner_id)
            )

        if not rows:
            raise OrderNotFoundError(f"Repair order {order_id} not found")

        updated = _to_order(rows[0])
        logger.info(f"Repair order {order_id} status {current.status.value} -> {status.value}")

        self._log_audit(
            owner_id, order_id, AuditAction.STATUS_CHANGE,
            {"status": {"old": current.status.value, "new": status.value}},
        )

        return updated

    def delete(self, owner_id: str, order_id: UUID) -> bool:
        """
        Hard delete an order.

        Returns:
            True if deleted, False if the owner has no such order
        """
        with _translate_errors("delete"):
            rows = self.postgres.execute_returning(
                "DELETE FROM repair_orders WHERE id = %s AND owner_id = %s RETURNING *",
                (order_id, owner_id)
            )

        if not rows:
            return False

        deleted = _to_order(rows[0])
        logger.info(f"Deleted repair order {order_id}")

        self._log_audit(
            owner_id, order_id, AuditAction.DELETE,
            {"deleted": deleted.model_dump(mode="json", exclude={"owner_id"})},
        )

        return True

    def find_by_track_code(self, track_code: str) -> RepairOrder | None:
        """
        Look up an order by its customer track code. Not owner-scoped.

        Returns:
            The matching order, or None for no match or blank input
        """
        code = normalize_track_code(track_code)
        if not code:
            return None

        with _translate_errors("track lookup"):
            row = self.postgres.execute_single(
                "SELECT * FROM repair_orders WHERE track_code = %s LIMIT 1",
                (code,)
            )

        if row is None:
            return None

        return _to_order(row)

    def history(self, owner_id: str, order_id: UUID) -> list[dict[str, Any]]:
        """Audit trail of one of the owner's orders, newest first."""
        with _translate_errors("history"):
            return self.audit.get_entity_history(owner_id, ENTITY_TYPE, order_id)
