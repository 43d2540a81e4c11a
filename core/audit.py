"""
Change history for repair orders.

Every create, edit, status change and delete is appended to audit_log
with the acting owner and a per-field old/new change set. Entries are
never modified or deleted, so a hard-deleted order's last state survives
here.
"""

import logging
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class AuditAction(Enum):
    """Type of change made to an entity."""

    CREATE = "create"
    UPDATE = "update"
    STATUS_CHANGE = "status_change"
    DELETE = "delete"


def compute_changes(
    old: dict[str, Any],
    new: dict[str, Any],
    exclude_fields: set[str] | None = None
) -> dict[str, dict[str, Any]]:
    """
    Compute changes between two entity states.

    Args:
        old: Previous state of entity
        new: New state of entity
        exclude_fields: Fields to ignore (defaults to {"updated_at"})

    Returns:
        Dict of {field: {"old": old_val, "new": new_val}} for changed fields.
        Empty dict if no changes.
    """
    exclude = exclude_fields or {"updated_at"}
    changes = {}

    for key in sorted(set(old) | set(new)):
        if key in exclude:
            continue

        old_val = old.get(key)
        new_val = new.get(key)

        if old_val != new_val:
            changes[key] = {"old": old_val, "new": new_val}

    return changes


class AuditLogger:
    """
    Append-only audit trail.

    Pass model_dump(mode="json") output so UUIDs, Decimals and datetimes
    arrive JSON-serializable.

    Usage:
        audit.log_change(
            owner_id=order.owner_id,
            entity_type="repair_order",
            entity_id=order.id,
            action=AuditAction.STATUS_CHANGE,
            changes={"status": {"old": "Ready", "new": "Collected"}},
        )
    """

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def log_change(
        self,
        owner_id: str,
        entity_type: str,
        entity_id: UUID,
        action: AuditAction,
        changes: dict[str, Any],
    ) -> None:
        """
        Log an entity change.

        Changes format by action:
        - CREATE: {"created": {full entity data}}
        - UPDATE / STATUS_CHANGE: {"field": {"old": old_val, "new": new_val}, ...}
        - DELETE: {"deleted": {full entity data at deletion}}
        """
        self.postgres.execute(
            """
            INSERT INTO audit_log (id, owner_id, entity_type, entity_id, action, changes, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            """,
            (
                uuid4(),
                owner_id,
                entity_type,
                entity_id,
                action.value,
                Json(changes),
                now_utc()
            )
        )
        logger.debug("Audit %s %s %s", action.value, entity_type, entity_id)

    def get_entity_history(
        self,
        owner_id: str,
        entity_type: str,
        entity_id: UUID
    ) -> list[dict[str, Any]]:
        """
        Full audit history for one of the owner's entities, newest first.
        """
        return self.postgres.execute(
            """
            SELECT id, owner_id, entity_type, entity_id, action, changes, created_at
            FROM audit_log
            WHERE owner_id = %s AND entity_type = %s AND entity_id = %s
            ORDER BY created_at DESC
            """,
            (owner_id, entity_type, entity_id)
        )
