"""
Repair order status state machine.

Pending is set once at creation. After that the table is deliberately
open: a technician may move an order from any status to any other,
including back out of Collected. Collected is the conventional endpoint
that receipt printing keys off, but it is not enforced as terminal.
"""

from core.exceptions import OrderValidationError
from core.models import RepairOrderStatus

INITIAL_STATUS = RepairOrderStatus.PENDING

ORDER_STATUS_TRANSITIONS: dict[RepairOrderStatus, frozenset[RepairOrderStatus]] = {
    status: frozenset(RepairOrderStatus) for status in RepairOrderStatus
}

STATUS_FILTER_ALL = "all"


def parse_status(value: str | RepairOrderStatus) -> RepairOrderStatus:
    """
    Coerce a raw status value to the enum.

    Raises:
        OrderValidationError: If value is not one of the four statuses
    """
    if isinstance(value, RepairOrderStatus):
        return value
    try:
        return RepairOrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in RepairOrderStatus)
        raise OrderValidationError(f"Unknown status '{value}'. Valid statuses: {allowed}")


def can_transition(current: RepairOrderStatus, target: RepairOrderStatus) -> bool:
    return target in ORDER_STATUS_TRANSITIONS.get(current, frozenset())


def ensure_valid_transition(current: RepairOrderStatus, target: RepairOrderStatus) -> None:
    """
    Raises:
        OrderValidationError: If the table does not allow current -> target
    """
    if not can_transition(current, target):
        raise OrderValidationError(
            f"Invalid status transition: {current.value} -> {target.value}"
        )


def parse_status_filter(value: str | None) -> RepairOrderStatus | None:
    """
    Interpret a list-view status selector.

    "all" (or nothing) means no status restriction and returns None.
    """
    if value is None or value == STATUS_FILTER_ALL:
        return None
    return parse_status(value)
