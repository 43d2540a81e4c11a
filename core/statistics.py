"""Statistics over an owner's full order collection."""

from collections.abc import Sequence
from decimal import Decimal

from core.models import OrderStatistics, RepairOrder, RepairOrderStatus


def total_cost(orders: Sequence[RepairOrder]) -> Decimal:
    return sum((order.estimated_cost for order in orders), Decimal("0"))


def average_cost(orders: Sequence[RepairOrder]) -> Decimal:
    """Mean estimated cost, unrounded. Zero for an empty collection."""
    if not orders:
        return Decimal("0")
    return total_cost(orders) / len(orders)


def status_counts(orders: Sequence[RepairOrder]) -> dict[RepairOrderStatus, int]:
    """
    Count orders per status.

    Only statuses that actually occur get a key; the map is not pre-seeded
    with zeros.
    """
    counts: dict[RepairOrderStatus, int] = {}
    for order in orders:
        counts[order.status] = counts.get(order.status, 0) + 1
    return counts


def compute_statistics(orders: Sequence[RepairOrder]) -> OrderStatistics:
    return OrderStatistics(
        order_count=len(orders),
        total_cost=total_cost(orders),
        average_cost=average_cost(orders),
        status_counts=status_counts(orders),
    )
