"""
Search and status filtering for an owner's order list.

Pure functions, re-run on every keystroke or selector change. Ordering of
the input is preserved; sorting happens once when the collection is loaded.
"""

from typing import Iterable, NamedTuple

from core.lifecycle import parse_status_filter
from core.models import RepairOrder, RepairOrderStatus


class OrderViews(NamedTuple):
    """Filtered orders split the way the list page renders them."""

    active: list[RepairOrder]
    collected: list[RepairOrder]


def normalize_search(search: str | None) -> str:
    return (search or "").strip().lower()


def matches_search(order: RepairOrder, term: str) -> bool:
    """
    Substring match over the searchable fields.

    term must already be normalized. An empty term matches everything.
    """
    if not term:
        return True

    fields = (
        order.customer_name,
        order.phone_number,
        order.device_brand,
        order.device_model,
        order.imei,
    )
    return any(term in value.lower() for value in fields if value)


def filter_orders(
    orders: Iterable[RepairOrder],
    search: str | None = None,
    status_filter: str | RepairOrderStatus | None = "all",
) -> list[RepairOrder]:
    """
    Orders matching the search term and the status selector.

    Args:
        orders: Full in-memory collection
        search: Free-text term, trimmed and lower-cased before matching
        status_filter: "all" or one of the status values

    Returns:
        Matching orders in input order

    Raises:
        OrderValidationError: If status_filter is not "all" or a known status
    """
    term = normalize_search(search)
    wanted = parse_status_filter(status_filter)

    return [
        order for order in orders
        if matches_search(order, term) and (wanted is None or order.status == wanted)
    ]


def split_by_collection(orders: Iterable[RepairOrder]) -> OrderViews:
    """Partition into orders still in the shop and orders already collected."""
    active: list[RepairOrder] = []
    collected: list[RepairOrder] = []
    for order in orders:
        if order.is_collected:
            collected.append(order)
        else:
            active.append(order)
    return OrderViews(active=active, collected=collected)
