"""Anonymous order lookup by track code."""

import logging

from core.exceptions import OrderNotFoundError, OrderValidationError
from core.models import TrackedOrderView
from core.services.order_store import OrderStore
from core.track_codes import normalize_track_code

logger = logging.getLogger(__name__)


def lookup_order(store: OrderStore, track_code: str) -> TrackedOrderView:
    """
    Reduced view of the order carrying this track code.

    Raises:
        OrderValidationError: If the code is blank
        OrderNotFoundError: If no order carries the code
        PersistenceError: If the store fails
    """
    code = normalize_track_code(track_code or "")
    if not code:
        raise OrderValidationError("Track code is required")

    order = store.find_by_track_code(code)
    if order is None:
        logger.info("Track code lookup found no order")
        raise OrderNotFoundError("Order not found")

    return TrackedOrderView.from_order(order)
