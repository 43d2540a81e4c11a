"""
Order lifecycle and statistics engine.

An OrderBook holds one session's in-memory copy of its owner's orders.
It is a read-through, write-through cache over the OrderStore:

- refresh() reloads the collection (newest first); this is the only
  way changes made by other sessions become visible.
- every mutation is written to the store first; the in-memory record is
  replaced only after the write returned, so a failed write leaves the
  collection at its last known-good state.
- filtered views and statistics are recomputed from the collection on
  every call.

There is no version check on writes: two sessions editing the same order
resolve last-write-wins.
"""

import logging
import threading
import time
from uuid import UUID

from core.config import ShopConfig
from core.context import OwnerContext
from core.exceptions import OrderNotFoundError
from core.filters import OrderViews, filter_orders, split_by_collection
from core.lifecycle import parse_status
from core.models import (
    OrderStatistics,
    RepairOrder,
    RepairOrderCreate,
    RepairOrderStatus,
    RepairOrderUpdate,
)
from core.services.order_store import OrderStore
from core.statistics import compute_statistics

logger = logging.getLogger(__name__)


def _newest_first(orders: list[RepairOrder]) -> list[RepairOrder]:
    return sorted(orders, key=lambda o: o.created_at, reverse=True)


class OrderBook:
    """In-memory order collection of one authenticated session."""

    def __init__(self, store: OrderStore, context: OwnerContext):
        self.store = store
        self.context = context
        self._orders: list[RepairOrder] = []
        self._loaded = False

    @property
    def orders(self) -> list[RepairOrder]:
        """Snapshot of the current collection, newest first."""
        return list(self._orders)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def refresh(self) -> list[RepairOrder]:
        """
        Reload the owner's orders from the store.

        Raises:
            UnauthenticatedError: If the context carries no owner (no query is made)
            PersistenceError: If the store fails; the previous collection is kept
        """
        owner_id = self.context.require_owner()
        orders = self.store.list_by_owner(owner_id)
        self._orders = _newest_first(orders)
        self._loaded = True
        logger.debug(f"Loaded {len(self._orders)} orders for owner {owner_id}")
        return self.orders

    def ensure_loaded(self) -> None:
        if not self._loaded:
            self.refresh()

    def _index_of(self, order_id: UUID) -> int | None:
        for i, order in enumerate(self._orders):
            if order.id == order_id:
                return i
        return None

    def _replace(self, updated: RepairOrder) -> None:
        index = self._index_of(updated.id)
        if index is None:
            self._orders = _newest_first([updated, *self._orders])
        else:
            self._orders[index] = updated

    def get(self, order_id: UUID) -> RepairOrder:
        """
        One of the owner's orders, fresh from the store.

        Raises:
            OrderNotFoundError: If the owner has no such order
        """
        owner_id = self.context.require_owner()
        order = self.store.get_by_id(owner_id, order_id)
        if order is None:
            raise OrderNotFoundError(f"Repair order {order_id} not found")
        return order

    def history(self, order_id: UUID) -> list[dict]:
        """Recorded changes of one owned order, newest first."""
        owner_id = self.context.require_owner()
        return self.store.history(owner_id, order_id)

    def submit(self, data: RepairOrderCreate) -> RepairOrder:
        """
        Record a new repair request in Pending status.

        The order goes to the front of the collection once stored.
        """
        owner_id = self.context.require_owner()
        order = self.store.create(owner_id, data)
        self._orders.insert(0, order)
        return order

    def change_status(self, order_id: UUID, new_status: str | RepairOrderStatus) -> RepairOrder:
        """
        Move an order to any status.

        Raises:
            OrderValidationError: If new_status is not a known status
            OrderNotFoundError: If the owner has no such order
            PersistenceError: If the write fails; the collection is unchanged
        """
        owner_id = self.context.require_owner()
        status = parse_status(new_status)
        updated = self.store.update_status(owner_id, order_id, status)
        self._replace(updated)
        return updated

    def update(self, order_id: UUID, data: RepairOrderUpdate) -> RepairOrder:
        """
        Edit an order's fields.

        Raises:
            OrderNotFoundError: If the owner has no such order
            PersistenceError: If the write fails; the collection is unchanged
        """
        owner_id = self.context.require_owner()
        updated = self.store.update_fields(owner_id, order_id, data)
        self._replace(updated)
        return updated

    def delete(self, order_id: UUID) -> None:
        """
        Remove an order for good.

        Raises:
            OrderNotFoundError: If the owner has no such order
            PersistenceError: If the delete fails; the collection is unchanged
        """
        owner_id = self.context.require_owner()
        if not self.store.delete(owner_id, order_id):
            raise OrderNotFoundError(f"Repair order {order_id} not found")

        index = self._index_of(order_id)
        if index is not None:
            del self._orders[index]

    def filtered(
        self,
        search: str | None = None,
        status_filter: str | RepairOrderStatus | None = "all",
    ) -> list[RepairOrder]:
        return filter_orders(self._orders, search, status_filter)

    def views(
        self,
        search: str | None = None,
        status_filter: str | RepairOrderStatus | None = "all",
    ) -> OrderViews:
        """Filtered orders split into active and collected."""
        return split_by_collection(self.filtered(search, status_filter))

    def statistics(self) -> OrderStatistics:
        """Statistics over the whole collection, ignoring any filter."""
        return compute_statistics(self._orders)


class OrderBookCache:
    """
    One OrderBook per session token.

    Process-local; a second worker or a second browser session keeps its
    own book and only sees other sessions' edits after its own refresh.
    Books unused for idle_minutes are evicted on the next access.
    """

    def __init__(self, store: OrderStore, idle_minutes: int | None = None):
        self.store = store
        if idle_minutes is None:
            idle_minutes = ShopConfig().book_idle_minutes
        self.idle_seconds = idle_minutes * 60
        self._books: dict[str, OrderBook] = {}
        self._last_used: dict[str, float] = {}
        self._lock = threading.Lock()

    def _evict_idle(self, now: float) -> None:
        """Drop books idle past the limit. Caller holds the lock."""
        stale = [
            token for token, used_at in self._last_used.items()
            if now - used_at > self.idle_seconds
        ]
        for token in stale:
            self._books.pop(token, None)
            self._last_used.pop(token, None)
        if stale:
            logger.debug(f"Evicted {len(stale)} idle order books")

    def for_context(self, context: OwnerContext) -> OrderBook:
        """
        The book for this session, created empty on first use.

        Contexts without a session token get a throwaway book.
        """
        context.require_owner()
        if not context.session_token:
            return OrderBook(self.store, context)

        now = time.monotonic()
        with self._lock:
            self._evict_idle(now)
            book = self._books.get(context.session_token)
            if book is None or book.context.owner_id != context.owner_id:
                book = OrderBook(self.store, context)
                self._books[context.session_token] = book
            self._last_used[context.session_token] = now
            return book

    def discard(self, session_token: str) -> None:
        with self._lock:
            self._books.pop(session_token, None)
            self._last_used.pop(session_token, None)

    def __len__(self) -> int:
        return len(self._books)
