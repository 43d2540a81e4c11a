"""GET /api/data - unified read endpoint."""

from uuid import UUID

from fastapi import APIRouter, Query, Request

from api.base import success_response, request_id_of
from core.context import OwnerContext
from core.order_book import OrderBook, OrderBookCache


VALID_TYPES = {"orders", "statistics"}


def owner_context_of(request: Request) -> OwnerContext:
    """OwnerContext attached by AuthMiddleware; anonymous if it did not run."""
    return getattr(request.state, "owner_context", None) or OwnerContext.anonymous()


def parse_order_id(raw) -> UUID:
    if raw is None:
        raise ValueError("'id' is required")
    try:
        return UUID(str(raw))
    except ValueError:
        raise ValueError(f"Invalid order id '{raw}'")


def create_data_router(services: dict) -> APIRouter:
    router = APIRouter()

    books: OrderBookCache = services["books"]

    @router.get("/data")
    async def get_data(
        request: Request,
        type: str | None = Query(None),
        id: str | None = Query(None),
        search: str | None = Query(None),
        status: str = Query("all"),
        refresh: bool = Query(False),
        include: str | None = Query(None),
    ):
        if type is None:
            raise ValueError("'type' query parameter is required")

        if type not in VALID_TYPES:
            raise ValueError(f"Unknown type '{type}'. Valid types: {', '.join(sorted(VALID_TYPES))}")

        book = books.for_context(owner_context_of(request))
        includes = set(include.split(",")) if include else set()

        if type == "orders":
            data = _handle_orders(book, id, search, status, refresh, includes)
        else:
            data = _handle_statistics(book, refresh)

        return success_response(data, request_id_of(request)).model_dump(mode="json")

    return router


def _load(book: OrderBook, refresh: bool) -> None:
    if refresh:
        book.refresh()
    else:
        book.ensure_loaded()


def _handle_orders(book: OrderBook, id, search, status, refresh, includes):
    if id:
        order = book.get(parse_order_id(id))
        data = order.model_dump(mode="json")
        if "history" in includes:
            data["history"] = book.history(order.id)
        return data

    _load(book, refresh)
    orders = book.filtered(search, status)
    views = book.views(search, status)

    return {
        "orders": [o.model_dump(mode="json") for o in orders],
        "active": [o.model_dump(mode="json") for o in views.active],
        "collected": [o.model_dump(mode="json") for o in views.collected],
        "count": len(orders),
    }


def _handle_statistics(book: OrderBook, refresh):
    _load(book, refresh)
    return book.statistics().model_dump(mode="json")
