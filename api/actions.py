"""POST /api/actions - unified mutation endpoint."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import success_response, request_id_of
from api.data import owner_context_of, parse_order_id
from core.models import RepairOrderCreate, RepairOrderUpdate
from core.order_book import OrderBook, OrderBookCache


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict


def create_actions_router(services: dict) -> APIRouter:
    router = APIRouter()

    books: OrderBookCache = services["books"]

    handlers = {
        "repair_order": RepairOrderHandler,
    }

    @router.post("/actions")
    async def perform_action(request: Request, body: ActionRequest):
        handler_cls = handlers.get(body.domain)
        if handler_cls is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers.keys()))}"
            )

        if body.action not in handler_cls.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler_cls.ALLOWED_ACTIONS))}"
            )

        handler = handler_cls(books.for_context(owner_context_of(request)))
        method = getattr(handler, f"_handle_{body.action}")
        result = method(dict(body.data))
        return success_response(result, request_id_of(request)).model_dump(mode="json")

    return router


# =============================================================================
# HANDLER CLASSES
# =============================================================================


class RepairOrderHandler:
    ALLOWED_ACTIONS = {"create", "update", "change_status", "delete"}

    def __init__(self, book: OrderBook):
        self.book = book

    def _handle_create(self, data: dict):
        order = self.book.submit(RepairOrderCreate(**data))
        return order.model_dump(mode="json")

    def _handle_update(self, data: dict):
        order_id = parse_order_id(data.pop("id", None))
        order = self.book.update(order_id, RepairOrderUpdate(**data))
        return order.model_dump(mode="json")

    def _handle_change_status(self, data: dict):
        order_id = parse_order_id(data.get("id"))
        order = self.book.change_status(order_id, data.get("status"))
        return order.model_dump(mode="json")

    def _handle_delete(self, data: dict):
        order_id = parse_order_id(data.get("id"))
        self.book.delete(order_id)
        return {"deleted": True}
