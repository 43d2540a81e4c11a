"""GET /api/track/{track_code} - public order status lookup."""

import ipaddress
import logging

from fastapi import APIRouter, Request, Response

from api.base import success_response, request_id_of
from auth.rate_limiter import RateLimiter
from core.services.order_store import OrderStore
from core.tracking import lookup_order

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def _get_client_ip(request: Request) -> str | None:
    """Extract valid IP address from request, or None if invalid."""
    if not request.client:
        return None
    host = request.client.host
    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        return None


def create_tracking_router(store: OrderStore, rate_limiter: RateLimiter) -> APIRouter:
    """Routes customers use to follow their repair without an account."""
    router = APIRouter(tags=["tracking"])

    @router.get("/track/{track_code}")
    async def track_order(track_code: str, request: Request, response: Response):
        client_key = _get_client_ip(request) or UNKNOWN_CLIENT
        rate_limiter.check_rate_limit(client_key)
        response.headers["X-RateLimit-Remaining"] = str(
            rate_limiter.get_remaining_attempts(client_key)
        )

        view = lookup_order(store, track_code)
        return success_response(
            view.model_dump(mode="json"), request_id_of(request)
        ).model_dump(mode="json")

    return router
