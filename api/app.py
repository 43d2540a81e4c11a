"""FastAPI application assembly."""

import logging

from fastapi import FastAPI

from api.actions import create_actions_router
from api.base import success_response
from api.data import create_data_router
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from api.tracking import create_tracking_router
from auth.api import create_auth_router
from auth.config import AuthConfig
from auth.rate_limiter import RateLimiter
from auth.security_middleware import AuthMiddleware
from auth.session import SessionManager
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from core.audit import AuditLogger
from core.config import ShopConfig
from core.order_book import OrderBookCache
from core.services.order_store import OrderStore

logger = logging.getLogger(__name__)


def build_services(
    postgres: PostgresClient,
    valkey: ValkeyClient,
    auth_config: AuthConfig | None = None,
    shop_config: ShopConfig | None = None,
) -> dict:
    """Wire storage, sessions and caches from connected clients."""
    auth_config = auth_config or AuthConfig()
    shop_config = shop_config or ShopConfig()
    audit = AuditLogger(postgres)
    store = OrderStore(postgres, audit, shop_config)

    return {
        "store": store,
        "books": OrderBookCache(store, shop_config.book_idle_minutes),
        "sessions": SessionManager(valkey, auth_config),
        "rate_limiter": RateLimiter(valkey, auth_config),
    }


def create_app(services: dict) -> FastAPI:
    """
    Build the HTTP application around already-wired services.

    services needs the keys produced by build_services.
    """
    app = FastAPI(title="Repair Shop Orders")

    # Last added runs first: request IDs are assigned before auth can reject
    app.add_middleware(
        AuthMiddleware,
        session_manager=services["sessions"],
        books=services["books"],
    )
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_data_router(services), prefix="/api")
    app.include_router(create_actions_router(services), prefix="/api")
    app.include_router(
        create_tracking_router(services["store"], services["rate_limiter"]),
        prefix="/api",
    )
    app.include_router(
        create_auth_router(services["sessions"], services["books"]),
        prefix="/auth",
    )

    @app.get("/health")
    async def health():
        return success_response({"status": "ok"}).model_dump(mode="json")

    return app


def create_app_from_vault() -> FastAPI:
    """Production entry point: connection URLs come from Vault."""
    from dotenv import load_dotenv
    from clients.vault_client import get_database_url, get_valkey_url

    # Vault credentials may live in a local .env during development
    load_dotenv()

    postgres = PostgresClient(get_database_url())
    valkey = ValkeyClient(get_valkey_url())
    logger.info("Repair order API services connected")
    return create_app(build_services(postgres, valkey))
