"""Security middleware for FastAPI - session validation and owner context."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.session import SessionManager
from auth.exceptions import SessionExpiredError
from api.base import error_response, ErrorCodes
from core.context import OwnerContext
from core.order_book import OrderBookCache

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_token"


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that validates the session and attaches an OwnerContext.

    For protected routes:
    1. Extracts session token from the 'session_token' cookie
    2. Validates session via SessionManager
    3. Puts an OwnerContext on request.state.owner_context

    Public paths get an anonymous OwnerContext and no session check.
    A token rejected as expired has its cached order book discarded.
    """

    PUBLIC_PATHS = [
        "/api/track/",
        "/auth/logout",
        "/health",
        "/docs",
        "/openapi.json",
    ]

    def __init__(self, app, session_manager: SessionManager, books: OrderBookCache | None = None):
        super().__init__(app)
        self._session_manager = session_manager
        self._books = books

    def _is_public_path(self, path: str) -> bool:
        """Check if path is in public paths list."""
        for public_path in self.PUBLIC_PATHS:
            if path == public_path or path.startswith(public_path):
                return True
        return False

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if self._is_public_path(path):
            request.state.owner_context = OwnerContext.anonymous()
            return await call_next(request)

        session_token = request.cookies.get(SESSION_COOKIE)

        if not session_token:
            return JSONResponse(
                status_code=401,
                content=error_response(
                    ErrorCodes.NOT_AUTHENTICATED,
                    "Authentication required",
                ).model_dump(mode="json"),
            )

        try:
            session = self._session_manager.validate_session(session_token)
        except SessionExpiredError:
            logger.info(f"Rejected expired session on {path}")
            if self._books is not None:
                self._books.discard(session_token)
            return JSONResponse(
                status_code=401,
                content=error_response(
                    ErrorCodes.SESSION_EXPIRED,
                    "Session has expired",
                ).model_dump(mode="json"),
            )

        request.state.session = session
        request.state.owner_context = OwnerContext(
            owner_id=session.owner_id,
            session_token=session.token,
        )

        return await call_next(request)
