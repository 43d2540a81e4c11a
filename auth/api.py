"""HTTP routes for the technician's session."""

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from api.base import success_response, error_response, ErrorCodes
from auth.security_middleware import SESSION_COOKIE
from auth.session import SessionManager
from auth.types import Session
from core.order_book import OrderBookCache


def start_session(
    response: Response,
    session_manager: SessionManager,
    owner_id: str,
    email: str | None = None,
) -> Session:
    """
    Sign a technician in once the identity integration has verified them.

    Issues a session and sets the cookie AuthMiddleware reads.
    """
    session = session_manager.create_session(owner_id, email)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session.token,
        httponly=True,
        secure=True,
        samesite="lax",
        max_age=int((session.expires_at - session.created_at).total_seconds()),
    )
    return session


def create_auth_router(session_manager: SessionManager, books: OrderBookCache) -> APIRouter:
    """Create auth router with injected session manager and order books."""
    router = APIRouter(tags=["auth"])

    @router.post("/logout")
    async def logout(request: Request, response: Response):
        """Logout - revoke session, drop its cached orders, clear cookie."""
        session_token = request.cookies.get(SESSION_COOKIE)

        if session_token:
            session_manager.revoke_session(session_token)
            books.discard(session_token)

        response.delete_cookie(key=SESSION_COOKIE)

        return success_response({"message": "Logged out successfully"})

    @router.get("/me")
    async def get_current_owner(request: Request):
        """Who the current session belongs to."""
        session = getattr(request.state, "session", None)
        if session is None:
            return JSONResponse(
                status_code=401,
                content=error_response(
                    ErrorCodes.NOT_AUTHENTICATED,
                    "Authentication required",
                ).model_dump(mode="json"),
            )

        return success_response({
            "owner_id": session.owner_id,
            "email": session.email,
            "expires_at": session.expires_at,
        })

    return router
