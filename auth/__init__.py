"""Session handling and request authentication."""

from auth.exceptions import (
    AuthError,
    RateLimitedError,
    SessionExpiredError,
)
from auth.types import Session
from auth.config import AuthConfig
from auth.rate_limiter import RateLimiter
from auth.session import SessionManager
from auth.security_middleware import AuthMiddleware
from auth.api import create_auth_router, start_session
