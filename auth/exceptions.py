"""Typed exceptions for auth failures."""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class RateLimitedError(AuthError):
    """Too many attempts. Client should wait before retrying."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"Rate limited. Retry after {retry_after_seconds} seconds.")


class SessionExpiredError(AuthError):
    """Session is unknown or has expired; the user must sign in again."""
