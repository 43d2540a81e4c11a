"""Global exception handlers for FastAPI."""

import logging

import redis
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.responses import JSONResponse

from api.base import error_response, request_id_of, ErrorCodes
from auth.exceptions import RateLimitedError
from core.exceptions import (
    OrderNotFoundError,
    OrderValidationError,
    PersistenceError,
    UnauthenticatedError,
)

logger = logging.getLogger(__name__)


def _describe_validation_errors(errors) -> str:
    """Flatten pydantic error dicts to 'field: message; field: message'."""
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def _error(request: Request, status_code: int, code: str, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, request_id_of(request)).model_dump(mode="json"),
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(OrderValidationError)
    async def order_validation_handler(request: Request, exc: OrderValidationError):
        return _error(request, 422, ErrorCodes.VALIDATION_ERROR, str(exc))

    @app.exception_handler(ValidationError)
    async def model_validation_handler(request: Request, exc: ValidationError):
        return _error(
            request, 422, ErrorCodes.VALIDATION_ERROR,
            _describe_validation_errors(exc.errors()),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(
            request, 422, ErrorCodes.VALIDATION_ERROR,
            _describe_validation_errors(exc.errors()),
        )

    @app.exception_handler(UnauthenticatedError)
    async def unauthenticated_handler(request: Request, exc: UnauthenticatedError):
        return _error(request, 401, ErrorCodes.NOT_AUTHENTICATED, str(exc))

    @app.exception_handler(OrderNotFoundError)
    async def not_found_handler(request: Request, exc: OrderNotFoundError):
        return _error(request, 404, ErrorCodes.NOT_FOUND, str(exc))

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        # Driver detail was logged by the store; only the safe message goes out
        return _error(request, 503, ErrorCodes.SERVICE_UNAVAILABLE, str(exc))

    @app.exception_handler(redis.RedisError)
    async def valkey_error_handler(request: Request, exc: redis.RedisError):
        logger.error(f"Valkey call failed: {exc}")
        return _error(
            request, 503, ErrorCodes.SERVICE_UNAVAILABLE,
            "Service is temporarily unavailable. Please try again later.",
        )

    @app.exception_handler(RateLimitedError)
    async def rate_limited_handler(request: Request, exc: RateLimitedError):
        return _error(
            request, 429, ErrorCodes.RATE_LIMITED, str(exc),
            headers={"Retry-After": str(exc.retry_after_seconds)},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return _error(request, 400, ErrorCodes.INVALID_REQUEST, str(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _error(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
