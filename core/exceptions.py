"""Typed exceptions for repair order operations."""


class OrderError(Exception):
    """Base class for repair order errors."""


class OrderValidationError(OrderError, ValueError):
    """Required field missing or malformed. Raised before any persistence call."""


class UnauthenticatedError(OrderError):
    """No owner identity available for an owner-scoped operation."""


class OrderNotFoundError(OrderError):
    """
    No order matches the lookup.

    Distinct from PersistenceError: nothing went wrong, there is simply
    no such order (or it belongs to someone else).
    """


class PersistenceError(OrderError):
    """
    The order store rejected or failed a call.

    The message is safe to show to a user; the driver error is chained
    as __cause__ and logged where it was caught.
    """

    def __init__(self, message: str = "Order storage is unavailable. Please try again later."):
        super().__init__(message)
