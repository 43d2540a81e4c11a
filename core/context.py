"""Explicit owner identity for owner-scoped order operations."""

from pydantic import BaseModel

from core.exceptions import UnauthenticatedError


class OwnerContext(BaseModel):
    """
    Who is acting on the order collection.

    Built by the auth middleware from a validated session and handed to
    every owner-scoped operation. owner_id of None means the request is
    unauthenticated.
    """

    owner_id: str | None = None
    session_token: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def anonymous(cls) -> "OwnerContext":
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.owner_id)

    def require_owner(self) -> str:
        """
        Return the owner id or refuse.

        Raises:
            UnauthenticatedError: If no owner is attached to this context
        """
        if not self.owner_id:
            raise UnauthenticatedError("Authentication required")
        return self.owner_id
