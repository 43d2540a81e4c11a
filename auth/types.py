"""Pydantic models for auth domain."""

from datetime import datetime

from pydantic import BaseModel, Field


class Session(BaseModel):
    """An active technician session."""

    token: str = Field(..., description="Session token (opaque string)")
    owner_id: str = Field(..., min_length=1, description="Identity-provider user id")
    email: str | None = None
    created_at: datetime
    expires_at: datetime
    last_activity_at: datetime
