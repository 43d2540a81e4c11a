"""Session and public-lookup configuration."""

from pydantic import BaseModel, Field


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    Durations are in their natural units (hours for sessions, minutes for
    rate-limit windows) to make configuration intuitive.
    """

    # Session settings
    session_expiry_hours: int = Field(
        default=720,  # 30 days
        description="Session lifetime in hours",
        ge=1,
        le=2160,
    )
    session_extend_on_activity: bool = Field(
        default=True,
        description="Whether to extend session expiry on activity",
    )

    # Public track-code lookup throttling
    track_lookup_attempts: int = Field(
        default=10,
        description="Max track-code lookups per client per window",
        ge=1,
        le=100,
    )
    track_lookup_window_minutes: int = Field(
        default=1,
        description="Track lookup rate limit window duration",
        ge=1,
        le=60,
    )
