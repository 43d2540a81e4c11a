"""Repair shop configuration."""

from pydantic import BaseModel, Field


class ShopConfig(BaseModel):
    """Tunables for order handling."""

    track_code_length: int = Field(
        default=8,
        description="Length of generated customer track codes",
        ge=6,
        le=16,
    )
    track_code_max_attempts: int = Field(
        default=5,
        description="How many codes to draw before giving up on a collision streak",
        ge=1,
        le=20,
    )
    book_idle_minutes: int = Field(
        default=120,
        description="Minutes an unused session order book stays cached",
        ge=1,
        le=1440,
    )
