"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, as_utc, parse_iso
