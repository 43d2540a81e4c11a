"""Rate limiting for anonymous track-code lookups.

Track codes are the only thing standing between the public and an
order's details, so guessing must stay expensive. Uses Valkey with a
sliding window TTL: each attempt resets the expiry, so hammering extends
the lockout.
"""

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.exceptions import RateLimitedError


class RateLimiter:
    """Per-client rate limiting for track lookups using Valkey."""

    KEY_PREFIX = "ratelimit:track_lookup:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._config = config
        self._window_seconds = config.track_lookup_window_minutes * 60

    def _key(self, client_key: str) -> str:
        return f"{self.KEY_PREFIX}{client_key}"

    def check_rate_limit(self, client_key: str) -> None:
        """Check rate limit and increment counter.

        Raises:
            RateLimitedError: If rate limit exceeded.
        """
        key = self._key(client_key)

        count = self._valkey.incr(key)

        # Sliding window
        self._valkey.expire(key, self._window_seconds)

        if count > self._config.track_lookup_attempts:
            ttl = self._valkey.ttl(key)
            raise RateLimitedError(retry_after_seconds=max(ttl, 1))

    def get_remaining_attempts(self, client_key: str) -> int:
        """Get remaining attempts before rate limit."""
        current = self._valkey.get(self._key(client_key))

        if current is None:
            return self._config.track_lookup_attempts

        remaining = self._config.track_lookup_attempts - int(current)
        return max(remaining, 0)
