"""
Valkey (Redis-compatible) client for sessions and lookup throttling.

Thin wrapper around redis-py. Connection URL from Vault.
Fail-fast: raises on connection failure, never returns fallback values.
"""

import json
import logging

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    Redis-compatible client for Valkey.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0")
        client.set_json("session:abc", {"owner_id": "u1"}, expire_seconds=300)
        data = client.get_json("session:abc")  # None if missing
    """

    def __init__(self, url: str):
        """
        Raises:
            redis.ConnectionError: If Valkey is unreachable
        """
        self._client = redis.from_url(url, decode_responses=True)
        self._client.ping()
        logger.info("ValkeyClient connected")

    def ping(self) -> bool:
        """Health check. Raises redis.ConnectionError if unreachable."""
        self._client.ping()
        return True

    def get(self, key: str) -> str | None:
        return self._client.get(key)

    def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        if expire_seconds is not None:
            self._client.setex(key, expire_seconds, value)
        else:
            self._client.set(key, value)

    def delete(self, key: str) -> bool:
        """True if the key existed."""
        return self._client.delete(key) > 0

    def incr(self, key: str) -> int:
        """Increment key by 1, creating it at 1. Returns the new value."""
        return self._client.incr(key)

    def expire(self, key: str, seconds: int) -> bool:
        """Set TTL on an existing key. False if the key doesn't exist."""
        return bool(self._client.expire(key, seconds))

    def ttl(self, key: str) -> int:
        """
        Remaining TTL in seconds.

        -2 if the key doesn't exist, -1 if it has no expiration.
        """
        return self._client.ttl(key)

    def set_json(self, key: str, value: dict | list, expire_seconds: int | None = None) -> None:
        self.set(key, json.dumps(value), expire_seconds)

    def get_json(self, key: str) -> dict | list | None:
        """
        Get and deserialize JSON value.

        Returns None if key doesn't exist.
        Raises ValueError if value is not valid JSON.
        """
        value = self.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in key '{key}': {e}")

    def close(self) -> None:
        self._client.close()
        logger.info("ValkeyClient closed")
