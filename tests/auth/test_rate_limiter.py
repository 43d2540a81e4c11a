"""Tests for RateLimiter - track lookup throttling."""

import pytest

from auth.rate_limiter import RateLimiter
from auth.config import AuthConfig
from auth.exceptions import RateLimitedError


@pytest.fixture
def config():
    """Test config with low attempts for faster tests."""
    return AuthConfig(
        track_lookup_attempts=3,
        track_lookup_window_minutes=5,
    )


@pytest.fixture
def rate_limiter(valkey, config):
    return RateLimiter(valkey, config)


class TestCheckRateLimit:
    """Test rate limit checking and incrementing."""

    def test_first_attempt_passes(self, rate_limiter):
        rate_limiter.check_rate_limit("203.0.113.7")

    def test_within_limit_passes(self, rate_limiter, config):
        for _ in range(config.track_lookup_attempts):
            rate_limiter.check_rate_limit("203.0.113.8")

    def test_exceeds_limit_raises(self, rate_limiter, config):
        for _ in range(config.track_lookup_attempts):
            rate_limiter.check_rate_limit("203.0.113.9")

        with pytest.raises(RateLimitedError):
            rate_limiter.check_rate_limit("203.0.113.9")

    def test_error_includes_retry_after(self, rate_limiter, config):
        for _ in range(config.track_lookup_attempts):
            rate_limiter.check_rate_limit("198.51.100.1")

        with pytest.raises(RateLimitedError) as exc_info:
            rate_limiter.check_rate_limit("198.51.100.1")

        assert exc_info.value.retry_after_seconds == 300

    def test_clients_tracked_separately(self, rate_limiter, config):
        for _ in range(config.track_lookup_attempts):
            rate_limiter.check_rate_limit("198.51.100.2")

        rate_limiter.check_rate_limit("198.51.100.3")


class TestSlidingWindow:
    """Test sliding window TTL behavior."""

    def test_each_attempt_resets_window(self, rate_limiter, valkey):
        key = "ratelimit:track_lookup:192.0.2.1"

        rate_limiter.check_rate_limit("192.0.2.1")
        valkey.expire(key, 10)
        rate_limiter.check_rate_limit("192.0.2.1")

        assert valkey.ttl(key) == 300


class TestGetRemainingAttempts:
    """Test remaining attempts query."""

    def test_returns_max_when_no_attempts(self, rate_limiter, config):
        assert rate_limiter.get_remaining_attempts("fresh") == config.track_lookup_attempts

    def test_decrements_with_attempts(self, rate_limiter, config):
        rate_limiter.check_rate_limit("counting")
        rate_limiter.check_rate_limit("counting")

        assert rate_limiter.get_remaining_attempts("counting") == config.track_lookup_attempts - 2

    def test_never_negative(self, rate_limiter, config):
        for _ in range(config.track_lookup_attempts):
            rate_limiter.check_rate_limit("exhausted")
        with pytest.raises(RateLimitedError):
            rate_limiter.check_rate_limit("exhausted")

        assert rate_limiter.get_remaining_attempts("exhausted") == 0
