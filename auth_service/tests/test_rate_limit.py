"""Tests for the sliding-window rate limiter."""
from unittest.mock import patch

from auth_service.rate_limit import SlidingWindowLimiter


def test_allows_up_to_limit_then_blocks():
    limiter = SlidingWindowLimiter(limit=2, window_seconds=60)
    assert limiter.check_and_consume("ip") == (True, None)
    assert limiter.check_and_consume("ip") == (True, None)
    allowed, retry_after = limiter.check_and_consume("ip")
    assert allowed is False
    assert 1 <= retry_after <= 60


def test_keys_are_independent():
    limiter = SlidingWindowLimiter(limit=1)
    assert limiter.check_and_consume("a")[0] is True
    assert limiter.check_and_consume("b")[0] is True
    assert limiter.check_and_consume("a")[0] is False


def test_window_slides():
    limiter = SlidingWindowLimiter(limit=1, window_seconds=60)
    with patch("auth_service.rate_limit.time.monotonic", return_value=1000.0):
        assert limiter.check_and_consume("ip")[0] is True
        assert limiter.check_and_consume("ip")[0] is False
    with patch("auth_service.rate_limit.time.monotonic", return_value=1061.0):
        assert limiter.check_and_consume("ip")[0] is True


def test_zero_limit_disables():
    limiter = SlidingWindowLimiter(limit=0)
    for _ in range(100):
        assert limiter.check_and_consume("ip") == (True, None)


def test_reset_clears_window():
    limiter = SlidingWindowLimiter(limit=1)
    limiter.check_and_consume("ip")
    limiter.reset()
    assert limiter.check_and_consume("ip")[0] is True


def test_idle_keys_are_dropped():
    limiter = SlidingWindowLimiter(limit=5, window_seconds=60)
    with patch("auth_service.rate_limit.time.monotonic", return_value=1000.0):
        limiter._last_sweep = 1000.0
        for n in range(50):
            limiter.check_and_consume(f"10.0.0.{n}")
    assert limiter.tracked_keys() == 50
    with patch("auth_service.rate_limit.time.monotonic", return_value=1061.0):
        assert limiter.check_and_consume("10.0.1.1") == (True, None)
    assert limiter.tracked_keys() == 1


def test_active_keys_survive_sweep():
    limiter = SlidingWindowLimiter(limit=1, window_seconds=60)
    with patch("auth_service.rate_limit.time.monotonic", return_value=1000.0):
        limiter._last_sweep = 1000.0
        limiter.check_and_consume("old")
    with patch("auth_service.rate_limit.time.monotonic", return_value=1030.0):
        limiter.check_and_consume("busy")
    with patch("auth_service.rate_limit.time.monotonic", return_value=1065.0):
        assert limiter.check_and_consume("new")[0] is True
        assert limiter.check_and_consume("busy")[0] is False
    assert limiter.tracked_keys() == 2
