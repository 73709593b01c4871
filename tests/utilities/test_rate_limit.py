"""
Unit tests for the fixed-window rate limiter.
"""

import threading

import pytest

from conftest import FakeClock
from utilities.rate_limit import FixedWindowRateLimiter


class TestFixedWindowRateLimiter:
    """Test cases for FixedWindowRateLimiter."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def limiter(self, clock):
        return FixedWindowRateLimiter(max_attempts=3, window_seconds=900, clock=clock)

    def test_allows_up_to_max_attempts(self, limiter):
        assert [limiter.allow("delete-user:a") for _ in range(4)] == [True, True, True, False]

    def test_denied_attempts_do_not_extend_window(self, limiter, clock):
        for _ in range(3):
            limiter.allow("k")
        clock.advance(600)
        assert limiter.allow("k") is False
        clock.advance(301)
        assert limiter.allow("k") is True

    def test_window_boundary_is_inclusive(self, limiter, clock):
        for _ in range(3):
            limiter.allow("k")
        clock.advance(900)
        assert limiter.allow("k") is False
        clock.advance(0.001)
        assert limiter.allow("k") is True

    def test_new_window_starts_fresh(self, limiter, clock):
        for _ in range(3):
            limiter.allow("k")
        clock.advance(901)
        assert limiter.allow("k") is True
        info = limiter.get_rate_limit_info("k")
        assert info["requests_used"] == 1
        assert info["requests_remaining"] == 2
        assert info["reset_time"] == clock.now + 900

    def test_keys_are_independent(self, limiter):
        for _ in range(3):
            limiter.allow("delete-user:a")
        assert limiter.allow("delete-user:b") is True
        assert limiter.allow("welcome-email:a") is True

    def test_make_key_namespaces_operation(self):
        assert FixedWindowRateLimiter.make_key("delete-user", "abc") == "delete-user:abc"
        assert FixedWindowRateLimiter.make_key("delete-user", "abc") != \
            FixedWindowRateLimiter.make_key("welcome-email", "abc")

    def test_info_does_not_record_attempt(self, limiter):
        limiter.get_rate_limit_info("k")
        assert limiter.get_rate_limit_info("k") == {
            "requests_used": 0,
            "requests_remaining": 3,
            "rate_limit": 3,
            "reset_time": None,
        }

    def test_reset(self, limiter):
        for _ in range(3):
            limiter.allow("k")
        limiter.reset()
        assert limiter.allow("k") is True

    @pytest.mark.parametrize("kwargs", [
        {"max_attempts": 0},
        {"window_seconds": 0},
        {"window_seconds": -5},
    ])
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(**kwargs)

    def test_concurrent_attempts_never_exceed_max(self, limiter):
        results = []
        results_lock = threading.Lock()
        barrier = threading.Barrier(20)

        def attempt():
            barrier.wait()
            allowed = limiter.allow("delete-user:racer")
            with results_lock:
                results.append(allowed)

        threads = [threading.Thread(target=attempt) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 3
        assert results.count(False) == 17
