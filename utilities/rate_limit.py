"""
Fixed-window rate limiting for privileged operations.

State lives in process memory and is lost on restart. The operations guarded
here are rare, human-triggered actions, so a single-process counter is enough.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class RateLimitEntry:
    """Attempts recorded for one key in the current window."""
    count: int
    reset_time: float


class FixedWindowRateLimiter:
    """Counts attempts per key in discrete windows that reset wholesale."""

    def __init__(
        self,
        max_attempts: int = 3,
        window_seconds: float = 900,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize the limiter.

        Args:
            max_attempts: Attempts allowed per key within one window
            window_seconds: Window length in seconds
            clock: Monotonic time source, injectable for tests
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(operation: str, actor_id: str) -> str:
        """Namespace a key by operation so limits never bleed across endpoints."""
        return f"{operation}:{actor_id}"

    def allow(self, key: str) -> bool:
        """
        Record an attempt for key and report whether it is within the limit.

        Args:
            key: Operation-namespaced actor key

        Returns:
            True if the attempt is allowed, False if the window is exhausted
        """
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)

            if entry is None or now > entry.reset_time:
                self._entries[key] = RateLimitEntry(
                    count=1,
                    reset_time=now + self.window_seconds
                )
                return True

            if entry.count >= self.max_attempts:
                return False

            entry.count += 1
            return True

    def get_rate_limit_info(self, key: str) -> Dict:
        """
        Get current usage for a key without recording an attempt.

        Inspection only; the handlers decide with allow().

        Args:
            key: Operation-namespaced actor key

        Returns:
            Dictionary with used/remaining attempts and the window reset time
        """
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is None or now > entry.reset_time:
                return {
                    "requests_used": 0,
                    "requests_remaining": self.max_attempts,
                    "rate_limit": self.max_attempts,
                    "reset_time": None
                }
            return {
                "requests_used": entry.count,
                "requests_remaining": max(0, self.max_attempts - entry.count),
                "rate_limit": self.max_attempts,
                "reset_time": entry.reset_time
            }

    def reset(self) -> None:
        """Forget every entry."""
        with self._lock:
            self._entries.clear()
        logger.debug("Rate limit table cleared")
