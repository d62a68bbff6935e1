"""In-memory sliding window rate limiter."""

import time
from collections import defaultdict
from threading import Lock
from typing import NamedTuple


class RateLimitDecision(NamedTuple):
    """Outcome of one ``check`` call.

    ``reset_after`` is the number of seconds until the oldest counted
    request leaves the window (0 when nothing is counted).
    """

    allowed: bool
    remaining: int
    reset_after: int


class InMemoryRateLimiter:
    """Sliding window rate limiter.

    Thread-safe via Lock. Single-instance only: counters live in this
    process and are lost on restart.
    """

    def __init__(self, window_seconds: int = 900) -> None:
        self._window = window_seconds
        self._requests: dict[str, list[float]] = defaultdict(list)
        self._lock = Lock()

    @property
    def window_seconds(self) -> int:
        return self._window

    def check(self, key: str, limit: int) -> RateLimitDecision:
        """Count a request against ``key`` if the window has room.

        Args:
            key: Rate limit key, e.g. "auth:203.0.113.7".
            limit: Max requests per window.
        """
        now = time.monotonic()
        cutoff = now - self._window

        with self._lock:
            timestamps = [t for t in self._requests[key] if t > cutoff]
            self._requests[key] = timestamps

            if len(timestamps) >= limit:
                reset_after = max(int(timestamps[0] - cutoff) + 1, 1)
                return RateLimitDecision(False, 0, reset_after)

            timestamps.append(now)
            reset_after = int(timestamps[0] - cutoff) + 1
            return RateLimitDecision(True, limit - len(timestamps), reset_after)

    def reset(self) -> None:
        with self._lock:
            self._requests.clear()

    def cleanup(self) -> int:
        """Drop keys whose entries all fell out of the window.

        Returns:
            Number of keys removed.
        """
        now = time.monotonic()
        cutoff = now - self._window

        with self._lock:
            expired = []
            for key, timestamps in self._requests.items():
                live = [t for t in timestamps if t > cutoff]
                if live:
                    self._requests[key] = live
                else:
                    expired.append(key)
            for key in expired:
                del self._requests[key]

        return len(expired)
