"""
Sliding window rate limiter keyed by caller identity.
"""

from __future__ import annotations

import math
import threading
import time
from collections import defaultdict, deque
from collections.abc import Callable

from ai_tools.exceptions import RateLimitError


class SlidingWindowRateLimiter:
    """Allow at most ``limit`` hits per ``window_seconds`` for each key.

    Args:
        limit: Maximum number of requests inside one window.
        window_seconds: Window length in seconds.
        clock: Monotonic time source; injectable for tests.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def _sweep(self, now: float) -> None:
        """Drop keys whose every hit has left the window."""
        cutoff = now - self.window_seconds
        for key in list(self._hits):
            timestamps = self._hits[key]
            while timestamps and timestamps[0] <= cutoff:
                timestamps.popleft()
            if not timestamps:
                del self._hits[key]
        self._last_sweep = now

    def hit(self, key: str) -> int:
        """Record one request for *key* and return how many remain.

        Raises:
            RateLimitError: If *key* already used its budget for this window;
                the rejected request is not recorded.
        """
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            timestamps = self._hits[key]

            cutoff = now - self.window_seconds
            while timestamps and timestamps[0] <= cutoff:
                timestamps.popleft()

            if len(timestamps) >= self.limit:
                retry_after = max(1, math.ceil(timestamps[0] + self.window_seconds - now))
                raise RateLimitError(retry_after)

            timestamps.append(now)
            return self.limit - len(timestamps)

    def reset(self, key: str | None = None) -> None:
        """Forget the history of *key*, or of every key."""
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)
