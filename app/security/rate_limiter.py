"""
Fixed-window rate limiting keyed by caller.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimitCache:
    """
    Counts attempts per key inside a fixed time window.

    Expired windows are evicted lazily when their key is checked again, and
    in bulk by ``sweep()``, which the scheduler runs periodically.
    """

    def __init__(
        self,
        *,
        max_attempts: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_attempts = max(1, max_attempts)
        self._window_seconds = max(0.001, window_seconds)
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def check(self, key: str) -> bool:
        """
        Record one attempt for ``key``; return False when it is over the limit.
        """

        with self._lock:
            now = self._clock()
            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + self._window_seconds)
                return True
            if window.count >= self._max_attempts:
                return False
            window.count += 1
            return True

    def remaining(self, key: str) -> int:
        with self._lock:
            window = self._windows.get(key)
            if window is None or self._clock() > window.reset_at:
                return self._max_attempts
            return max(0, self._max_attempts - window.count)

    def reset(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)

    def sweep(self) -> int:
        """
        Drop every expired window. Returns the number of evicted keys.
        """

        with self._lock:
            now = self._clock()
            expired = [key for key, window in self._windows.items() if now > window.reset_at]
            for key in expired:
                del self._windows[key]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)
