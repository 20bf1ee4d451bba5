# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Fixed-window rate limiting, keyed by client address."""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of one counted request."""

    allowed: bool
    limit: int
    remaining: int
    reset_after: float

    @property
    def retry_after(self) -> int:
        """Whole seconds until the window resets (at least 1)."""
        return max(1, math.ceil(self.reset_after))

    def headers(self) -> dict[str, str]:
        result = {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.retry_after),
        }
        if not self.allowed:
            result["Retry-After"] = str(self.retry_after)
        return result


class FixedWindowRateLimiter:
    """Per-key counters that reset when their window rolls over.

    Args:
        max_requests: Requests allowed per key and window.
        window_seconds: Window length in seconds.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # key -> [window_start, count]
        self._windows: dict[str, list[float]] = {}

    def _window(self, key: str, now: float) -> list[float]:
        window = self._windows.get(key)
        if window is None or now - window[0] >= self.window_seconds:
            window = [now, 0]
            self._windows[key] = window
        return window

    def hit(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` and report whether it is allowed."""
        with self._lock:
            now = self._clock()
            window = self._window(key, now)
            window[1] += 1
            count = int(window[1])
            reset_after = window[0] + self.window_seconds - now

        return RateLimitResult(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_after=reset_after,
        )

    def refund(self, key: str) -> None:
        """Give back one counted request in the current window."""
        with self._lock:
            window = self._windows.get(key)
            if window is not None and window[1] > 0:
                window[1] -= 1

    def prune(self) -> int:
        """Drop windows that have rolled over. Returns how many were dropped."""
        with self._lock:
            now = self._clock()
            stale = [k for k, (start, _) in self._windows.items() if now - start >= self.window_seconds]
            for key in stale:
                del self._windows[key]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()
