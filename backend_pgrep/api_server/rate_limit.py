"""
Fixed-window request counter, one window per key (e.g. "reputation:<ip>").

Constructed once by the app and injected into routes; tests build their own
instance with a fake clock. Expired windows are swept from check() at most
once per window length, so the map only holds keys seen recently.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

DEFAULT_MAX_REQUESTS = 30
DEFAULT_WINDOW_SEC = 60.0


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_sec: float = DEFAULT_WINDOW_SEC,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_sec <= 0:
            raise ValueError("window_sec must be > 0")
        self.max_requests = max_requests
        self.window_sec = window_sec
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._next_sweep_at = clock() + window_sec

    def check(self, key: str) -> RateLimitResult:
        """Count one request for key; disallow once the window is full."""
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep_at:
                self._evict_expired(now)
            window = self._windows.get(key)
            if window is None or window.reset_at <= now:
                self._windows[key] = _Window(count=1, reset_at=now + self.window_sec)
                return RateLimitResult(allowed=True, remaining=self.max_requests - 1)
            if window.count >= self.max_requests:
                return RateLimitResult(allowed=False, remaining=0)
            window.count += 1
            return RateLimitResult(allowed=True, remaining=self.max_requests - window.count)

    def _evict_expired(self, now: float) -> int:
        # Caller holds the lock
        expired = [k for k, w in self._windows.items() if w.reset_at <= now]
        for key in expired:
            del self._windows[key]
        self._next_sweep_at = now + self.window_sec
        return len(expired)

    def prune(self) -> int:
        """Drop expired windows; returns how many were removed."""
        now = self._clock()
        with self._lock:
            return self._evict_expired(now)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)
