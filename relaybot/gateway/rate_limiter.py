"""
Rate Limiter

Per-service fixed-window counters. Windows reset lazily: the first request
at or after reset_at starts a new window. Traffic clustered around a
boundary can therefore admit up to roughly 2x max_requests across two
adjacent windows. That burst is accepted behaviour of this limiter.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass
class RateWindow:
    """Mutable counter state for one service."""

    count: int
    reset_at: float
    max_requests: int
    window_seconds: float


class RateLimiter:
    """
    Thread-safe fixed-window rate limiter.

    Windows are created on the first request for a service, using the limits
    passed with that request.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._windows: dict[str, RateWindow] = {}
        self._clock = clock
        self._lock = threading.Lock()

    def record_and_check(
        self, service: str, max_requests: int, window_seconds: float
    ) -> bool:
        """
        Count one request against the service's window.

        Returns:
            True if the request is admitted, False if the window is saturated.
            A rejected request does not increment the counter.
        """
        with self._lock:
            now = self._clock()
            window = self._windows.get(service)
            if window is None:
                window = RateWindow(
                    count=0,
                    reset_at=now + window_seconds,
                    max_requests=max_requests,
                    window_seconds=window_seconds,
                )
                self._windows[service] = window

            if now >= window.reset_at:
                window.count = 0
                window.reset_at = now + window.window_seconds

            if window.count >= window.max_requests:
                return False

            window.count += 1
            return True

    def status(self) -> dict[str, dict]:
        """Snapshot of every known window."""
        with self._lock:
            now = self._clock()
            snapshot = {}
            for service, window in self._windows.items():
                expired = now >= window.reset_at
                count = 0 if expired else window.count
                snapshot[service] = {
                    "count": count,
                    "max": window.max_requests,
                    "window_seconds": window.window_seconds,
                    "is_limited": count >= window.max_requests,
                    "seconds_until_reset": max(0.0, round(window.reset_at - now, 3)),
                }
            return snapshot

    def reset(self, service: str | None = None) -> None:
        """Forget one service's window, or all of them."""
        with self._lock:
            if service is None:
                self._windows.clear()
            else:
                self._windows.pop(service, None)
