# storefront/utils/rate_limit.py

import threading
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict

from storefront.errors import RateLimitError


class SlidingWindowLimiter:
    """
    In-process request throttle: at most `max_requests` hits per key
    within the last `window_seconds`. Keys are client IPs.
    """

    def __init__(self, window_seconds: int, max_requests: int, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def hit(self, key: str) -> None:
        now = self.clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            hits = self._hits[key]
            self._expire(hits, now)
            if len(hits) >= self.max_requests:
                raise RateLimitError("Too many requests. Please try again later.")
            hits.append(now)

    def _expire(self, hits: Deque[float], now: float) -> None:
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        # Forget clients with no hits left in the window
        for key in list(self._hits):
            self._expire(self._hits[key], now)
            if not self._hits[key]:
                del self._hits[key]
        self._last_sweep = now

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
