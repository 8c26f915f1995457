from __future__ import annotations

import threading
import time
from collections import defaultdict

from .config import settings


class InMemoryRateLimiter:
    def __init__(self, max_requests: int = 10, window_seconds: int = 60) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._events: dict[str, list[float]] = defaultdict(list)
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        now = time.time()
        cutoff = now - self.window_seconds
        with self._lock:
            events = [t for t in self._events[key] if t >= cutoff]
            if len(events) >= self.max_requests:
                self._events[key] = events
                return False
            events.append(now)
            self._events[key] = events
            return True

    def reset(self) -> None:
        with self._lock:
            self._events.clear()


search_rate_limiter = InMemoryRateLimiter(max_requests=settings.search_burst_limit, window_seconds=60)
