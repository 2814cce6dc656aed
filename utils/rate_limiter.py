import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Optional


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    retry_after: int


class RateLimiter:
    """
    Sliding-window request counter keyed by client identity.

    Each client keeps a log of hit timestamps. Timestamps older than the
    window are evicted whenever that client is seen again, and clients whose
    log has gone idle are swept once per window so memory stays bounded by
    the set of recently active clients.
    """

    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.hits: Dict[str, Deque[float]] = {}
        self.last_sweep = clock()

    def _evict(self, log: Deque[float], now: float):
        cutoff = now - self.window_seconds
        while log and log[0] <= cutoff:
            log.popleft()

    def sweep(self, now: Optional[float] = None):
        """Drop clients with no hits inside the current window"""
        now = self.clock() if now is None else now
        for key in list(self.hits):
            log = self.hits[key]
            self._evict(log, now)
            if not log:
                del self.hits[key]
        self.last_sweep = now

    def hit(self, key: str) -> RateLimitResult:
        """Record one request for ``key`` and report whether it may proceed"""
        now = self.clock()
        if now - self.last_sweep >= self.window_seconds:
            self.sweep(now)

        log = self.hits.setdefault(key, deque())
        self._evict(log, now)

        if len(log) >= self.max_requests:
            retry_after = max(1, math.ceil(log[0] + self.window_seconds - now))
            return RateLimitResult(False, self.max_requests, 0, retry_after)

        log.append(now)
        return RateLimitResult(True, self.max_requests, self.max_requests - len(log), 0)

    def reset(self, key: Optional[str] = None):
        if key is None:
            self.hits.clear()
        else:
            self.hits.pop(key, None)
