from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Tuple

from fastapi import Request

from vita.core.errors import RateLimitedError


class RateLimiter:
    """Fixed-window hit counter keyed by scope and client IP."""

    def __init__(self, limit: int, window_seconds: int, clock: Callable[[], float] = time.time) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def check(self, key: str) -> None:
        if self.limit <= 0:
            return
        now = self._clock()
        with self._lock:
            self._prune(now)
            count, reset = self._hits.get(key, (0, now + self.window_seconds))
            count += 1
            self._hits[key] = (count, reset)
            if count > self.limit:
                raise RateLimitedError()

    def _prune(self, now: float) -> None:
        expired = [key for key, (_, reset) in self._hits.items() if now > reset]
        for key in expired:
            del self._hits[key]

    def __len__(self) -> int:
        return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit_ip(request: Request, scope: str) -> None:
    limiter: RateLimiter | None = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        return
    limiter.check(f"{scope}:{_client_ip(request)}")
