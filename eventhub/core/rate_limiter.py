"""Fixed-window request limiter keyed by scope and client IP."""
from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Tuple

from fastapi import HTTPException, Request


class RateLimiter:
    """
    Counts hits per key inside a fixed window. Keys whose window has closed
    are swept out, so memory stays bounded by the keys active in the last
    window.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._hits: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()
        self._next_sweep = 0.0

    def __len__(self) -> int:
        return len(self._hits)

    def _sweep(self, now: float) -> None:
        expired = [key for key, (_, reset) in self._hits.items() if reset <= now]
        for key in expired:
            del self._hits[key]
        upcoming = [reset for _, reset in self._hits.values()]
        self._next_sweep = min(upcoming) if upcoming else now

    def hit(self, key: str, limit: int, window_seconds: float) -> bool:
        """Record one hit; False once `key` went over `limit` in its window."""
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            count, reset = self._hits.get(key, (0, now + window_seconds))
            if now >= reset:
                count, reset = 0, now + window_seconds
            count += 1
            self._hits[key] = (count, reset)
            self._next_sweep = min(self._next_sweep, reset)
            return count <= limit


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit_ip(request: Request, scope: str, *, limit: int, window_seconds: int) -> None:
    """Raise 429 when the caller's IP exceeded `limit` hits for `scope`."""
    limiter = getattr(getattr(request.app, "state", None), "rate_limiter", None)
    if limiter is None:
        return
    if not limiter.hit(f"{scope}:{_client_ip(request)}", limit, window_seconds):
        raise HTTPException(429, "Too many requests. Try again shortly.")
