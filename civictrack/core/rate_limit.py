"""In-process fixed-window rate limiter and the middleware that applies it.

Usage:
    app.add_middleware(RateLimitMiddleware, limiter=FixedWindowRateLimiter(), limit=100, window=900)
"""

import logging
import threading
import time
from collections.abc import Callable

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


class FixedWindowRateLimiter:
    """Counts hits per key in fixed windows; counters reset when the window expires."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (window_start, count)
        self._windows: dict[str, tuple[float, int]] = {}

    def check(self, key: str, limit: int, window: int) -> tuple[bool, int]:
        """Check if a request is within the rate limit.

        Returns:
            (allowed, retry_after): retry_after is seconds until the window
            resets, 0 if allowed.
        """
        now = self._clock()
        with self._lock:
            start, count = self._windows.get(key, (now, 0))
            if now - start >= window:
                start, count = now, 0
            count += 1
            self._windows[key] = (start, count)
            if len(self._windows) > 10_000:
                self._evict(now, window)
        if count > limit:
            return False, max(int(start + window - now), 1)
        return True, 0

    def _evict(self, now: float, window: int) -> None:
        expired = [k for k, (start, _) in self._windows.items() if now - start >= window]
        for k in expired:
            del self._windows[k]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejects clients over the limit with 429 on paths under path_prefix."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        limiter: FixedWindowRateLimiter,
        limit: int,
        window: int,
        path_prefix: str = "",
    ) -> None:
        super().__init__(app)
        self.limiter = limiter
        self.limit = limit
        self.window = window
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)
        client = request.client.host if request.client else "unknown"
        allowed, retry_after = self.limiter.check(f"rate:{client}", self.limit, self.window)
        if not allowed:
            logger.warning("Rate limit exceeded for client %s on %s", client, request.url.path)
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": "Too many requests"},
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
