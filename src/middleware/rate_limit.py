"""In-memory sliding-window rate limiting.

Requests are counted per (client IP, route group).  Chat turns and admin
calls get separate windows so that a citizen hammering the chat endpoint
cannot lock an admin on the same NAT out of the triage API.  Single
process only; every instance keeps its own counters.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Final

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

_EXEMPT_PATHS: Final[frozenset[str]] = frozenset(
    {
        "/api/v1/health",
        "/api/v1/health/ready",
        "/metrics",
        "/docs",
        "/redoc",
        "/openapi.json",
    }
)

_ROUTE_GROUPS: Final[tuple[tuple[str, str], ...]] = (
    ("/api/v1/chat", "chat"),
    ("/api/v1/notifications", "chat"),
    ("/api/v1/admin", "admin"),
)


def route_group(path: str) -> str:
    for prefix, group in _ROUTE_GROUPS:
        if path.startswith(prefix):
            return group
    return "other"


class SlidingWindowLimiter:
    """Counts hits per key inside a moving window of *window_seconds*."""

    def __init__(self, limit: int, window_seconds: float = 60.0, sweep_every: int = 1000) -> None:
        self.limit = limit
        self._window = window_seconds
        self._hits: dict[str, deque[float]] = {}
        self._sweep_every = sweep_every
        self._since_sweep = 0

    def hit(self, key: str, now: float) -> tuple[bool, int]:
        """Record a hit for *key*.

        Returns ``(allowed, value)`` where *value* is the remaining budget
        when allowed and the retry-after seconds when refused.
        """
        self._since_sweep += 1
        if self._since_sweep >= self._sweep_every:
            self._since_sweep = 0
            self.sweep(now)

        window = self._hits.setdefault(key, deque())
        cutoff = now - self._window
        while window and window[0] < cutoff:
            window.popleft()

        if len(window) >= self.limit:
            return False, max(1, int(self._window - (now - window[0])) + 1)
        window.append(now)
        return True, self.limit - len(window)

    def sweep(self, now: float) -> int:
        """Forget keys with no hit inside the window."""
        cutoff = now - self._window
        stale = [key for key, window in self._hits.items() if not window or window[-1] < cutoff]
        for key in stale:
            del self._hits[key]
        if stale:
            logger.debug("rate_limit.swept", keys=len(stale))
        return len(stale)


def client_ip(request: Request, trusted_proxy_count: int) -> str:
    """Client address, skipping *trusted_proxy_count* rightmost ``X-Forwarded-For`` hops."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        hops = [hop.strip() for hop in forwarded_for.split(",")]
        if trusted_proxy_count <= 0:
            return hops[0]
        index = -(trusted_proxy_count + 1)
        return hops[index] if -index <= len(hops) else hops[0]

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejects requests over ``max_requests_per_minute`` with HTTP 429."""

    def __init__(
        self,
        app: object,
        max_requests_per_minute: int = 60,
        trusted_proxy_count: int = 1,
    ) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._limiter = SlidingWindowLimiter(max_requests_per_minute)
        self._trusted_proxy_count = trusted_proxy_count
        self._lock = asyncio.Lock()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if path in _EXEMPT_PATHS:
            return await call_next(request)

        ip = client_ip(request, self._trusted_proxy_count)
        group = route_group(path)
        async with self._lock:
            allowed, value = self._limiter.hit(f"{ip}|{group}", time.monotonic())

        limit = str(self._limiter.limit)
        if not allowed:
            logger.warning("rate_limit.exceeded", client_ip=ip, group=group, limit=limit)
            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Rate limit exceeded. Please try again later.",
                    "retry_after_seconds": value,
                },
                headers={
                    "Retry-After": str(value),
                    "X-RateLimit-Limit": limit,
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = limit
        response.headers["X-RateLimit-Remaining"] = str(value)
        return response
