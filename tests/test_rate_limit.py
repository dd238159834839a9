"""Tests for the sliding-window rate limiter and its middleware."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request

from src.middleware.rate_limit import (
    RateLimitMiddleware,
    SlidingWindowLimiter,
    client_ip,
    route_group,
)


def _request(headers: dict[str, str] | None = None, host: str = "10.0.0.9") -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": (host, 1234),
    }
    return Request(scope)


class TestSlidingWindowLimiter:
    def test_budget_counts_down_then_refuses(self) -> None:
        limiter = SlidingWindowLimiter(limit=2, window_seconds=60)
        assert limiter.hit("k", 0.0) == (True, 1)
        assert limiter.hit("k", 1.0) == (True, 0)
        allowed, retry_after = limiter.hit("k", 2.0)
        assert allowed is False
        assert retry_after == 59, "retry once the oldest hit leaves the window"

    def test_window_slides(self) -> None:
        limiter = SlidingWindowLimiter(limit=1, window_seconds=10)
        assert limiter.hit("k", 0.0)[0] is True
        assert limiter.hit("k", 5.0)[0] is False
        assert limiter.hit("k", 11.0)[0] is True

    def test_keys_are_independent(self) -> None:
        limiter = SlidingWindowLimiter(limit=1)
        assert limiter.hit("a", 0.0)[0] is True
        assert limiter.hit("b", 0.0)[0] is True

    def test_sweep_forgets_idle_keys(self) -> None:
        limiter = SlidingWindowLimiter(limit=5, window_seconds=10)
        limiter.hit("old", 0.0)
        limiter.hit("new", 15.0)
        assert limiter.sweep(20.0) == 1
        assert limiter.sweep(20.0) == 0


class TestRouteGroup:
    def test_groups(self) -> None:
        assert route_group("/api/v1/chat/sessions") == "chat"
        assert route_group("/api/v1/notifications/unread") == "chat"
        assert route_group("/api/v1/admin/stats") == "admin"
        assert route_group("/api") == "other"


class TestClientIp:
    def test_direct_connection(self) -> None:
        assert client_ip(_request(), trusted_proxy_count=1) == "10.0.0.9"

    def test_skips_trusted_proxies(self) -> None:
        request = _request({"X-Forwarded-For": "203.0.113.7, 198.51.100.2, 10.0.0.1"})
        assert client_ip(request, trusted_proxy_count=1) == "198.51.100.2"
        assert client_ip(request, trusted_proxy_count=2) == "203.0.113.7"
        assert client_ip(request, trusted_proxy_count=0) == "203.0.113.7"

    def test_more_proxies_than_hops(self) -> None:
        request = _request({"X-Forwarded-For": "203.0.113.7"})
        assert client_ip(request, trusted_proxy_count=3) == "203.0.113.7"

    def test_real_ip_header(self) -> None:
        assert client_ip(_request({"X-Real-IP": " 203.0.113.9 "}), trusted_proxy_count=1) == "203.0.113.9"


class TestRateLimitMiddleware:
    @staticmethod
    def _client(limit: int) -> TestClient:
        app = FastAPI()
        app.add_middleware(RateLimitMiddleware, max_requests_per_minute=limit, trusted_proxy_count=0)

        @app.get("/api/v1/chat/ping")
        async def chat_ping() -> dict:
            return {"ok": True}

        @app.get("/api/v1/admin/ping")
        async def admin_ping() -> dict:
            return {"ok": True}

        @app.get("/api/v1/health")
        async def health() -> dict:
            return {"status": "healthy"}

        return TestClient(app)

    def test_429_after_limit(self) -> None:
        client = self._client(limit=2)
        first = client.get("/api/v1/chat/ping")
        assert first.headers["X-RateLimit-Remaining"] == "1"
        assert client.get("/api/v1/chat/ping").status_code == 200

        refused = client.get("/api/v1/chat/ping")
        assert refused.status_code == 429
        assert int(refused.headers["Retry-After"]) >= 1
        assert refused.json()["retry_after_seconds"] == int(refused.headers["Retry-After"])

    def test_admin_has_its_own_window(self) -> None:
        client = self._client(limit=1)
        assert client.get("/api/v1/chat/ping").status_code == 200
        assert client.get("/api/v1/chat/ping").status_code == 429
        assert client.get("/api/v1/admin/ping").status_code == 200, (
            "chat traffic must not exhaust the admin budget"
        )

    def test_health_is_exempt(self) -> None:
        client = self._client(limit=1)
        for _ in range(3):
            assert client.get("/api/v1/health").status_code == 200
