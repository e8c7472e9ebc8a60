"""
Rate limiting, security header and health check tests.
"""
from __future__ import annotations

import pytest
from httpx import AsyncClient

from carbonmeter.core.config import settings
from carbonmeter.core.security import SECURITY_HEADERS

pytestmark = pytest.mark.asyncio


class TestAuthRateLimit:
    async def test_login_is_throttled(self, client: AsyncClient) -> None:
        allowed = int(settings.RATE_LIMIT_AUTH.split("/")[0])
        for _ in range(allowed):
            response = await client.post(
                "/api/auth/login", json={"email": "nobody@example.com"}
            )
            assert response.status_code == 404

        response = await client.post(
            "/api/auth/login", json={"email": "nobody@example.com"}
        )
        assert response.status_code == 429
        body = response.json()
        assert body["code"] == "RATE_LIMITED"
        assert body["retryAfter"] > 0
        assert int(response.headers["Retry-After"]) == body["retryAfter"]

    async def test_counters_reset_between_tests(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/auth/login", json={"email": "nobody@example.com"}
        )
        assert response.status_code == 404


class TestSecurityHeaders:
    async def test_headers_on_every_response(self, client: AsyncClient) -> None:
        for path in ("/api/ping", "/api/auth/user"):
            response = await client.get(path)
            for header, value in SECURITY_HEADERS.items():
                assert response.headers[header] == value


class TestPing:
    async def test_ping(self, client: AsyncClient) -> None:
        response = await client.get("/api/ping")
        assert response.status_code == 200
        assert response.json() == {"message": settings.PING_MESSAGE}
