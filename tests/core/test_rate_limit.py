"""
Tests for per-client rate limiting.
"""
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from imec_backend.core.rate_limit import InMemoryRateLimiter, RateLimiter, build_rate_limit_key
from imec_backend.main import create_app
from tests.conftest import make_settings


class TestInMemoryRateLimiter:
    """Sliding window counting."""

    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self):
        limiter = InMemoryRateLimiter()

        results = [await limiter.is_rate_limited("client", limit=3, window=60) for _ in range(3)]

        assert [r[0] for r in results] == [False, False, False]
        assert [r[1] for r in results] == [2, 1, 0]

    @pytest.mark.asyncio
    async def test_blocks_over_limit(self):
        limiter = InMemoryRateLimiter()
        for _ in range(2):
            await limiter.is_rate_limited("client", limit=2, window=60)

        is_limited, remaining, retry_after = await limiter.is_rate_limited("client", limit=2, window=60)

        assert is_limited is True
        assert remaining == 0
        assert 0 < retry_after <= 61

    @pytest.mark.asyncio
    async def test_keys_are_independent(self):
        limiter = InMemoryRateLimiter()
        await limiter.is_rate_limited("a", limit=1, window=60)

        is_limited, _, _ = await limiter.is_rate_limited("b", limit=1, window=60)

        assert is_limited is False

    @pytest.mark.asyncio
    async def test_close_resets(self):
        limiter = InMemoryRateLimiter()
        await limiter.is_rate_limited("client", limit=1, window=60)

        await limiter.close()

        assert (await limiter.is_rate_limited("client", limit=1, window=60))[0] is False


class TestRateLimiter:
    """Backend selection and Redis fallback."""

    def test_key_format(self):
        assert build_rate_limit_key("203.0.113.7") == "rate_limit:contact:ip_203.0.113.7"

    @pytest.mark.asyncio
    async def test_memory_backend_without_redis(self):
        limiter = RateLimiter(make_settings(rate_limit_enabled=True, rate_limit_requests=1))

        assert (await limiter.check("k"))[0] is False
        assert (await limiter.check("k"))[0] is True

    @pytest.mark.asyncio
    async def test_falls_back_when_redis_fails(self):
        limiter = RateLimiter(make_settings(redis_url="redis://localhost:6399/0", rate_limit_requests=5))
        limiter._redis.is_rate_limited = AsyncMock(side_effect=ConnectionError("redis down"))

        is_limited, remaining, _ = await limiter.check("k")

        assert is_limited is False
        assert remaining == 4
        assert limiter._redis_available is False

    @pytest.mark.asyncio
    async def test_uses_redis_result(self):
        limiter = RateLimiter(make_settings(redis_url="redis://localhost:6399/0"))
        limiter._redis.is_rate_limited = AsyncMock(return_value=(True, 0, 42))

        assert await limiter.check("k") == (True, 0, 42)


@pytest_asyncio.fixture
async def limited_client(test_transport):
    app = create_app(
        settings=make_settings(rate_limit_enabled=True, rate_limit_requests=2, rate_limit_window=60),
        transport=test_transport,
    )
    async with app.router.lifespan_context(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
            yield ac


class TestRateLimitedRequests:
    """429 responses once a client exceeds the window."""

    @pytest.mark.asyncio
    async def test_headers_on_allowed_request(self, limited_client):
        response = await limited_client.get("/health")

        assert response.status_code == 200
        assert response.headers["X-RateLimit-Limit"] == "2"
        assert response.headers["X-RateLimit-Remaining"] == "1"

    @pytest.mark.asyncio
    async def test_rejects_over_limit(self, limited_client):
        for _ in range(2):
            await limited_client.get("/health")

        response = await limited_client.get("/health")

        assert response.status_code == 429
        body = response.json()
        assert body["ok"] is False
        assert body["error"] == "rate_limit_exceeded"
        assert body["retry_after"] > 0
        assert "Retry-After" in response.headers

    @pytest.mark.asyncio
    async def test_limit_applies_across_routes(self, limited_client, submission_data):
        await limited_client.get("/")
        await limited_client.get("/health")

        response = await limited_client.post("/contacts/", json=submission_data)

        assert response.status_code == 429

    @pytest.mark.asyncio
    async def test_forwarded_clients_counted_separately(self, limited_client):
        for _ in range(2):
            await limited_client.get("/health", headers={"X-Forwarded-For": "198.51.100.1"})

        response = await limited_client.get("/health", headers={"X-Forwarded-For": "198.51.100.2"})

        assert response.status_code == 200
