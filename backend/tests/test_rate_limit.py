"""
Tests for request throttling.

This module tests:
- TokenBucket (consumption, refill, wait time)
- RateLimitMiddleware (429 envelope, headers, exemptions, cleanup)
- client_address (forwarded header handling)
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from newsroom.middleware.rate_limit import RateLimitMiddleware, TokenBucket


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


def build_client(clock, **options) -> TestClient:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, clock=clock, **options)

    @app.get("/api/v1/news")
    async def news():
        return {"success": True}

    @app.get("/api/v1/health")
    async def health():
        return {"status": "healthy"}

    return TestClient(app)


class TestTokenBucket:
    """Test suite for TokenBucket."""

    def test_invalid_arguments(self):
        with pytest.raises(ValueError, match="capacity"):
            TokenBucket(capacity=0, refill_rate=1.0)
        with pytest.raises(ValueError, match="refill_rate"):
            TokenBucket(capacity=10, refill_rate=0)

    def test_burst_then_empty(self, clock):
        bucket = TokenBucket(capacity=3, refill_rate=1.0, clock=clock)

        assert [bucket.consume() for _ in range(4)] == [True, True, True, False]
        assert bucket.get_wait_time() == pytest.approx(1.0)

    def test_refill_over_time(self, clock):
        bucket = TokenBucket(capacity=2, refill_rate=0.5, clock=clock)
        bucket.consume()
        bucket.consume()

        clock.now += 2

        assert bucket.consume() is True
        assert bucket.consume() is False

    def test_refill_caps_at_capacity(self, clock):
        bucket = TokenBucket(capacity=2, refill_rate=1.0, clock=clock)

        clock.now += 1000
        bucket.consume()

        assert bucket.tokens == pytest.approx(1.0)


class TestRateLimitMiddleware:
    def test_limit_exceeded_returns_envelope(self, clock):
        client = build_client(clock, default_limit=2)

        client.get("/api/v1/news")
        client.get("/api/v1/news")
        response = client.get("/api/v1/news")

        assert response.status_code == 429
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Too many requests. Please try again later."
        assert body["data"]["retry_after"] >= 1
        assert response.headers["Retry-After"] == str(body["data"]["retry_after"])
        assert response.headers["X-RateLimit-Limit"] == "2"
        assert response.headers["X-RateLimit-Remaining"] == "0"

    def test_remaining_header(self, clock):
        client = build_client(clock, default_limit=5)

        response = client.get("/api/v1/news")

        assert response.headers["X-RateLimit-Remaining"] == "4"

    def test_clients_isolated_by_forwarded_address(self, clock):
        client = build_client(clock, default_limit=1)

        assert client.get("/api/v1/news", headers={"X-Forwarded-For": "1.1.1.1"}).status_code == 200
        assert client.get("/api/v1/news", headers={"X-Forwarded-For": "1.1.1.1, 10.0.0.1"}).status_code == 429
        assert client.get("/api/v1/news", headers={"X-Forwarded-For": "2.2.2.2"}).status_code == 200

    def test_health_exempt(self, clock):
        client = build_client(clock, default_limit=1)

        statuses = {client.get("/api/v1/health").status_code for _ in range(5)}

        assert statuses == {200}

    def test_disabled(self, clock):
        client = build_client(clock, default_limit=1, enabled=False)

        statuses = {client.get("/api/v1/news").status_code for _ in range(5)}

        assert statuses == {200}

    def test_recovers_after_refill(self, clock):
        client = build_client(clock, default_limit=60)
        for _ in range(60):
            client.get("/api/v1/news")
        assert client.get("/api/v1/news").status_code == 429

        clock.now += 1.5

        assert client.get("/api/v1/news").status_code == 200
