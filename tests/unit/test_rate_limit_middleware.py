"""Unit tests for rate limiting middleware

Tests cover:
- Only POST requests to the analysis routes are admitted through the limiter
- Window exhaustion returns 429 with Retry-After
- X-Forwarded-For trust rules
- Malformed forwarded addresses fall back to the socket host
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from journalq.api.middleware.rate_limit import RateLimitMiddleware
from journalq.infrastructure.rate_limiter import SlidingWindowRateLimiter


@pytest.fixture
def limiter(manual_clock):
    return SlidingWindowRateLimiter(limit=3, window_seconds=60, clock=manual_clock)


@pytest.fixture
def app(limiter):
    """Create test FastAPI app with rate limiting"""
    test_app = FastAPI()
    test_app.add_middleware(RateLimitMiddleware, limiter=limiter)

    @test_app.post("/api/analyze")
    async def analyze():
        return {"status": "ok"}

    @test_app.get("/api/analyze/status")
    async def status():
        return {"status": "ok"}

    @test_app.post("/api/other")
    async def other():
        return {"status": "ok"}

    return test_app


def test_limit_enforced(app, monkeypatch):
    monkeypatch.setenv("JOURNALQ_ENV", "production")
    client = TestClient(app)

    for _ in range(3):
        assert client.post("/api/analyze").status_code == 200

    response = client.post("/api/analyze")
    assert response.status_code == 429
    assert response.json() == {"error": "Rate limit exceeded", "retry_after": 60}
    assert response.headers["Retry-After"] == "60"


def test_window_reopens_after_expiry(app, manual_clock):
    client = TestClient(app)
    for _ in range(3):
        client.post("/api/analyze")

    manual_clock.advance(60)

    assert client.post("/api/analyze").status_code == 200


def test_unguarded_routes_bypass_limit(app, limiter):
    client = TestClient(app)

    for _ in range(5):
        assert client.get("/api/analyze/status").status_code == 200
        assert client.post("/api/other").status_code == 200

    assert limiter.active_callers() == 0


def test_forwarded_for_trusted_in_development(app, monkeypatch):
    monkeypatch.setenv("JOURNALQ_ENV", "development")
    client = TestClient(app)

    for _ in range(3):
        client.post("/api/analyze", headers={"X-Forwarded-For": "203.0.113.1"})

    blocked = client.post("/api/analyze", headers={"X-Forwarded-For": "203.0.113.1"})
    other = client.post("/api/analyze", headers={"X-Forwarded-For": "203.0.113.2, 10.0.0.1"})

    assert blocked.status_code == 429
    assert other.status_code == 200


def test_forwarded_for_ignored_in_production(app, monkeypatch):
    """Spoofed X-Forwarded-For must not mint fresh windows"""
    monkeypatch.setenv("JOURNALQ_ENV", "production")
    client = TestClient(app)

    for i in range(3):
        client.post("/api/analyze", headers={"X-Forwarded-For": f"203.0.113.{i}"})

    response = client.post("/api/analyze", headers={"X-Forwarded-For": "203.0.113.99"})
    assert response.status_code == 429


def test_forwarded_for_trusted_behind_cloud_run(app, monkeypatch):
    monkeypatch.setenv("JOURNALQ_ENV", "production")
    client = TestClient(app)
    headers = {"X-Cloud-Trace-Context": "abc/1", "X-Forwarded-For": "198.51.100.4"}

    for _ in range(3):
        client.post("/api/analyze", headers=headers)

    assert client.post("/api/analyze", headers=headers).status_code == 429
    assert client.post("/api/analyze", headers={"X-Cloud-Trace-Context": "abc/2"}).status_code == 200


def test_malformed_forwarded_for_uses_socket_host(app, limiter, monkeypatch):
    monkeypatch.setenv("JOURNALQ_ENV", "development")
    client = TestClient(app)

    client.post("/api/analyze", headers={"X-Forwarded-For": "not-an-ip"})

    assert limiter.active_callers() == 1
    assert limiter.admit("testclient").remaining == 1
