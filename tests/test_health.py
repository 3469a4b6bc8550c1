"""Tests for the /health probe and the response middleware."""

import pytest
from httpx import AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from cinemood import main


async def redis_up() -> bool:
    return True


async def redis_down() -> bool:
    raise RedisConnectionError("connection refused")


class TestHealthCheck:
    @pytest.mark.asyncio
    async def test_all_dependencies_up(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(main.cache, "ping", redis_up)

        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        assert data["uptime_seconds"] >= 0
        assert data["checks"] == {
            "database": {"status": "healthy"},
            "redis": {"status": "healthy"},
        }

    @pytest.mark.asyncio
    async def test_redis_down_degrades(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(main.cache, "ping", redis_down)

        response = await client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["checks"]["redis"] == {"status": "unhealthy"}
        assert data["checks"]["database"] == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_no_session_needed(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(main.cache, "ping", redis_up)
        response = await client.get("/health")
        assert "set-cookie" not in response.headers


class TestSecurityHeaders:
    @pytest.mark.asyncio
    async def test_headers_on_every_response(self, client: AsyncClient):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
        assert "Strict-Transport-Security" not in response.headers
