"""Tests for health endpoint."""

from __future__ import annotations

from httpx import AsyncClient

from portfolio.core.config import settings


async def test_health_endpoint(client: AsyncClient) -> None:
    """Test that health endpoint returns expected response."""
    response = await client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == settings.version
    assert data["database"] == "connected"
