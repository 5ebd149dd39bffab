"""Tests for the health endpoint."""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_health_reports_counts(client: AsyncClient, offer_factory):
    await offer_factory()

    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == {"connected": True, "offers": 1, "issuers": 1}
    assert body["timestamp"].endswith("Z")
    assert "version" in body


async def test_health_when_database_unreachable(offline_client: AsyncClient):
    response = await offline_client.get("/health")

    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "unhealthy"
    assert body["database"]["connected"] is False
