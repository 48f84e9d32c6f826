"""
Health Check Tests
==================

Tests for the health check and page endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test the health check endpoint."""
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()

    assert data["status"] == "healthy"
    assert "version" in data
    assert "environment" in data


@pytest.mark.asyncio
async def test_health_does_not_touch_store(client: AsyncClient, app):
    """Health stays up even when the store is broken."""
    def broken_store():
        raise RuntimeError("store down")

    from app.services.document_store import get_document_store
    app.dependency_overrides[get_document_store] = broken_store

    response = await client.get("/health")

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    """Test the root endpoint with a session cookie."""
    response = await client.get("/", headers={"Cookie": "session=abc"})

    assert response.status_code == 200
    data = response.json()

    assert data["name"] == "Todo Tracker API"
    assert "version" in data
