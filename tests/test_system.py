"""Tests for root and health endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.services.storage.product_store import ProductStore, get_product_store


@pytest.mark.asyncio
async def test_root(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Hello World"}


@pytest.mark.asyncio
async def test_health_reports_connected_store(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["mongodb"] == "connected"


@pytest.mark.asyncio
async def test_health_reports_unreachable_store(client):
    from src.main import app

    store = MagicMock(spec=ProductStore)
    store.ping = AsyncMock(return_value=False)
    app.dependency_overrides[get_product_store] = lambda: store

    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["mongodb"] == "disconnected"
