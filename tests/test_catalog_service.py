"""Tests for catalog moderation rules and store failure handling."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from src.models.product import Creator
from src.services.catalog.errors import InvalidTransition, PermissionDenied
from src.services.catalog.service import CatalogService, get_catalog_service
from src.services.storage.product_store import ProductStore

SELLER = Creator(id="seller-1", role="seller")
MODERATOR = Creator(id="mod-1", role="admin")


@pytest.mark.asyncio
async def test_rejected_products_cannot_be_approved(product_store):
    service = CatalogService(product_store)
    record = await service.create({"title": "Lamp", "brand": "Lumo"}, [], SELLER)

    rejected = await service.reject(record.id, MODERATOR, "Wrong category")
    assert rejected.status == "rejected"

    with pytest.raises(InvalidTransition) as excinfo:
        await service.approve(record.id, MODERATOR)
    assert (excinfo.value.current, excinfo.value.target) == ("rejected", "approved")


@pytest.mark.asyncio
async def test_permission_is_checked_before_lookup():
    store = MagicMock(spec=ProductStore)
    store.get = AsyncMock()

    with pytest.raises(PermissionDenied):
        await CatalogService(store).approve("any", SELLER)
    store.get.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_preserves_attribution(product_store):
    service = CatalogService(product_store)
    record = await service.create({"title": "Lamp", "brand": "Lumo"}, [], SELLER)
    stored = await service.get(record.id)

    updated = await service.update(record.id, {"brand": "Lumo Lighting"})

    assert updated.created_by == SELLER
    assert updated.created_at == stored.created_at
    assert (await service.get(record.id)).brand == "Lumo Lighting"


@pytest.mark.asyncio
async def test_store_outage_maps_to_503(client, seller_headers):
    from src.main import app

    store = MagicMock(spec=ProductStore)
    store.get = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
    app.dependency_overrides[get_catalog_service] = lambda: CatalogService(store)
    try:
        response = await client.get("/products/0123456789abcdef01234567")
    finally:
        app.dependency_overrides.pop(get_catalog_service, None)

    assert response.status_code == 503
