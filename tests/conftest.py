"""Pytest configuration and fixtures for the catalog search service."""

import mongomock
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.services.storage.product_store import ProductStore, get_product_store


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")


@pytest.fixture()
def collection():
    """Provide an in-memory products collection for each test."""
    client = mongomock.MongoClient(tz_aware=True)
    try:
        yield client["catalog_test"]["products"]
    finally:
        client.close()


@pytest_asyncio.fixture()
async def product_store(collection):
    store = ProductStore(collection)
    await store.ensure_indexes()
    return store


@pytest.fixture()
def seller_headers():
    return {
        "X-Actor-Id": "seller-1",
        "X-Actor-Role": "seller",
        "X-Actor-Name": "Sam Seller",
        "X-Actor-Email": "sam@example.com",
    }


@pytest.fixture()
def admin_headers():
    return {"X-Actor-Id": "admin-1", "X-Actor-Role": "admin"}


@pytest_asyncio.fixture()
async def client(product_store):
    """Return an HTTPX async client pointing at the FastAPI app."""
    from src.main import app

    app.dependency_overrides[get_product_store] = lambda: product_store
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_product_store, None)
