"""Tests for the search endpoints and service."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from src.models.search import AnalyticsQuery, FacetSummary, ValueCount
from src.services.search.facets import FacetAggregator
from src.services.search.service import SearchService, get_search_service
from src.services.storage.product_store import ProductStore


def _product(title, brand, color, final_price, sku, **extra):
    product = {
        "title": title,
        "brand": brand,
        "primeCategory": "Fashion",
        "category": "Shoes",
        "sku": sku,
        "variants": [
            {
                "name": f"{color} / M",
                "variantType": "Color",
                "variantValue": color,
                "mrp": final_price + 20,
                "finalPrice": final_price,
                "stock": 5,
                "sku": f"{sku}-{color.upper()}",
            }
        ],
    }
    product.update(extra)
    return product


@pytest_asyncio.fixture()
async def catalog(client, admin_headers, seller_headers):
    products = [
        (_product("Air Runner", "Nike", "Black", 120, "NK-AR"), admin_headers),
        (_product("Trail Pro", "Adidas", "Red", 80, "AD-TP"), admin_headers),
        (_product("Court Classic", "Puma", "Blue", 60, "PM-CC"), admin_headers),
        (_product("Pending Red", "Reebok", "Red", 50, "RB-PR"), seller_headers),
    ]
    for payload, headers in products:
        response = await client.post("/products", json=payload, headers=headers)
        assert response.status_code == 201, response.text
    return client


@pytest.mark.asyncio
async def test_search_returns_envelope_and_pagination(catalog):
    response = await catalog.get("/search", params={"limit": 2, "sortBy": "price", "sortOrder": "asc"})

    assert response.status_code == 200
    data = response.json()
    assert data["totalCount"] == 3
    assert [record["title"] for record in data["records"]] == ["Court Classic", "Trail Pro"]
    assert data["pageInfo"] == {
        "currentPage": 1,
        "totalPages": 2,
        "hasNextPage": True,
        "hasPrevPage": False,
        "limit": 2,
    }
    assert data["appliedFilters"] == {"limit": 2, "sortBy": "price", "sortOrder": "asc"}
    assert set(data["facets"]) == {"brands", "categories", "colors", "sizes", "priceRange", "discountRange"}


@pytest.mark.asyncio
async def test_search_pools_brand_and_color(catalog):
    response = await catalog.get("/search", params={"brand": "nike", "color": "red"})

    titles = {record["title"] for record in response.json()["records"]}
    assert titles == {"Air Runner", "Trail Pro"}


@pytest.mark.asyncio
async def test_search_second_page(catalog):
    response = await catalog.get("/search", params={"limit": 2, "page": 2})

    data = response.json()
    assert len(data["records"]) == 1
    assert data["pageInfo"]["hasPrevPage"] is True
    assert data["pageInfo"]["hasNextPage"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [
        {"minPrice": "100", "maxPrice": "10"},
        {"limit": "101"},
        {"sortBy": "popularity"},
        {"minDiscount": "150"},
        {"priceRange": "cheap"},
    ],
)
async def test_invalid_search_parameters(client, params):
    response = await client.get("/search", params=params)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_search_includes_facets_from_aggregator(client, product_store):
    from src.main import app

    facets = MagicMock(spec=FacetAggregator)
    facets.summarize = AsyncMock(
        return_value=FacetSummary(brands=[ValueCount(name="Nike", count=4)])
    )
    app.dependency_overrides[get_search_service] = lambda: SearchService(product_store, facets)
    try:
        response = await client.get("/search", params={"query": "runner"})
    finally:
        app.dependency_overrides.pop(get_search_service, None)

    assert response.status_code == 200
    assert response.json()["facets"]["brands"] == [{"name": "Nike", "count": 4}]
    predicate = facets.summarize.await_args.args[0]
    assert predicate["status"] == "approved"
    assert predicate["$or"][0] == {"title": {"$regex": "runner", "$options": "i"}}


@pytest.mark.asyncio
async def test_quick_search_suggestions(catalog):
    response = await catalog.get("/search/quick", params={"query": "red"})

    assert response.status_code == 200
    suggestions = response.json()
    assert [item["title"] for item in suggestions] == ["Trail Pro"]
    assert suggestions[0]["category"] == "Fashion > Shoes"
    assert suggestions[0]["price"] == 80
    assert len(suggestions[0]["variants"]) == 1


@pytest.mark.asyncio
async def test_quick_search_requires_two_characters(client):
    response = await client.get("/search/quick", params={"query": "a"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_sku_lookup_exact_and_partial(catalog):
    exact = await catalog.get("/search/sku", params={"sku": "AD-TP-RED", "exact": "true"})
    partial = await catalog.get("/search/sku", params={"sku": "tp"})
    unpublished = await catalog.get("/search/sku", params={"sku": "RB-PR"})

    assert [record["title"] for record in exact.json()["records"]] == ["Trail Pro"]
    assert partial.json()["count"] == 1
    assert unpublished.json()["count"] == 0


@pytest.mark.asyncio
async def test_analytics_maps_group_result():
    store = MagicMock(spec=ProductStore)
    store.aggregate = AsyncMock(
        return_value=[
            {
                "_id": None,
                "totalProducts": 3,
                "totalVariants": 7,
                "avgPrice": 86.6666,
                "minPrice": 60,
                "maxPrice": 120,
                "brands": ["Nike", "Adidas", "Puma"],
                "categories": [{"prime": "Fashion", "category": "Shoes"}],
            }
        ]
    )

    analytics = await SearchService(store, facets=MagicMock()).analytics(
        AnalyticsQuery(date_from="2026-01-01")
    )

    assert analytics.total_products == 3
    assert analytics.total_variants == 7
    assert analytics.avg_price == 86.67
    assert (analytics.min_price, analytics.max_price) == (60, 120)
    assert (analytics.unique_brands, analytics.unique_categories) == (3, 1)
    match = store.aggregate.await_args.args[0][0]["$match"]
    assert match["status"] == "approved"
    assert "$gte" in match["createdAt"]


@pytest.mark.asyncio
async def test_analytics_with_no_matches_is_zeroed():
    store = MagicMock(spec=ProductStore)
    store.aggregate = AsyncMock(return_value=[])

    analytics = await SearchService(store, facets=MagicMock()).analytics(AnalyticsQuery())

    assert analytics.total_products == 0
    assert analytics.avg_price == 0


@pytest.mark.asyncio
async def test_analytics_endpoint_rejects_inverted_window(client):
    response = await client.get(
        "/search/analytics", params={"dateFrom": "2026-05-01", "dateTo": "2026-01-01"}
    )
    assert response.status_code == 422
