"""Tests for the product submission and moderation endpoints."""

import pytest

PAYLOAD = {
    "title": "Trail Runner",
    "brand": "Nike",
    "primeCategory": "Fashion",
    "category": "Shoes",
    "visibility": "public",
    "tags": '["running"]',
    "variants": '[{"name": "Red / 42", "variantType": "Color", "variantValue": "Red", "mrp": "120", "finalPrice": "99.5", "stock": "3", "images": ["blob:red.jpg"]}]',
    "uploadedAssets": [
        {"storagePath": "products/red-123.jpg", "originalName": "red.jpg", "size": 2048, "contentType": "image/jpeg"}
    ],
}


async def _create(client, headers, **overrides):
    response = await client.post("/products", json={**PAYLOAD, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_product_normalizes_submission(client, seller_headers):
    data = await _create(client, seller_headers)

    assert data["id"]
    assert data["seoSlug"] == "trail-runner"
    assert data["status"] == "pending"
    assert data["variantMode"] == "multi"
    assert data["finalPrice"] == 99.5
    assert data["price"] == 120
    assert data["tags"] == ["running"]
    assert data["createdBy"] == {
        "id": "seller-1",
        "role": "seller",
        "name": "Sam Seller",
        "email": "sam@example.com",
    }
    variant = data["variants"][0]
    assert variant["stock"] == 3
    assert variant["images"][0]["path"] == "products/red-123.jpg"
    assert data["images"][0]["path"] == "products/red-123.jpg"


@pytest.mark.asyncio
async def test_create_requires_title_and_brand(client, seller_headers):
    response = await client.post("/products", json={"description": "nameless"}, headers=seller_headers)

    assert response.status_code == 400
    assert response.json()["detail"]["fields"] == ["title", "brand"]


@pytest.mark.asyncio
async def test_create_requires_actor_header(client):
    response = await client.post("/products", json=PAYLOAD)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_duplicate_slug_conflicts(client, seller_headers):
    await _create(client, seller_headers)

    response = await client.post("/products", json=PAYLOAD, headers=seller_headers)

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_admin_products_are_auto_approved(client, admin_headers):
    data = await _create(client, admin_headers)
    assert data["status"] == "approved"


@pytest.mark.asyncio
async def test_get_update_and_delete(client, seller_headers):
    created = await _create(client, seller_headers)
    product_id = created["id"]

    fetched = await client.get(f"/products/{product_id}")
    assert fetched.status_code == 200
    assert fetched.json()["title"] == "Trail Runner"

    updated = await client.put(
        f"/products/{product_id}",
        json={"title": "Trail Runner GTX", "finalPrice": "80"},
        headers=seller_headers,
    )
    assert updated.status_code == 200
    body = updated.json()
    assert body["seoSlug"] == "trail-runner-gtx"
    assert body["brand"] == "Nike"
    assert body["status"] == "pending"

    deleted = await client.delete(f"/products/{product_id}", headers=seller_headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"status": "deleted", "id": product_id}

    missing = await client.get(f"/products/{product_id}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_unknown_or_malformed_ids_return_404(client, seller_headers):
    assert (await client.get("/products/nope")).status_code == 404
    response = await client.put("/products/0123456789abcdef01234567", json={"title": "x"}, headers=seller_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_approve_flow(client, seller_headers, admin_headers):
    product_id = (await _create(client, seller_headers))["id"]

    forbidden = await client.patch(f"/products/{product_id}/approve", headers=seller_headers)
    assert forbidden.status_code == 403

    approved = await client.patch(f"/products/{product_id}/approve", headers=admin_headers)
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"

    again = await client.patch(f"/products/{product_id}/approve", headers=admin_headers)
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_reject_records_reason(client, seller_headers, admin_headers):
    product_id = (await _create(client, seller_headers))["id"]

    missing_reason = await client.patch(
        f"/products/{product_id}/reject", json={"reason": ""}, headers=admin_headers
    )
    assert missing_reason.status_code == 422

    rejected = await client.patch(
        f"/products/{product_id}/reject",
        json={"reason": "Blurry images"},
        headers=admin_headers,
    )
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["rejectionReason"] == "Blurry images"


@pytest.mark.asyncio
async def test_list_by_creator(client, seller_headers, admin_headers):
    await _create(client, seller_headers)
    await _create(client, seller_headers, title="Road Runner")
    await _create(client, admin_headers, title="Admin Pick")

    response = await client.get("/products/creator/seller-1", params={"limit": 1})

    assert response.status_code == 200
    data = response.json()
    assert data["totalCount"] == 2
    assert data["limit"] == 1
    assert len(data["records"]) == 1


@pytest.mark.asyncio
async def test_list_products_spans_every_status(client, seller_headers, admin_headers):
    await _create(client, seller_headers)
    await _create(client, admin_headers, title="Admin Pick", category="Boots")
    await _create(client, seller_headers, title="Hidden Draft", visibility="draft")

    response = await client.get("/products", params={"sortBy": "title", "sortOrder": "asc"})

    assert response.status_code == 200
    data = response.json()
    assert data["totalCount"] == 3
    assert [record["title"] for record in data["records"]] == ["Admin Pick", "Hidden Draft", "Trail Runner"]
    assert {record["status"] for record in data["records"]} == {"pending", "approved"}


@pytest.mark.asyncio
async def test_list_products_filters(client, seller_headers, admin_headers):
    await _create(client, seller_headers)
    await _create(client, admin_headers, title="Admin Pick", category="Boots")

    by_category = await client.get("/products", params={"category": "boots"})
    by_text = await client.get("/products", params={"search": "trail"})
    by_price = await client.get("/products", params={"minPrice": 100})
    paged = await client.get("/products", params={"limit": 1, "page": 2})

    assert [record["title"] for record in by_category.json()["records"]] == ["Admin Pick"]
    assert [record["title"] for record in by_text.json()["records"]] == ["Trail Runner"]
    assert by_price.json()["totalCount"] == 0
    assert paged.json()["page"] == 2
    assert len(paged.json()["records"]) == 1


@pytest.mark.asyncio
async def test_list_products_rejects_inverted_price_range(client):
    response = await client.get("/products", params={"minPrice": 50, "maxPrice": 10})
    assert response.status_code == 422
