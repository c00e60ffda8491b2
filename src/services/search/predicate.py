"""Translation of a :class:`SearchQuery` into a MongoDB filter document.

Filters fall into two groups. Category, id, visibility, status, tag,
weight, collection and date filters narrow the result set and are ANDed at
the top level. Every other filter contributes alternatives over the paths
an attribute may live at, and all of those alternatives share one top-level
``$or``: a product matching any of them is returned. Combining, say, a
color and a brand filter therefore widens the result set rather than
narrowing it.

``variantType`` and ``variantValue`` are OR-class as well: they join the
pooled alternatives like the other variant attributes, so they widen a
search too.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any

from src.models.search import ProductListQuery, SearchQuery
from src.services.catalog.coercion import split_csv
from src.services.search.field_paths import paths_for

logger = logging.getLogger(__name__)

PRICE_BUCKETS: dict[str, dict[str, float]] = {
    "under-100": {"$lt": 100},
    "100-500": {"$gte": 100, "$lte": 500},
    "500-1000": {"$gte": 500, "$lte": 1000},
    "1000-5000": {"$gte": 1000, "$lte": 5000},
    "above-5000": {"$gt": 5000},
}

SORT_FIELDS: dict[str, str] = {
    "createdAt": "createdAt",
    "updatedAt": "updatedAt",
    "title": "title",
    "price": "finalPrice",
    "discount": "discount",
    "finalPrice": "finalPrice",
}

IN_STOCK: tuple[Any, ...] = ({"$gt": 0}, {"$regex": "^[1-9]"})
OUT_OF_STOCK: tuple[Any, ...] = (0, "0", {"$regex": "^0"})


def contains(text: str) -> dict[str, str]:
    """Case-insensitive substring match."""

    return {"$regex": re.escape(text), "$options": "i"}


def contains_any(texts: list[str]) -> dict[str, list[re.Pattern[str]]]:
    return {"$in": [re.compile(re.escape(text), re.IGNORECASE) for text in texts]}


def alternatives(attribute: str, condition: Any) -> list[dict[str, Any]]:
    """One clause per physical path of ``attribute``."""

    return [{path: condition} for path in paths_for(attribute)]


def number_range(
    minimum: float | None,
    maximum: float | None,
) -> dict[str, float] | None:
    condition: dict[str, float] = {}
    if minimum is not None:
        condition["$gte"] = minimum
    if maximum is not None:
        condition["$lte"] = maximum
    return condition or None


def flat_discount_expression(percentage: float) -> dict[str, Any]:
    """Server-side ``discount / price * 100 >= percentage`` check.

    Products without a positive price never match instead of failing the
    query with a division by zero.
    """

    ratio = {
        "$cond": [
            {"$gt": ["$price", 0]},
            {"$multiply": [{"$divide": ["$discount", "$price"]}, 100]},
            -1,
        ]
    }
    return {"$expr": {"$gte": [ratio, percentage]}}


def _and_filters(query: SearchQuery) -> dict[str, Any]:
    filters: dict[str, Any] = {}

    if query.status:
        filters["status"] = query.status
    if query.visibility:
        filters["visibility"] = query.visibility

    for field, single, multiple in (
        ("primeCategory", query.prime_category, query.prime_categories),
        ("category", query.category, query.categories),
        ("subcategory", query.subcategory, query.subcategories),
    ):
        values = split_csv(multiple)
        if values:
            filters[field] = contains_any(values)
        elif single:
            filters[field] = contains(single)

    for field, value in (
        ("primeCategoryId", query.prime_category_id),
        ("categoryId", query.category_id),
        ("subcategoryId", query.subcategory_id),
        ("brandId", query.brand_id),
    ):
        if value:
            filters[field] = value

    tags = split_csv(query.tags)
    if tags:
        filters["tags"] = {"$in": tags}
    if query.weight:
        filters["weight"] = contains(query.weight)
    if query.product_collection:
        filters["productCollection"] = contains(query.product_collection)

    created: dict[str, datetime] = {}
    if query.date_from:
        created["$gte"] = query.date_from
    if query.date_to:
        created["$lte"] = query.date_to
    if created:
        filters["createdAt"] = created

    return filters


def _or_alternatives(query: SearchQuery) -> list[dict[str, Any]]:
    pooled: list[dict[str, Any]] = []

    if query.query:
        pooled += alternatives("text", contains(query.query))
    if query.sku:
        pooled += alternatives("sku", contains(query.sku))
    if query.brand:
        pooled += alternatives("brand", contains(query.brand))
    brands = split_csv(query.brands)
    if brands:
        pooled += alternatives("brand", contains_any(brands))

    price = number_range(query.min_price, query.max_price)
    if price:
        pooled += alternatives("final_price", price)
    if query.price_range in PRICE_BUCKETS:
        pooled += alternatives("final_price", dict(PRICE_BUCKETS[query.price_range]))

    discount = number_range(query.min_discount, query.max_discount)
    if discount:
        pooled += alternatives("discount", discount)
    if query.discount_value is not None:
        if query.discount_type == "percentage":
            pooled += alternatives("discount", {"$gte": query.discount_value})
        elif query.discount_type == "flat":
            pooled.append(flat_discount_expression(query.discount_value))

    for attribute, single, multiple in (
        ("color", query.color, query.colors),
        ("size", query.size, query.sizes),
        ("model", query.model, query.models),
    ):
        if single:
            pooled += alternatives(attribute, contains(single))
        values = split_csv(multiple)
        if values:
            pooled += alternatives(attribute, contains_any(values))

    if query.variant_type:
        pooled += alternatives("variant_type", contains(query.variant_type))
    if query.variant_value:
        pooled += alternatives("variant_value", contains(query.variant_value))

    if query.in_stock:
        for condition in IN_STOCK:
            pooled += alternatives("stock", condition)
    if query.out_of_stock:
        for condition in OUT_OF_STOCK:
            pooled += alternatives("stock", condition)

    return pooled


def build_predicate(query: SearchQuery) -> dict[str, Any]:
    """Compose the filter document for ``query``."""

    predicate = _and_filters(query)
    pooled = _or_alternatives(query)
    if pooled:
        predicate["$or"] = pooled

    logger.debug(
        "Built search predicate with %d AND filters and %d OR alternatives",
        len(predicate) - (1 if pooled else 0),
        len(pooled),
    )
    return predicate


def build_listing_predicate(query: ProductListQuery) -> dict[str, Any]:
    """Filter for the product listing: every condition is ANDed, any status."""

    predicate: dict[str, Any] = {}
    for field, value in (
        ("primeCategory", query.prime_category),
        ("category", query.category),
        ("subcategory", query.subcategory),
    ):
        if value:
            predicate[field] = contains(value)

    price = number_range(query.min_price, query.max_price)
    if price:
        predicate["finalPrice"] = price
    if query.search:
        predicate["$or"] = alternatives("listing_text", contains(query.search))
    return predicate


def build_sort(sort_by: str, sort_order: str) -> dict[str, int]:
    """Sort document; known keys are mapped, anything else is used as-is."""

    return {SORT_FIELDS.get(sort_by, sort_by): 1 if sort_order == "asc" else -1}


def pagination(page: int, limit: int) -> tuple[int, int]:
    """Return ``(skip, limit)`` for a 1-based page number."""

    page = max(page, 1)
    return (page - 1) * limit, limit
