"""Search operations over the product catalog."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Annotated, Any

from fastapi import Depends

from src.models.search import (
    AnalyticsQuery,
    CatalogAnalytics,
    PageInfo,
    QuickSearchQuery,
    QuickSuggestion,
    SearchQuery,
    SearchResult,
    SkuSearchQuery,
)
from src.services.search.facets import FacetAggregator
from src.services.search.predicate import (
    alternatives,
    build_predicate,
    build_sort,
    contains,
    pagination,
)
from src.services.storage.product_store import ProductStore, get_product_store

logger = logging.getLogger(__name__)

PUBLISHED = {"status": "approved", "visibility": "public"}

QUICK_SEARCH_FIELDS = {
    "title": 1,
    "brand": 1,
    "primeCategory": 1,
    "category": 1,
    "subcategory": 1,
    "finalPrice": 1,
    "coverImage": 1,
    "variants": 1,
}


class SearchService:
    """Faceted, quick, SKU and analytics queries over one product store."""

    def __init__(self, store: ProductStore, facets: FacetAggregator | None = None) -> None:
        self._store = store
        self._facets = facets or FacetAggregator(store)

    async def search(self, query: SearchQuery) -> SearchResult:
        """Paginated records, total count and facets for ``query``.

        The page, the count and the facet pipelines are independent reads
        and run concurrently.
        """

        predicate = build_predicate(query)
        sort = build_sort(query.sort_by, query.sort_order)
        skip, limit = pagination(query.page, query.limit)

        records, total, facets = await asyncio.gather(
            self._store.find(predicate, sort=sort, skip=skip, limit=limit),
            self._store.count(predicate),
            self._facets.summarize(predicate),
        )

        total_pages = math.ceil(total / limit) if limit else 0
        logger.info(
            "Search matched %d products (page %d of %d)", total, query.page, total_pages
        )
        return SearchResult(
            records=records,
            total_count=total,
            page_info=PageInfo(
                current_page=query.page,
                total_pages=total_pages,
                has_next_page=query.page < total_pages,
                has_prev_page=query.page > 1,
                limit=limit,
            ),
            facets=facets,
            applied_filters=query.applied_filters(),
        )

    async def quick_search(self, query: QuickSearchQuery) -> list[QuickSuggestion]:
        """Type-ahead suggestions among published products."""

        predicate = {**PUBLISHED, "$or": alternatives("quick_text", contains(query.query))}
        documents = await self._store.find(
            predicate, limit=query.limit, projection=QUICK_SEARCH_FIELDS
        )
        return [
            QuickSuggestion(
                id=document["id"],
                title=document.get("title", ""),
                brand=document.get("brand"),
                category=f"{document.get('primeCategory', '')} > {document.get('category', '')}",
                price=document.get("finalPrice"),
                image=document.get("coverImage"),
                variants=(document.get("variants") or [])[:3],
            )
            for document in documents
        ]

    async def search_by_sku(self, query: SkuSearchQuery) -> list[dict[str, Any]]:
        """Published products whose own or variant SKU matches."""

        condition: Any = query.sku if query.exact else contains(query.sku)
        predicate = {**PUBLISHED, "$or": alternatives("sku", condition)}
        return await self._store.find(predicate)

    async def analytics(self, query: AnalyticsQuery) -> CatalogAnalytics:
        """Catalog-wide figures over published products."""

        match: dict[str, Any] = dict(PUBLISHED)
        created: dict[str, Any] = {}
        if query.date_from:
            created["$gte"] = query.date_from
        if query.date_to:
            created["$lte"] = query.date_to
        if created:
            match["createdAt"] = created

        rows = await self._store.aggregate(
            [
                {"$match": match},
                {
                    "$group": {
                        "_id": None,
                        "totalProducts": {"$sum": 1},
                        "totalVariants": {"$sum": {"$size": {"$ifNull": ["$variants", []]}}},
                        "avgPrice": {"$avg": "$finalPrice"},
                        "minPrice": {"$min": "$finalPrice"},
                        "maxPrice": {"$max": "$finalPrice"},
                        "brands": {"$addToSet": "$brand"},
                        "categories": {
                            "$addToSet": {"prime": "$primeCategory", "category": "$category"}
                        },
                    }
                },
            ]
        )
        if not rows:
            return CatalogAnalytics()

        row = rows[0]
        return CatalogAnalytics(
            total_products=row.get("totalProducts", 0),
            total_variants=row.get("totalVariants", 0),
            avg_price=round(row.get("avgPrice") or 0, 2),
            min_price=row.get("minPrice") or 0,
            max_price=row.get("maxPrice") or 0,
            unique_brands=len(row.get("brands") or []),
            unique_categories=len(row.get("categories") or []),
        )


def get_search_service(
    store: Annotated[ProductStore, Depends(get_product_store)],
) -> SearchService:
    """FastAPI dependency factory."""

    return SearchService(store)


SearchServiceDependency = Annotated[SearchService, Depends(get_search_service)]
