"""Routes for faceted, type-ahead and SKU product search."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, HTTPException, Query, status
from pymongo.errors import PyMongoError

from src.models.search import (
    AnalyticsQuery,
    CatalogAnalytics,
    QuickSearchQuery,
    QuickSuggestion,
    SearchQuery,
    SearchResult,
    SkuSearchQuery,
)
from src.services.search.service import SearchServiceDependency

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


def _unavailable(exc: Exception) -> HTTPException:
    logger.exception("Search request failed against the document store")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Document store unavailable",
    )


@router.get("", summary="Faceted product search")
async def search_products(
    query: Annotated[SearchQuery, Query()],
    service: SearchServiceDependency,
) -> SearchResult:
    """Filtered, sorted and paginated products with refine-by facets."""

    try:
        return await service.search(query)
    except PyMongoError as exc:
        raise _unavailable(exc) from exc


@router.get("/quick", summary="Type-ahead suggestions")
async def quick_search(
    query: Annotated[QuickSearchQuery, Query()],
    service: SearchServiceDependency,
) -> list[QuickSuggestion]:
    try:
        return await service.quick_search(query)
    except PyMongoError as exc:
        raise _unavailable(exc) from exc


@router.get("/sku", summary="Look up products by SKU")
async def search_by_sku(
    query: Annotated[SkuSearchQuery, Query()],
    service: SearchServiceDependency,
) -> dict[str, Any]:
    try:
        records = await service.search_by_sku(query)
    except PyMongoError as exc:
        raise _unavailable(exc) from exc
    return {"records": records, "count": len(records)}


@router.get("/analytics", summary="Catalog-wide figures")
async def search_analytics(
    query: Annotated[AnalyticsQuery, Query()],
    service: SearchServiceDependency,
) -> CatalogAnalytics:
    try:
        return await service.analytics(query)
    except PyMongoError as exc:
        raise _unavailable(exc) from exc
