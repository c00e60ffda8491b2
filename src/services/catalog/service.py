"""Catalog ingestion and moderation workflows."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import Depends

from src.config import settings
from src.models.product import Creator, ProductPage, ProductRecord, UploadedAsset
from src.services.catalog.errors import InvalidTransition, PermissionDenied
from src.services.catalog.record_builder import apply_update, build_product_record
from src.models.search import ProductListQuery
from src.services.search.predicate import build_listing_predicate, build_sort, pagination
from src.services.storage.product_store import ProductStore, get_product_store

logger = logging.getLogger(__name__)


class CatalogService:
    """Creates, edits and moderates product records."""

    def __init__(self, store: ProductStore) -> None:
        self._store = store

    async def create(
        self,
        raw: Mapping[str, Any],
        assets: Sequence[UploadedAsset],
        creator: Creator,
    ) -> ProductRecord:
        """Normalize a submission and persist it as a new record.

        Raises:
            ValidationError: title or brand is missing.
            DuplicateSlug: another product already holds the slug.
        """

        logger.debug("Create payload from %s: %s", creator.id, dict(raw))
        record = build_product_record(raw, assets, creator)
        stored = await self._store.insert(record)
        logger.info(
            "Created product %s (slug=%s, status=%s)", stored.id, stored.seo_slug, stored.status
        )
        return stored

    async def update(
        self,
        product_id: str,
        raw: Mapping[str, Any],
        assets: Sequence[UploadedAsset] = (),
    ) -> ProductRecord:
        logger.debug("Update payload for %s: %s", product_id, dict(raw))
        existing = await self._store.get(product_id)
        stored = await self._store.replace(apply_update(existing, raw, assets))
        logger.info("Updated product %s (slug=%s)", stored.id, stored.seo_slug)
        return stored

    async def get(self, product_id: str) -> ProductRecord:
        return await self._store.get(product_id)

    async def delete(self, product_id: str) -> ProductRecord:
        removed = await self._store.delete(product_id)
        logger.info("Deleted product %s (slug=%s)", removed.id, removed.seo_slug)
        return removed

    async def approve(self, product_id: str, actor: Creator) -> ProductRecord:
        return await self._moderate(product_id, actor, "approved")

    async def reject(self, product_id: str, actor: Creator, reason: str) -> ProductRecord:
        return await self._moderate(product_id, actor, "rejected", reason)

    async def _moderate(
        self,
        product_id: str,
        actor: Creator,
        target: str,
        reason: str | None = None,
    ) -> ProductRecord:
        if actor.role.lower() not in settings.privileged_roles:
            raise PermissionDenied(f"Role '{actor.role}' cannot moderate products")

        record = await self._store.get(product_id)
        if record.status != "pending":
            raise InvalidTransition(record.status, target)

        moderated = record.model_copy(
            update={"status": target, "rejection_reason": reason, "updated_at": datetime.now(UTC)}
        )
        stored = await self._store.replace(moderated)
        logger.info("Product %s %s by %s", stored.id, target, actor.id)
        return stored

    async def list_products(self, query: ProductListQuery) -> ProductPage:
        """Filtered, sorted page of products in any status."""

        predicate = build_listing_predicate(query)
        skip, limit = pagination(query.page, query.limit)
        records = await self._store.find(
            predicate,
            sort=build_sort(query.sort_by, query.sort_order),
            skip=skip,
            limit=limit,
        )
        total = await self._store.count(predicate)
        return ProductPage(records=records, total_count=total, page=query.page, limit=limit)

    async def list_by_creator(self, creator_id: str, page: int = 1, limit: int | None = None) -> ProductPage:
        """Products submitted by ``creator_id``, newest first, in any status."""

        skip, limit = pagination(page, limit or settings.SEARCH_DEFAULT_LIMIT)
        predicate = {"createdBy.id": creator_id}
        records = await self._store.find(
            predicate, sort={"createdAt": -1}, skip=skip, limit=limit
        )
        total = await self._store.count(predicate)
        return ProductPage(records=records, total_count=total, page=page, limit=limit)


def get_catalog_service(
    store: Annotated[ProductStore, Depends(get_product_store)],
) -> CatalogService:
    """FastAPI dependency factory."""

    return CatalogService(store)


CatalogServiceDependency = Annotated[CatalogService, Depends(get_catalog_service)]
