"""MongoDB-backed document store for catalog records."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from src.config import settings
from src.models.product import ProductRecord
from src.services.catalog.errors import DuplicateSlug, NotFound

logger = logging.getLogger(__name__)


def to_str_id(doc: dict[str, Any]) -> dict[str, Any]:
    """Replace Mongo's ``_id`` with a string ``id``."""

    if not doc:
        return doc
    data = dict(doc)
    if data.get("_id") is not None:
        data["id"] = str(data.pop("_id"))
    return data


def to_object_id(product_id: str) -> ObjectId:
    try:
        return ObjectId(product_id)
    except (InvalidId, TypeError) as exc:
        raise NotFound(product_id) from exc


class ProductStore:
    """Async facade over a pymongo collection of product documents."""

    def __init__(self, collection: Collection):
        self.collection = collection

    async def ensure_indexes(self) -> None:
        """Create the unique slug index and the indexes used by search."""

        await asyncio.to_thread(
            self.collection.create_index,
            [("seoSlug", ASCENDING)],
            unique=True,
            name="seoSlug_unique",
        )
        for field in ("status", "visibility", "brand", "createdBy.id"):
            await asyncio.to_thread(self.collection.create_index, [(field, ASCENDING)])
        await asyncio.to_thread(self.collection.create_index, [("createdAt", DESCENDING)])

    async def insert(self, record: ProductRecord) -> ProductRecord:
        """Insert a new record; raises DuplicateSlug when the slug is taken."""

        document = record.to_document()
        try:
            result = await asyncio.to_thread(self.collection.insert_one, document)
        except DuplicateKeyError as exc:
            raise DuplicateSlug(record.seo_slug) from exc
        return record.model_copy(update={"id": str(result.inserted_id)})

    async def replace(self, record: ProductRecord) -> ProductRecord:
        """Overwrite the stored document for ``record.id``."""

        if record.id is None:
            raise ValueError("Cannot replace a record without an id")
        try:
            result = await asyncio.to_thread(
                self.collection.replace_one,
                {"_id": to_object_id(record.id)},
                record.to_document(),
            )
        except DuplicateKeyError as exc:
            raise DuplicateSlug(record.seo_slug) from exc
        if result.matched_count == 0:
            raise NotFound(record.id)
        return record

    async def get(self, product_id: str) -> ProductRecord:
        document = await asyncio.to_thread(
            self.collection.find_one, {"_id": to_object_id(product_id)}
        )
        if document is None:
            raise NotFound(product_id)
        return ProductRecord.model_validate(to_str_id(document))

    async def delete(self, product_id: str) -> ProductRecord:
        """Hard delete; returns the removed record."""

        document = await asyncio.to_thread(
            self.collection.find_one_and_delete, {"_id": to_object_id(product_id)}
        )
        if document is None:
            raise NotFound(product_id)
        return ProductRecord.model_validate(to_str_id(document))

    async def find(
        self,
        predicate: dict[str, Any],
        sort: dict[str, int] | None = None,
        skip: int = 0,
        limit: int = 0,
        projection: dict[str, int] | None = None,
    ) -> list[dict[str, Any]]:
        """Return matching documents (with string ids) as plain dicts."""

        def _run() -> list[dict[str, Any]]:
            cursor = self.collection.find(predicate, projection)
            if sort:
                cursor = cursor.sort(list(sort.items()))
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            return [to_str_id(document) for document in cursor]

        return await asyncio.to_thread(_run)

    async def count(self, predicate: dict[str, Any]) -> int:
        return await asyncio.to_thread(self.collection.count_documents, predicate)

    async def aggregate(self, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        def _run() -> list[dict[str, Any]]:
            return list(self.collection.aggregate(pipeline))

        return await asyncio.to_thread(_run)

    async def ping(self) -> bool:
        """Return True when the backing database answers a ping."""

        try:
            await asyncio.to_thread(self.collection.database.command, "ping")
        except Exception:
            logger.debug("Document store ping failed", exc_info=True)
            return False
        return True


_client: MongoClient | None = None


def get_mongo_client() -> MongoClient:
    """Return a singleton MongoClient for the current process."""

    global _client
    if _client is None:
        _client = MongoClient(settings.MONGODB_URL, tz_aware=True)
    return _client


def create_product_store(collection_name: str | None = None) -> ProductStore:
    """Factory function to create a product store."""
    database = get_mongo_client()[settings.MONGODB_DATABASE]
    return ProductStore(database[collection_name or settings.PRODUCTS_COLLECTION])


def get_product_store() -> ProductStore:
    """FastAPI dependency factory."""

    return create_product_store()
