"""Facet counts and range statistics for a search predicate."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any

from src.config import settings
from src.models.search import CategoryCount, FacetSummary, RangeStats, ValueCount
from src.services.search.field_paths import VARIANT_FACET_PATHS
from src.services.storage.product_store import ProductStore

logger = logging.getLogger(__name__)


def variant_value_expression(attribute: str) -> Any:
    """Expression reading ``attribute`` from an unwound variant, first path wins."""

    paths = [f"$variants.{path}" for path in VARIANT_FACET_PATHS[attribute]]
    if len(paths) == 1:
        return paths[0]
    expression: Any = paths[-1]
    for path in reversed(paths[:-1]):
        expression = {"$ifNull": [path, expression]}
    return expression


class FacetAggregator:
    """Runs the grouping pipelines behind the refine-by panels.

    Facets are computed over the whole filtered set, independent of the
    page being displayed.
    """

    def __init__(
        self,
        store: ProductStore,
        top_n: int | None = None,
        variant_top_n: int | None = None,
    ) -> None:
        self._store = store
        self._top_n = top_n or settings.FACET_TOP_N
        self._variant_top_n = variant_top_n or settings.VARIANT_FACET_TOP_N

    @staticmethod
    def _top(group_id: Any, limit: int) -> list[dict[str, Any]]:
        return [
            {"$group": {"_id": group_id, "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": limit},
        ]

    async def brands(self, predicate: dict[str, Any]) -> list[ValueCount]:
        rows = await self._store.aggregate(
            [{"$match": predicate}, *self._top("$brand", self._top_n)]
        )
        return [ValueCount(name=row["_id"], count=row["count"]) for row in rows]

    async def categories(self, predicate: dict[str, Any]) -> list[CategoryCount]:
        group_id = {"prime": "$primeCategory", "category": "$category"}
        rows = await self._store.aggregate(
            [{"$match": predicate}, *self._top(group_id, self._top_n)]
        )
        return [
            CategoryCount(
                prime_category=(row["_id"] or {}).get("prime"),
                category=(row["_id"] or {}).get("category"),
                count=row["count"],
            )
            for row in rows
        ]

    async def variant_values(self, predicate: dict[str, Any], attribute: str) -> list[ValueCount]:
        """Top values of a variant attribute, blanks excluded."""

        pipeline = [
            {"$match": predicate},
            {"$unwind": "$variants"},
            {"$group": {"_id": variant_value_expression(attribute), "count": {"$sum": 1}}},
            {"$match": {"_id": {"$nin": [None, ""]}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": self._variant_top_n},
        ]
        rows = await self._store.aggregate(pipeline)
        return [ValueCount(name=row["_id"], count=row["count"]) for row in rows]

    async def variant_range(self, predicate: dict[str, Any], attribute: str) -> RangeStats:
        """Min/max of a numeric variant attribute, text values converted.

        Values that do not convert are left out of the range.
        """

        value = {
            "$convert": {
                "input": variant_value_expression(attribute),
                "to": "double",
                "onError": None,
                "onNull": None,
            }
        }
        rows = await self._store.aggregate(
            [
                {"$match": predicate},
                {"$unwind": "$variants"},
                {"$group": {"_id": None, "min": {"$min": value}, "max": {"$max": value}}},
            ]
        )
        if not rows:
            return RangeStats()
        return RangeStats(
            min=math.floor(rows[0].get("min") or 0),
            max=math.ceil(rows[0].get("max") or 0),
        )

    async def summarize(self, predicate: dict[str, Any]) -> FacetSummary:
        """All facets for ``predicate``; an empty summary if any query fails."""

        try:
            brands, categories, colors, sizes, price_range, discount_range = await asyncio.gather(
                self.brands(predicate),
                self.categories(predicate),
                self.variant_values(predicate, "color"),
                self.variant_values(predicate, "size"),
                self.variant_range(predicate, "final_price"),
                self.variant_range(predicate, "discount"),
            )
        except Exception:
            logger.warning("Facet aggregation failed; returning empty facets", exc_info=True)
            return FacetSummary()

        return FacetSummary(
            brands=brands,
            categories=categories,
            colors=colors,
            sizes=sizes,
            price_range=price_range,
            discount_range=discount_range,
        )
