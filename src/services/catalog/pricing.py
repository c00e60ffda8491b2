"""Product-level pricing derived from variants."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, NamedTuple

from src.models.product import ProductVariant
from src.services.catalog.coercion import to_amount, to_positive_number


class ProductPricing(NamedTuple):
    price: float
    discount: float
    final_price: float


def _positive(values: Iterable[Any]) -> list[float]:
    return [number for number in map(to_positive_number, values) if number is not None]


def aggregate_variant_pricing(variants: Iterable[ProductVariant]) -> ProductPricing:
    """Derive the "from" pricing shown for a multi-variant product.

    ``final_price`` is the lowest positive variant final price and ``price``
    the lowest positive mrp, which may come from a different variant.
    ``discount`` is the highest positive variant discount. Fields with no
    positive candidate are 0.
    """

    variants = list(variants)
    final_prices = _positive(v.final_price for v in variants)
    discounts = _positive(v.discount for v in variants)

    final_price = min(final_prices) if final_prices else 0
    price = 0.0
    if final_prices:
        mrps = _positive(v.mrp for v in variants)
        price = min(mrps) if mrps else 0

    return ProductPricing(
        price=price,
        discount=max(discounts) if discounts else 0,
        final_price=final_price,
    )


def top_level_pricing(raw: Mapping[str, Any]) -> ProductPricing:
    """Pricing submitted directly on a single-variant product."""

    return ProductPricing(
        price=to_amount(raw.get("price", raw.get("mrp"))),
        discount=to_amount(raw.get("discount")),
        final_price=to_amount(raw.get("finalPrice")),
    )
