"""Tests for product-level pricing derivation."""

from src.models.product import ProductVariant
from src.services.catalog.pricing import aggregate_variant_pricing, top_level_pricing


def _variant(**fields) -> ProductVariant:
    return ProductVariant(id=fields.pop("id", "v"), **fields)


def test_minimums_may_come_from_different_variants():
    pricing = aggregate_variant_pricing(
        [
            _variant(mrp=1200, final_price=800, discount=10),
            _variant(mrp=1000, final_price=950, discount=25),
        ]
    )

    assert pricing.final_price == 800
    assert pricing.price == 1000
    assert pricing.discount == 25


def test_non_positive_values_are_ignored():
    pricing = aggregate_variant_pricing(
        [
            _variant(mrp=0, final_price=0, discount=0),
            _variant(mrp=500, final_price=450, discount=0),
        ]
    )

    assert pricing == (500, 0, 450)


def test_no_positive_final_price_zeroes_price():
    pricing = aggregate_variant_pricing([_variant(mrp=300, final_price=0, discount=5)])

    assert pricing.final_price == 0
    assert pricing.price == 0
    assert pricing.discount == 5


def test_empty_variant_list():
    assert aggregate_variant_pricing([]) == (0, 0, 0)


def test_top_level_pricing_falls_back_to_mrp():
    pricing = top_level_pricing({"mrp": "250", "discount": "10", "finalPrice": "225"})
    assert pricing == (250, 10, 225)
