"""Logical search attributes mapped to their physical document paths.

Products written by older catalog versions keep some attributes on top-level
lists (``colorValues``, ``sizes``), newer ones inside ``variants`` and the
flattened ``legacyVariants`` projection. Filters and facets look attributes
up here instead of listing paths at each call site.
"""

from __future__ import annotations

FIELD_PATHS: dict[str, tuple[str, ...]] = {
    "text": (
        "title",
        "description",
        "brand",
        "tags",
        "variants.name",
        "variants.variantValue",
        "variants.sku",
        "legacyVariants.value",
        "modelValues",
        "customVariantValues",
        "colorValues",
        "sizes",
        "variants.color",
        "variants.size",
        "variants.model",
    ),
    "quick_text": (
        "title",
        "brand",
        "variants.name",
        "variants.variantValue",
        "tags",
        "colorValues",
        "sizes",
        "variants.color",
        "variants.size",
        "variants.model",
    ),
    "listing_text": (
        "title",
        "description",
        "brand",
        "sku",
        "variants.name",
        "legacyVariants.value",
    ),
    "sku": ("sku", "variants.sku"),
    "brand": ("brand",),
    "final_price": ("finalPrice", "variants.finalPrice"),
    "discount": ("discount", "variants.discount"),
    "color": (
        "color",
        "colorValues",
        "variants.variantValue",
        "variants.variantCombination.Color",
        "variants.color",
    ),
    "size": ("sizes", "variants.size", "variants.variantCombination.Size"),
    "model": (
        "modelValues",
        "variants.variantValue",
        "customVariantValues",
        "variants.model",
    ),
    "variant_type": ("variants.variantType", "legacyVariants.name"),
    "variant_value": ("variants.variantValue", "legacyVariants.value"),
    "stock": ("variants.stock",),
}

# Paths relative to a single unwound ``variants`` element, in fallback order.
VARIANT_FACET_PATHS: dict[str, tuple[str, ...]] = {
    "color": ("variantCombination.Color", "color"),
    "size": ("size", "variantCombination.Size"),
    "final_price": ("finalPrice",),
    "discount": ("discount",),
}


def paths_for(attribute: str) -> tuple[str, ...]:
    """Physical paths holding ``attribute``."""

    return FIELD_PATHS[attribute]
