"""Normalization of submitted variant lists into canonical variants."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from collections.abc import Set as AbstractSet
from typing import Any

from src.models.product import LegacyVariant, MediaRecord, ProductVariant, UploadedAsset
from src.services.catalog.coercion import (
    clean_text,
    coerce_list,
    coerce_map,
    first_text,
    to_amount,
    to_stock,
)
from src.services.media import filename_of, media_record_from_asset, resolve_media_url

logger = logging.getLogger(__name__)

COMBINATION_AXES = ("Color", "Size")

_CLIENT_SCHEMES = ("blob:", "file:", "data:")
_SERVER_SCHEMES = ("http://", "https://")


def is_placeholder(path: str, uploaded_paths: set[str]) -> bool:
    """True when ``path`` is a client-side reference rather than a stored object."""

    if not path:
        return False
    if path.startswith(_CLIENT_SCHEMES):
        return True
    if path.startswith(_SERVER_SCHEMES):
        return False
    return path not in uploaded_paths


def _as_media_record(reference: Any) -> MediaRecord | None:
    if isinstance(reference, str):
        path = reference.strip()
        if not path:
            return None
        return MediaRecord(
            path=path,
            relative_path=path,
            preview=resolve_media_url(path),
            name=filename_of(path),
        )
    if isinstance(reference, dict):
        path = first_text(reference, "path", "url", "preview", "relativePath")
        if not path:
            return None
        return MediaRecord(
            path=path,
            relative_path=clean_text(reference.get("relativePath"), path),
            preview=clean_text(reference.get("preview"), resolve_media_url(path)),
            name=clean_text(reference.get("name"), filename_of(path)),
            size=to_stock(reference.get("size")),
        )
    return None


def reconcile_images(
    references: Any,
    assets: Sequence[UploadedAsset],
    stored_paths: AbstractSet[str] = frozenset(),
) -> list[MediaRecord]:
    """Swap placeholder image references for the assets uploaded alongside them.

    A placeholder is matched on its trailing filename against the original
    filenames of ``assets``. References in ``stored_paths`` already point at
    stored objects and are never replaced. Unmatched references are kept
    unchanged.
    """

    by_name = {filename_of(asset.original_name): asset for asset in assets}
    uploaded_paths = {asset.storage_path for asset in assets} | set(stored_paths)

    images: list[MediaRecord] = []
    for reference in coerce_list(references, "variant.images"):
        record = _as_media_record(reference)
        if record is None:
            continue
        if is_placeholder(record.path, uploaded_paths):
            asset = by_name.get(filename_of(record.path)) or by_name.get(record.name)
            if asset is not None:
                record = media_record_from_asset(asset)
            else:
                logger.debug("No uploaded asset matches image reference %s", record.path)
        images.append(record)
    return images


def _combination(raw: Any) -> dict[str, str]:
    combination: dict[str, str] = {}
    for key, value in coerce_map(raw, "variantCombination").items():
        axis = str(key).strip().capitalize()
        text = clean_text(value)
        if axis in COMBINATION_AXES and text:
            combination[axis] = text
    return combination


def normalize_variant(raw: dict[str, Any], assets: Sequence[UploadedAsset]) -> ProductVariant:
    """Project one raw variant descriptor onto :class:`ProductVariant`."""

    combination = _combination(raw.get("variantCombination"))
    variant_type = clean_text(raw.get("variantType"))
    variant_value = clean_text(raw.get("variantValue"))
    axis = variant_type.capitalize()
    if axis in COMBINATION_AXES and variant_value:
        combination.setdefault(axis, variant_value)

    mrp = to_amount(raw.get("mrp", raw.get("price")))
    discount = to_amount(raw.get("discount"))
    final_price = to_amount(raw.get("finalPrice", raw.get("discountedPrice")))
    discounted_price = to_amount(raw.get("discountedPrice"), final_price)

    if mrp > 0 and final_price > mrp:
        logger.warning(
            "Variant %s final price %s exceeds mrp %s; clamping to mrp",
            raw.get("id") or raw.get("sku") or "<new>",
            final_price,
            mrp,
        )
        final_price = mrp

    return ProductVariant(
        id=first_text(raw, "id", "_id", "variantId") or uuid.uuid4().hex,
        name=first_text(raw, "name", "label", "title"),
        variant_type=variant_type,
        variant_value=variant_value,
        size=clean_text(raw.get("size"), combination.get("Size", "")),
        mrp=mrp,
        discount=discount,
        discounted_price=discounted_price,
        final_price=final_price,
        stock=to_stock(raw.get("stock")),
        sku=clean_text(raw.get("sku")),
        barcode=clean_text(raw.get("barcode")),
        images=reconcile_images(raw.get("images"), assets),
        variant_combination=combination,
    )


def legacy_projection(variants: Sequence[ProductVariant]) -> list[LegacyVariant]:
    """One ``{name, value}`` pair per variant for older search paths."""

    return [
        LegacyVariant(
            name=variant.variant_type or "Variant",
            value=variant.variant_value or variant.name,
        )
        for variant in variants
    ]


def normalize_variants(
    raw_variants: Any,
    assets: Sequence[UploadedAsset] = (),
) -> tuple[list[ProductVariant], list[LegacyVariant]]:
    """Decode and normalize a submitted variant list.

    Elements that are not objects or fail to normalize are skipped and
    logged; the remaining variants are kept.
    """

    variants: list[ProductVariant] = []
    for index, raw in enumerate(coerce_list(raw_variants, "variants")):
        if not isinstance(raw, dict):
            logger.warning("Skipping variant #%d: expected an object, got %s", index, type(raw).__name__)
            continue
        try:
            variants.append(normalize_variant(raw, assets))
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping malformed variant #%d: %s", index, exc)

    return variants, legacy_projection(variants)
