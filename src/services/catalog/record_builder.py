"""Assembly of canonical product records from raw submissions."""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Mapping, Sequence
from collections.abc import Set as AbstractSet
from datetime import UTC, datetime
from typing import Any

from src.config import settings
from src.models.product import (
    VARIANT_MODES,
    VISIBILITIES,
    Creator,
    MediaRecord,
    ProductRecord,
    UploadedAsset,
)
from src.services.catalog.coercion import (
    clean_text,
    coerce_list,
    coerce_map,
    coerce_tags,
    first_text,
)
from src.services.catalog.errors import ValidationError
from src.services.catalog.pricing import (
    ProductPricing,
    aggregate_variant_pricing,
    top_level_pricing,
)
from src.services.catalog.variants import normalize_variants, reconcile_images
from src.services.media import media_record_from_asset

logger = logging.getLogger(__name__)

# record field -> accepted submission keys, first match wins
SCALAR_FIELDS: dict[str, tuple[str, ...]] = {
    "title": ("title", "name", "productTitle"),
    "subtitle": ("subtitle",),
    "brand": ("brand", "brandName"),
    "brand_id": ("brandId",),
    "prime_category": ("primeCategory", "prime_category"),
    "prime_category_id": ("primeCategoryId",),
    "category": ("category", "categoryName"),
    "category_id": ("categoryId",),
    "subcategory": ("subcategory", "subCategory"),
    "subcategory_id": ("subcategoryId",),
    "description": ("description",),
    "sku": ("sku",),
    "currency": ("currency",),
    "weight": ("weight",),
    "product_collection": ("productCollection",),
}
REQUIRED_FIELDS = ("title", "brand")

LIST_FIELDS: dict[str, str] = {
    "variant_types": "variantTypes",
    "color_values": "colorValues",
    "sizes": "sizes",
    "model_values": "modelValues",
    "custom_variant_values": "customVariantValues",
}
MAP_FIELDS: dict[str, str] = {"size_matrix": "sizeMatrix"}

PRICING_KEYS = ("price", "mrp", "discount", "finalPrice")

_SLUG_INVALID = re.compile(r"[^a-z0-9\s-]")
_SLUG_SPACES = re.compile(r"\s+")
_SLUG_HYPHENS = re.compile(r"-+")


def slugify(text: str) -> str:
    """URL-safe slug: lower-case, ``[a-z0-9-]`` only, single hyphens, trimmed."""

    slug = _SLUG_INVALID.sub("", text.lower())
    slug = _SLUG_SPACES.sub("-", slug)
    slug = _SLUG_HYPHENS.sub("-", slug)
    return slug.strip("-")


def _slug_for(title: str, supplied: Any = None) -> str:
    slug = slugify(clean_text(supplied)) or slugify(title)
    return slug or f"product-{uuid.uuid4().hex[:8]}"


def initial_status(creator: Creator) -> str:
    """Products from privileged roles skip moderation."""

    return "approved" if creator.role.lower() in settings.privileged_roles else "pending"


def _present(raw: Mapping[str, Any], keys: Sequence[str]) -> bool:
    return any(key in raw for key in keys)


def _scalar_fields(raw: Mapping[str, Any], partial: bool) -> dict[str, str]:
    fields: dict[str, str] = {}
    for field, keys in SCALAR_FIELDS.items():
        if partial and not _present(raw, keys):
            continue
        fields[field] = first_text(raw, *keys)

    # a partial update may omit required fields but never blank them
    missing = [
        field
        for field in REQUIRED_FIELDS
        if (field in fields or not partial) and not fields.get(field)
    ]
    if missing:
        raise ValidationError(missing)
    return fields


def _collection_fields(raw: Mapping[str, Any], partial: bool) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    if not partial or "tags" in raw:
        fields["tags"] = coerce_tags(raw.get("tags"))
    for field, key in LIST_FIELDS.items():
        if not partial or key in raw:
            fields[field] = coerce_list(raw.get(key), key)
    for field, key in MAP_FIELDS.items():
        if not partial or key in raw:
            fields[field] = coerce_map(raw.get(key), key)
    return fields


def _choice(raw: Mapping[str, Any], key: str, allowed: Sequence[str], default: str) -> str:
    value = clean_text(raw.get(key)).lower()
    if not value:
        return default
    if value not in allowed:
        raise ValidationError([key], f"{key} must be one of: {', '.join(allowed)}")
    return value


def _split_assets(assets: Sequence[UploadedAsset]) -> tuple[list[UploadedAsset], list[UploadedAsset]]:
    images = [asset for asset in assets if not asset.is_video]
    videos = [asset for asset in assets if asset.is_video]
    return images, videos


def _merge_media(
    references: Any,
    uploads: Sequence[UploadedAsset],
    all_assets: Sequence[UploadedAsset],
    exclude: AbstractSet[str] = frozenset(),
    stored_paths: AbstractSet[str] = frozenset(),
) -> list[MediaRecord]:
    """Submitted references (placeholders resolved) followed by unreferenced uploads."""

    records = [
        record
        for record in reconcile_images(references, all_assets, stored_paths)
        if record.path not in exclude
    ]
    known = {record.path for record in records} | set(exclude)
    for asset in uploads:
        if asset.storage_path not in known:
            records.append(media_record_from_asset(asset))
            known.add(asset.storage_path)
    return records


def _hero_video(raw: Mapping[str, Any], assets: Sequence[UploadedAsset]) -> MediaRecord | None:
    reference = raw.get("heroVideo")
    if not reference:
        return None
    resolved = reconcile_images([reference], assets)
    return resolved[0] if resolved else None


def _pricing(
    variant_mode: str,
    variants: Sequence[Any],
    raw: Mapping[str, Any],
) -> ProductPricing:
    if variant_mode == "multi":
        return aggregate_variant_pricing(variants)
    return top_level_pricing(raw)


def build_product_record(
    raw: Mapping[str, Any],
    assets: Sequence[UploadedAsset],
    creator: Creator,
    now: datetime | None = None,
) -> ProductRecord:
    """Build a new :class:`ProductRecord` from a raw submission.

    Raises:
        ValidationError: title or brand is missing, or an enum field holds
            an unknown value.
    """

    now = now or datetime.now(UTC)
    scalars = _scalar_fields(raw, partial=False)
    variants, legacy_variants = normalize_variants(raw.get("variants"), assets)

    variant_mode = _choice(raw, "variantMode", VARIANT_MODES, "multi" if variants else "single")
    pricing = _pricing(variant_mode, variants, raw)

    image_assets, video_assets = _split_assets(assets)
    hero_video = _hero_video(raw, assets)
    hero_paths = {hero_video.path} if hero_video else set()
    images = _merge_media(raw.get("images"), image_assets, assets)
    videos = _merge_media(raw.get("videos"), video_assets, assets, exclude=hero_paths)

    record = ProductRecord(
        **scalars,
        **_collection_fields(raw, partial=False),
        visibility=_choice(raw, "visibility", VISIBILITIES, "public"),
        variant_mode=variant_mode,
        variants=variants,
        legacy_variants=legacy_variants,
        images=images,
        videos=videos,
        hero_video=hero_video,
        cover_image=images[0].path if images else "",
        price=pricing.price,
        discount=pricing.discount,
        final_price=pricing.final_price,
        seo_slug=_slug_for(scalars["title"], raw.get("seoSlug")),
        status=initial_status(creator),
        created_by=creator,
        created_at=now,
        updated_at=now,
    )
    logger.debug("Built product record %s with %d variants", record.seo_slug, len(variants))
    return record


def apply_update(
    existing: ProductRecord,
    raw: Mapping[str, Any],
    assets: Sequence[UploadedAsset] = (),
    now: datetime | None = None,
) -> ProductRecord:
    """Apply a partial update to ``existing`` and return the new record.

    Only submitted fields change. The slug is regenerated when the title
    changes and no slug is supplied; pricing is re-derived when variants or
    top-level prices are submitted. Creator attribution, status and the
    creation timestamp are never touched here.
    """

    now = now or datetime.now(UTC)
    changes: dict[str, Any] = {}
    changes.update(_scalar_fields(raw, partial=True))
    changes.update(_collection_fields(raw, partial=True))

    if "visibility" in raw:
        changes["visibility"] = _choice(raw, "visibility", VISIBILITIES, existing.visibility)
    title = changes.get("title", existing.title)
    if clean_text(raw.get("seoSlug")):
        changes["seo_slug"] = _slug_for(title, raw.get("seoSlug"))
    elif title != existing.title:
        changes["seo_slug"] = _slug_for(title)

    variants = existing.variants
    default_mode = existing.variant_mode
    if "variants" in raw:
        variants, legacy_variants = normalize_variants(raw.get("variants"), assets)
        changes["variants"] = variants
        changes["legacy_variants"] = legacy_variants
        default_mode = "multi" if variants else "single"

    variant_mode = _choice(raw, "variantMode", VARIANT_MODES, default_mode)
    changes["variant_mode"] = variant_mode

    if variant_mode == "multi" and "variants" in raw:
        changes.update(aggregate_variant_pricing(variants)._asdict())
    elif variant_mode == "single" and _present(raw, PRICING_KEYS):
        current = {"price": existing.price, "discount": existing.discount, "finalPrice": existing.final_price}
        changes.update(top_level_pricing({**current, **raw})._asdict())

    image_assets, video_assets = _split_assets(assets)
    if "images" in raw or image_assets:
        references = raw["images"] if "images" in raw else [image.model_dump(by_alias=True) for image in existing.images]
        images = _merge_media(
            references, image_assets, assets, stored_paths={image.path for image in existing.images}
        )
        changes["images"] = images
        changes["cover_image"] = images[0].path if images else ""

    if "heroVideo" in raw:
        changes["hero_video"] = _hero_video(raw, assets)
    hero = changes.get("hero_video", existing.hero_video)
    if "videos" in raw or video_assets:
        references = raw["videos"] if "videos" in raw else [video.model_dump(by_alias=True) for video in existing.videos]
        changes["videos"] = _merge_media(
            references,
            video_assets,
            assets,
            exclude={hero.path} if hero else set(),
            stored_paths={video.path for video in existing.videos},
        )

    changes["updated_at"] = now
    updated = existing.model_copy(update=changes)
    return ProductRecord.model_validate(updated.model_dump())
