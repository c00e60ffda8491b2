"""Product domain models and API schemas."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Visibility = Literal["public", "private", "draft"]
VariantMode = Literal["single", "multi"]
ProductStatus = Literal["pending", "approved", "rejected"]

VISIBILITIES: tuple[str, ...] = ("public", "private", "draft")
VARIANT_MODES: tuple[str, ...] = ("single", "multi")
VIDEO_EXTENSIONS = (".mp4", ".mov", ".webm", ".mkv", ".avi", ".m4v")


class CatalogModel(BaseModel):
    """Base model persisted and served with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadedAsset(CatalogModel):
    """A media object already stored by the upload service for this request."""

    storage_path: str = Field(..., min_length=1, description="Key assigned by media storage")
    original_name: str = Field(..., description="Filename as sent by the client")
    size: int = Field(0, ge=0, description="Object size in bytes")
    content_type: str | None = None

    @property
    def is_video(self) -> bool:
        if self.content_type:
            return self.content_type.startswith("video/")
        return self.original_name.lower().endswith(VIDEO_EXTENSIONS)


class MediaRecord(CatalogModel):
    """Image or video reference stored on a product or a variant."""

    path: str
    relative_path: str = ""
    preview: str = ""
    name: str = ""
    size: int = 0


class LegacyVariant(CatalogModel):
    """Flat name/value view of a variant kept for older search paths."""

    name: str
    value: str


class ProductVariant(CatalogModel):
    """Canonical variant with numeric pricing and stock."""

    id: str
    name: str = ""
    variant_type: str = ""
    variant_value: str = ""
    size: str = ""
    mrp: float = 0
    discount: float = 0
    discounted_price: float = 0
    final_price: float = 0
    stock: int = 0
    sku: str = ""
    barcode: str = ""
    images: list[MediaRecord] = Field(default_factory=list)
    variant_combination: dict[str, str] = Field(default_factory=dict)


class Creator(CatalogModel):
    """Identity of the user who submitted the product."""

    id: str
    role: str = "seller"
    name: str = ""
    email: str = ""


class ProductRecord(CatalogModel):
    """Canonical catalog record as persisted in the document store."""

    id: str | None = None
    title: str
    subtitle: str = ""
    brand: str
    brand_id: str = ""
    prime_category: str = ""
    prime_category_id: str = ""
    category: str = ""
    category_id: str = ""
    subcategory: str = ""
    subcategory_id: str = ""
    description: str = ""
    sku: str = ""
    currency: str = ""
    weight: str = ""
    product_collection: str = ""
    tags: list[str] = Field(default_factory=list)
    visibility: Visibility = "public"
    variant_mode: VariantMode = "single"
    variant_types: list[Any] = Field(default_factory=list)
    color_values: list[Any] = Field(default_factory=list)
    sizes: list[Any] = Field(default_factory=list)
    size_matrix: dict[str, Any] = Field(default_factory=dict)
    model_values: list[Any] = Field(default_factory=list)
    custom_variant_values: list[Any] = Field(default_factory=list)
    variants: list[ProductVariant] = Field(default_factory=list)
    legacy_variants: list[LegacyVariant] = Field(default_factory=list)
    images: list[MediaRecord] = Field(default_factory=list)
    videos: list[MediaRecord] = Field(default_factory=list)
    hero_video: MediaRecord | None = None
    cover_image: str = ""
    price: float = 0
    discount: float = 0
    final_price: float = 0
    seo_slug: str
    status: ProductStatus = "pending"
    rejection_reason: str | None = None
    created_by: Creator
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_document(self) -> dict[str, Any]:
        """Return the store representation (camelCase keys, no identity)."""

        return self.model_dump(by_alias=True, exclude={"id"})


class ProductSubmission(BaseModel):
    """Body of a create or update call.

    The catalog form posts loosely typed fields (JSON strings for lists,
    numbers as text), so everything besides the uploaded assets is kept as
    raw values and normalized by the record builder.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    uploaded_assets: list[UploadedAsset] = Field(
        default_factory=list,
        alias="uploadedAssets",
        description="Media stored by the upload service in the same request",
    )

    def raw_fields(self) -> dict[str, Any]:
        """Return the submitted fields without the uploaded asset list."""

        return dict(self.model_extra or {})


class RejectRequest(BaseModel):
    """Payload for rejecting a pending product."""

    reason: str = Field(..., min_length=1, max_length=500)


class ProductPage(BaseModel):
    """One page of stored products with the total match count."""

    records: list[dict[str, Any]]
    total_count: int = Field(..., alias="totalCount")
    page: int
    limit: int

    model_config = ConfigDict(populate_by_name=True)
