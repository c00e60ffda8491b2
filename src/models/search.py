"""Models for faceted catalog search requests and responses."""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from src.config import settings

SortField = Literal["createdAt", "updatedAt", "title", "price", "discount", "finalPrice"]
SortOrder = Literal["asc", "desc"]
PriceBucket = Literal["under-100", "100-500", "500-1000", "1000-5000", "above-5000"]
DiscountType = Literal["percentage", "flat"]


def _as_datetime(value: date | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    return datetime.combine(value, time.min, tzinfo=UTC)


class SearchQuery(BaseModel):
    """Validated filter set for the faceted product search.

    Every filter is optional. Multi-value variants (``colors``, ``brands``
    and so on) are comma separated lists.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    query: str | None = Field(None, min_length=1, max_length=200)

    prime_category: str | None = Field(None, max_length=100)
    category: str | None = Field(None, max_length=100)
    subcategory: str | None = Field(None, max_length=100)
    prime_category_id: str | None = Field(None, pattern=r"^[0-9a-fA-F]{24}$")
    category_id: str | None = Field(None, pattern=r"^[0-9a-fA-F]{24}$")
    subcategory_id: str | None = Field(None, pattern=r"^[0-9a-fA-F]{24}$")

    min_price: float | None = Field(None, ge=0)
    max_price: float | None = Field(None, ge=0)
    price_range: PriceBucket | None = None

    min_discount: float | None = Field(None, ge=0, le=100)
    max_discount: float | None = Field(None, ge=0, le=100)
    discount_type: DiscountType | None = None
    discount_value: float | None = Field(None, ge=0)

    color: str | None = Field(None, max_length=50)
    size: str | None = Field(None, max_length=20)
    model: str | None = Field(None, max_length=100)
    variant_type: str | None = Field(None, max_length=50)
    variant_value: str | None = Field(None, max_length=100)

    brand: str | None = Field(None, max_length=100)
    brand_id: str | None = Field(None, max_length=100)
    sku: str | None = Field(None, max_length=100)

    in_stock: bool | None = None
    out_of_stock: bool | None = None

    tags: str | None = Field(None, max_length=500)
    weight: str | None = Field(None, max_length=50)
    product_collection: str | None = Field(None, max_length=100)

    sort_by: SortField = "createdAt"
    sort_order: SortOrder = "desc"
    page: int = Field(1, ge=1)
    limit: int = Field(default_factory=lambda: settings.SEARCH_DEFAULT_LIMIT, ge=1)

    visibility: Literal["public", "private", "draft"] | None = "public"
    status: Literal["pending", "approved", "rejected"] | None = "approved"

    date_from: datetime | date | None = None
    date_to: datetime | date | None = None

    colors: str | None = Field(None, max_length=500)
    sizes: str | None = Field(None, max_length=200)
    models: str | None = Field(None, max_length=500)
    brands: str | None = Field(None, max_length=500)
    prime_categories: str | None = Field(None, max_length=500)
    categories: str | None = Field(None, max_length=500)
    subcategories: str | None = Field(None, max_length=500)

    @field_validator("date_from", "date_to", mode="after")
    @classmethod
    def _normalize_dates(cls, value: date | datetime | None) -> datetime | None:
        return _as_datetime(value)

    @field_validator("limit")
    @classmethod
    def _cap_limit(cls, value: int) -> int:
        if value > settings.SEARCH_MAX_LIMIT:
            raise ValueError(f"Limit cannot exceed {settings.SEARCH_MAX_LIMIT}")
        return value

    @model_validator(mode="after")
    def _check_ranges(self) -> SearchQuery:
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("Minimum price cannot be greater than maximum price")
        if (
            self.min_discount is not None
            and self.max_discount is not None
            and self.min_discount > self.max_discount
        ):
            raise ValueError("Minimum discount cannot be greater than maximum discount")
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("Date to must be after date from")
        return self

    def applied_filters(self) -> dict[str, Any]:
        """Echo of the filters the caller supplied, keyed by query name."""

        return self.model_dump(
            by_alias=True,
            exclude_none=True,
            exclude_defaults=True,
            mode="json",
        )


class ProductListQuery(BaseModel):
    """Filters for the back-office product listing.

    Unlike :class:`SearchQuery` there is no status or visibility gate.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    search: str | None = Field(None, min_length=1, max_length=200)
    prime_category: str | None = Field(None, max_length=100)
    category: str | None = Field(None, max_length=100)
    subcategory: str | None = Field(None, max_length=100)
    min_price: float | None = Field(None, ge=0)
    max_price: float | None = Field(None, ge=0)

    sort_by: SortField = "createdAt"
    sort_order: SortOrder = "desc"
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)

    @model_validator(mode="after")
    def _check_prices(self) -> ProductListQuery:
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("Minimum price cannot be greater than maximum price")
        return self


class QuickSearchQuery(BaseModel):
    """Query string for the type-ahead search."""

    query: str = Field(..., min_length=2, max_length=100)
    limit: int = Field(default_factory=lambda: settings.QUICK_SEARCH_DEFAULT_LIMIT, ge=1, le=50)

    model_config = ConfigDict(str_strip_whitespace=True)


class SkuSearchQuery(BaseModel):
    """Query string for the SKU lookup."""

    sku: str = Field(..., min_length=1, max_length=100)
    exact: bool = False

    model_config = ConfigDict(str_strip_whitespace=True)


class AnalyticsQuery(BaseModel):
    """Optional creation-date window for catalog analytics."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    date_from: datetime | date | None = None
    date_to: datetime | date | None = None

    @field_validator("date_from", "date_to", mode="after")
    @classmethod
    def _normalize_dates(cls, value: date | datetime | None) -> datetime | None:
        return _as_datetime(value)

    @model_validator(mode="after")
    def _check_order(self) -> AnalyticsQuery:
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("Date to must be after date from")
        return self


class ValueCount(BaseModel):
    name: Any
    count: int


class CategoryCount(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    prime_category: str | None = None
    category: str | None = None
    count: int


class RangeStats(BaseModel):
    min: float = 0
    max: float = 0


class FacetSummary(BaseModel):
    """Refine-by-attribute breakdown over a filtered result set."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    brands: list[ValueCount] = Field(default_factory=list)
    categories: list[CategoryCount] = Field(default_factory=list)
    colors: list[ValueCount] = Field(default_factory=list)
    sizes: list[ValueCount] = Field(default_factory=list)
    price_range: RangeStats = Field(default_factory=RangeStats)
    discount_range: RangeStats = Field(default_factory=RangeStats)


class PageInfo(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_page: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool
    limit: int


class SearchResult(BaseModel):
    """Response body for the faceted search."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    records: list[dict[str, Any]]
    total_count: int
    page_info: PageInfo
    facets: FacetSummary
    applied_filters: dict[str, Any] = Field(default_factory=dict)


class QuickSuggestion(BaseModel):
    id: str
    title: str
    brand: str | None = None
    category: str
    price: float | None = None
    image: str | None = None
    variants: list[dict[str, Any]] = Field(default_factory=list)


class CatalogAnalytics(BaseModel):
    """Aggregate figures over approved, public products."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_products: int = 0
    total_variants: int = 0
    avg_price: float = 0
    min_price: float = 0
    max_price: float = 0
    unique_brands: int = 0
    unique_categories: int = 0
