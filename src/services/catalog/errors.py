"""Errors raised by catalog ingestion and moderation."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog failures surfaced to callers."""


class ValidationError(CatalogError):
    """Required submission fields are missing or malformed."""

    def __init__(self, fields: list[str], message: str | None = None) -> None:
        self.fields = list(fields)
        super().__init__(message or f"Missing required fields: {', '.join(self.fields)}")


class DuplicateSlug(CatalogError):
    """Another product already uses the requested SEO slug."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"A product with slug '{slug}' already exists")


class NotFound(CatalogError):
    """The product id does not resolve to a stored record."""

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class InvalidTransition(CatalogError):
    """Moderation was requested from a status that does not allow it."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot move product from '{current}' to '{target}'")


class PermissionDenied(CatalogError):
    """The acting user lacks the role required for the operation."""
