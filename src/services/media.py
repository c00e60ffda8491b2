"""Helpers turning stored media objects into catalog media records."""

from __future__ import annotations

from src.config import settings
from src.models.product import MediaRecord, UploadedAsset


def resolve_media_url(key: str | None) -> str:
    """Return a public URL for a storage key; absolute URLs pass through."""

    if not key:
        return ""
    if key.startswith(("http://", "https://")):
        return key
    base_url = settings.media_base_url
    if not base_url:
        return key
    return f"{base_url}/{key.lstrip('/')}"


def filename_of(path: str) -> str:
    """Trailing filename segment of a path, URL or client-side reference."""

    return path.replace("\\", "/").replace(":", "/").rstrip("/").rsplit("/", 1)[-1]


def media_record_from_asset(asset: UploadedAsset) -> MediaRecord:
    return MediaRecord(
        path=asset.storage_path,
        relative_path=asset.storage_path.lstrip("/"),
        preview=resolve_media_url(asset.storage_path),
        name=filename_of(asset.original_name),
        size=asset.size,
    )
