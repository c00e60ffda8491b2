"""Coercion helpers for loosely typed catalog submissions.

Form submissions deliver lists and maps either as structures or as JSON
text, and numbers either as numbers or as strings. The helpers here turn
those values into canonical Python types and fall back to an empty default
instead of raising, so one malformed cosmetic field never rejects an
otherwise valid product.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

logger = logging.getLogger(__name__)

_CURRENCY_SYMBOLS = ("$", "€", "£", "₹")
_DECIMAL_COMMA = re.compile(r"^\d+,\d{1,2}$")


def _decode(value: str, field: str | None) -> Any:
    try:
        return json.loads(value)
    except (TypeError, ValueError, RecursionError):
        logger.warning("Ignoring malformed JSON for optional field %s", field or "<unnamed>")
        return None


def coerce_list(value: Any, field: str | None = None) -> list[Any]:
    """Return ``value`` as a list, decoding JSON text; empty list on failure."""

    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, (str, bytes)):
        if not value.strip():
            return []
        decoded = _decode(value, field)
        return decoded if isinstance(decoded, list) else []
    return []


def coerce_map(value: Any, field: str | None = None) -> dict[str, Any]:
    """Return ``value`` as a dict, decoding JSON text; empty dict on failure."""

    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    if isinstance(value, (str, bytes)):
        if not value.strip():
            return {}
        decoded = _decode(value, field)
        return decoded if isinstance(decoded, dict) else {}
    return {}


def to_number(value: Any) -> float | None:
    """Convert a number or numeric text to float.

    Handles currency symbols and thousands separators. A single comma
    followed by one or two digits (``12,5``) is read as a decimal comma.
    Returns None for anything that is not a finite number.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None

    cleaned = value.strip()
    for symbol in _CURRENCY_SYMBOLS:
        cleaned = cleaned.replace(symbol, "")
    cleaned = cleaned.strip()
    if _DECIMAL_COMMA.match(cleaned):
        cleaned = cleaned.replace(",", ".")
    cleaned = cleaned.replace(",", "")
    if not cleaned:
        return None

    try:
        number = float(cleaned)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def to_positive_number(value: Any) -> float | None:
    """Return the numeric value when it is strictly positive, else None."""

    number = to_number(value)
    if number is None or number <= 0:
        return None
    return number


def to_amount(value: Any, default: float = 0) -> float:
    """Numeric value rounded to cents, ``default`` when not numeric."""

    number = to_number(value)
    if number is None:
        return default
    return round(number, 2)


def to_stock(value: Any) -> int:
    """Stock quantity as a non-negative integer (0 when unknown)."""

    number = to_number(value)
    if number is None or number < 0:
        return 0
    return int(number)


def clean_text(value: Any, default: str = "") -> str:
    """Trimmed string form of ``value``, ``default`` when absent or blank."""

    if value is None:
        return default
    text = str(value).strip()
    return text or default


def first_text(raw: dict[str, Any], *keys: str) -> str:
    """Return the first non-blank text found under any of ``keys``."""

    for key in keys:
        text = clean_text(raw.get(key))
        if text:
            return text
    return ""


def split_csv(value: str | None) -> list[str]:
    """Split a comma separated list into trimmed, non-empty items."""

    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def coerce_tags(value: Any) -> list[str]:
    """Tags as a de-duplicated list of strings (empty on malformed input)."""

    tags: list[str] = []
    for item in coerce_list(value, "tags"):
        text = clean_text(item)
        if text and text not in tags:
            tags.append(text)
    return tags
