"""Sanitisers applied to untrusted collection data read back from storage."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from numbers import Real
from typing import Any

CONTROL_CHARS = re.compile(r"[\u0000-\u001F\u007F]")
ANGLE_BRACKETS = re.compile(r"[<>]")


def _valid_id(item: Any) -> str | None:
    if not isinstance(item, Mapping) or "id" not in item:
        return None
    identifier = item["id"]
    if not isinstance(identifier, str) or not identifier:
        return None
    return identifier


def _coerce_quantity(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, Real):
        return 1
    number = float(value)
    if not math.isfinite(number):
        return 1
    return max(1, math.floor(number))


def sanitize_collection_items(value: Any) -> list[dict[str, Any]]:
    """Keep only mapping entries that carry a non-empty string ``id``."""

    if not isinstance(value, list):
        return []

    items: list[dict[str, Any]] = []
    for entry in value:
        identifier = _valid_id(entry)
        if identifier is None:
            continue
        items.append({**entry, "id": identifier})
    return items


def sanitize_cart_items(value: Any) -> list[dict[str, Any]]:
    """Sanitise cart entries and coerce their mutable fields."""

    items: list[dict[str, Any]] = []
    for entry in sanitize_collection_items(value):
        size = entry.get("selectedSize")
        color = entry.get("selectedColor")
        items.append(
            {
                **entry,
                "quantity": _coerce_quantity(entry.get("quantity")),
                "selectedSize": size if isinstance(size, str) else "",
                "selectedColor": color if isinstance(color, str) else "",
            }
        )
    return items


def sanitize_for_metadata(text: str, max_len: int = 80) -> str:
    """Strip markup-unsafe characters from ``text`` for page titles and meta tags."""

    cleaned = CONTROL_CHARS.sub("", text)
    cleaned = ANGLE_BRACKETS.sub("", cleaned)
    return cleaned.strip()[:max_len]


__all__ = [
    "sanitize_cart_items",
    "sanitize_collection_items",
    "sanitize_for_metadata",
]
