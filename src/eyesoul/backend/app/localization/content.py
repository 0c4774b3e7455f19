"""Resolution helpers for bilingual database content.

Catalogue content is stored either as a plain string (records created before
the Indonesian translation rollout) or as a mapping with a mandatory English
value and an optional Indonesian one::

    "Sunglasses"
    {"en": "Sunglasses", "id": "Kacamata Hitam"}

Every helper here accepts both shapes and never raises; anything unexpected
degrades to an empty string or ``False``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypedDict, Union

TRANSLATED_LOCALE = "id"
BASE_LOCALE = "en"


class TranslationObject(TypedDict, total=False):
    en: str
    id: str


TranslationValue = Union[str, Mapping[str, Any], None]


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def resolve(content: TranslationValue, locale: str | None) -> str:
    """Return the display string for ``content`` in ``locale``.

    The Indonesian value is used only when it is non-blank; otherwise the
    English value is returned, or ``""`` when that is missing too.
    """

    if content is None:
        return ""

    if isinstance(content, str):
        return content

    if isinstance(content, Mapping):
        translated = content.get(TRANSLATED_LOCALE)
        if locale == TRANSLATED_LOCALE and not _is_blank(translated):
            return translated

        english = content.get(BASE_LOCALE)
        if isinstance(english, str) and english:
            return english
        return ""

    return ""


def has_translation(content: TranslationValue, locale: str | None) -> bool:
    """Return ``True`` when ``content`` carries a non-blank value for ``locale``."""

    if content is None:
        return False

    if isinstance(content, str):
        # Legacy strings are the English copy.
        return locale == BASE_LOCALE and bool(content.strip())

    if isinstance(content, Mapping):
        if locale == TRANSLATED_LOCALE:
            return not _is_blank(content.get(TRANSLATED_LOCALE))
        return not _is_blank(content.get(BASE_LOCALE))

    return False


def to_translation(
    text: str | None,
    existing: Mapping[str, Any] | None = None,
) -> TranslationObject:
    """Build the bilingual shape from ``text``, keeping any existing Indonesian copy."""

    translated = existing.get(TRANSLATED_LOCALE) if existing else None
    return {
        "en": text or "",
        "id": translated or "",
    }


def is_valid_translation(value: Any) -> bool:
    """Return ``True`` when ``value`` has the bilingual mapping shape."""

    if not isinstance(value, Mapping) or not value:
        return False

    if not isinstance(value.get(BASE_LOCALE), str):
        return False

    if TRANSLATED_LOCALE in value and not isinstance(value[TRANSLATED_LOCALE], str):
        return False

    return True


__all__ = [
    "BASE_LOCALE",
    "TRANSLATED_LOCALE",
    "TranslationObject",
    "TranslationValue",
    "has_translation",
    "is_valid_translation",
    "resolve",
    "to_translation",
]
