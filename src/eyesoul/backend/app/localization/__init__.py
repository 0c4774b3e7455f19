"""Translation helpers for bilingual storefront content."""

from .content import has_translation, is_valid_translation, resolve, to_translation
from .locales import locale_from_request, normalise_locale, supported_locales

__all__ = [
    "has_translation",
    "is_valid_translation",
    "locale_from_request",
    "normalise_locale",
    "resolve",
    "supported_locales",
    "to_translation",
]
