"""Locale negotiation for storefront requests."""

from __future__ import annotations

from flask import Request

from eyesoul.backend.config import load_configuration


def supported_locales() -> tuple[str, ...]:
    """Return the locale codes offered by the storefront."""

    return load_configuration().locales.supported


def default_locale() -> str:
    return load_configuration().locales.default


def normalise_locale(locale: str | None) -> str:
    """Normalise requested locale to a supported locale code."""

    if not locale or not locale.strip():
        return default_locale()

    normalized = locale.strip().lower().replace("_", "-").split("-")[0]
    return normalized if normalized in supported_locales() else default_locale()


def locale_from_request(req: Request, explicit: str | None = None) -> str:
    """Pick the locale for ``req`` from an explicit value, query string or headers."""

    if isinstance(explicit, str) and explicit.strip():
        return normalise_locale(explicit)

    locale_param = req.args.get("locale")
    if locale_param:
        return normalise_locale(locale_param)

    accept_language = req.headers.get("Accept-Language")
    if accept_language:
        primary = accept_language.split(",")[0].split(";")[0].strip()
        if primary:
            return normalise_locale(primary)

    return default_locale()


__all__ = [
    "default_locale",
    "locale_from_request",
    "normalise_locale",
    "supported_locales",
]
