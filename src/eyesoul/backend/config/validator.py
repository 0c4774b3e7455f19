"""Utilities for validating storefront configuration and surfacing issues."""

from __future__ import annotations

import argparse
from collections import Counter
from pathlib import Path
from typing import Sequence

from .schema import ConfigurationError, StorefrontConfiguration
from .storefront_config import CONFIG_FILE, load_configuration

REQUIRED_COLLECTIONS = ("cart", "wishlist", "compare")


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_locales(config: StorefrontConfiguration) -> list[str]:
    errors: list[str] = []
    locales = config.locales

    if locales.default not in locales.supported:
        errors.append(
            _format_scope(
                "locales",
                f"default locale '{locales.default}' is not listed as supported",
            )
        )

    duplicates = [code for code, count in Counter(locales.supported).items() if count > 1]
    if duplicates:
        errors.append(
            _format_scope("locales", f"duplicate locale codes detected: {sorted(duplicates)}")
        )
    return errors


def _validate_collections(config: StorefrontConfiguration) -> list[str]:
    errors: list[str] = []

    missing = [kind for kind in REQUIRED_COLLECTIONS if kind not in config.collections]
    if missing:
        errors.append(_format_scope("collections", f"missing collections: {missing}"))

    keys = [entry.storage_key for entry in config.collections.values()]
    keys.append(config.cart_expiry.storage_key)
    duplicates = [key for key, count in Counter(keys).items() if count > 1]
    if duplicates:
        errors.append(
            _format_scope(
                "collections",
                f"storage keys must be unique, found duplicates: {sorted(duplicates)}",
            )
        )
    return errors


def _validate_cart(config: StorefrontConfiguration) -> list[str]:
    errors: list[str] = []
    if config.cart_expiry.window_minutes <= 0:
        errors.append(_format_scope("cart_expiry", "window_minutes must be positive"))
    if config.shipping.free_threshold < 0:
        errors.append(_format_scope("shipping", "free_threshold cannot be negative"))
    if "free" not in config.shipping.options:
        errors.append(_format_scope("shipping", "a 'free' shipping option is required"))
    return errors


def validate_storefront_configuration(config: StorefrontConfiguration) -> list[str]:
    """Return a list of human-readable issues found in ``config``."""

    return [
        *_validate_locales(config),
        *_validate_collections(config),
        *_validate_cart(config),
    ]


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate the storefront configuration file.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=CONFIG_FILE,
        help="Configuration file to validate (defaults to the bundled file)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    args = _build_argument_parser().parse_args(argv)

    try:
        config = load_configuration(args.path)
    except (FileNotFoundError, ConfigurationError) as error:
        print(f"[{args.path}] failed to load configuration: {error}")
        return 1

    issues = validate_storefront_configuration(config)
    if issues:
        print(f"[{args.path}] {len(issues)} issue(s) detected:")
        for issue in issues:
            print(f"  - {issue}")
        return 1

    print(f"[{args.path}] OK")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
