"""Configuration loader wrapping the storefront schema models."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .schema import ConfigurationError, StorefrontConfiguration

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
CONFIG_FILE = CONFIG_DIRECTORY / "storefront.yaml"

PERSIST_DELAY_ENV = "EYESOUL_PERSIST_DELAY_MS"

logger = logging.getLogger(__name__)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


def parse_configuration(raw: dict[str, Any]) -> StorefrontConfiguration:
    """Validate a raw mapping against the storefront schema."""

    try:
        return StorefrontConfiguration.model_validate(raw)
    except ValidationError as error:
        raise ConfigurationError(f"Storefront configuration is invalid: {error}") from error


@lru_cache(maxsize=4)
def load_configuration(path: Path = CONFIG_FILE) -> StorefrontConfiguration:
    """Load and cache the storefront configuration file."""

    if not path.exists():
        raise FileNotFoundError(f"Storefront configuration not found at {path}")

    return parse_configuration(_load_yaml(path))


def persist_delay_seconds(configuration: StorefrontConfiguration) -> float:
    """Return the debounce delay, honouring the environment override."""

    raw = os.getenv(PERSIST_DELAY_ENV)
    if raw is None or not raw.strip():
        return configuration.persistence.debounce_seconds

    try:
        parsed = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid value for %s: %s", PERSIST_DELAY_ENV, raw)
        return configuration.persistence.debounce_seconds
    if parsed < 0:
        logger.warning("Ignoring negative value for %s: %s", PERSIST_DELAY_ENV, raw)
        return configuration.persistence.debounce_seconds
    return parsed / 1000


__all__ = [
    "CONFIG_FILE",
    "PERSIST_DELAY_ENV",
    "load_configuration",
    "parse_configuration",
    "persist_delay_seconds",
]
