"""Storefront configuration loading and validation."""

from .schema import ConfigurationError, StorefrontConfiguration
from .storefront_config import load_configuration, persist_delay_seconds

__all__ = [
    "ConfigurationError",
    "StorefrontConfiguration",
    "load_configuration",
    "persist_delay_seconds",
]
