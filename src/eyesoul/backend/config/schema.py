"""Pydantic models describing the storefront configuration schema."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import Self


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class LocaleConfig(ImmutableModel):
    """Locales offered by the storefront UI."""

    default: str = "en"
    supported: tuple[str, ...] = ("en",)

    @field_validator("supported", mode="before")
    @classmethod
    def _normalise_codes(cls, value: Any) -> tuple[str, ...]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ConfigurationError("Supported locales must be a list of codes")
        return tuple(str(code).strip().lower() for code in value if str(code).strip())

    @model_validator(mode="after")
    def _validate_default(self) -> Self:
        if not self.supported:
            raise ConfigurationError("At least one supported locale is required")
        return self


class PersistenceConfig(ImmutableModel):
    """Timing for debounced storage writes."""

    debounce_ms: int = Field(default=300, ge=0)

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000


class CollectionConfig(ImmutableModel):
    """Storage settings for a single persisted collection."""

    storage_key: str = Field(..., min_length=1)


class ClientCacheConfig(ImmutableModel):
    """How many clients keep their collections resident in memory."""

    max_clients: int = Field(default=1000, ge=1)


class CartExpiryConfig(ImmutableModel):
    storage_key: str = Field(..., min_length=1)
    window_minutes: int = 15


class ShippingConfig(ImmutableModel):
    """Shipping options surfaced on the cart page."""

    free_threshold: float = 150
    default_option: str = "local"
    options: Mapping[str, float]

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_costs(cls, value: Any) -> Mapping[str, float]:
        if isinstance(value, Mapping):
            return {str(key): float(cost) for key, cost in value.items()}
        raise ConfigurationError("Shipping options must be a mapping of name to cost")

    @model_validator(mode="after")
    def _validate_options(self) -> Self:
        if self.default_option not in self.options:
            raise ConfigurationError(
                f"Default shipping option '{self.default_option}' is not configured"
            )
        for name, cost in self.options.items():
            if cost < 0:
                raise ConfigurationError(f"Shipping option '{name}' has a negative cost")
        return self


class StorefrontConfiguration(ImmutableModel):
    """Complete client-state configuration for the storefront."""

    locales: LocaleConfig = LocaleConfig()
    persistence: PersistenceConfig = PersistenceConfig()
    clients: ClientCacheConfig = ClientCacheConfig()
    collections: Mapping[str, CollectionConfig]
    cart_expiry: CartExpiryConfig
    shipping: ShippingConfig

    def storage_key_for(self, kind: str) -> str:
        try:
            return self.collections[kind].storage_key
        except KeyError as error:
            raise ConfigurationError(f"No collection configured for '{kind}'") from error


__all__ = [
    "CartExpiryConfig",
    "ClientCacheConfig",
    "CollectionConfig",
    "ConfigurationError",
    "ImmutableModel",
    "LocaleConfig",
    "PersistenceConfig",
    "ShippingConfig",
    "StorefrontConfiguration",
]
