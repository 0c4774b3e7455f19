"""Pydantic models describing the public API surface."""

from __future__ import annotations

import math
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from typing_extensions import Self

from eyesoul.backend.app.localization.content import is_valid_translation

__all__ = [
    "FrameSize",
    "Variation",
    "ProductSnapshot",
    "UpdateCartItemRequest",
    "ResolveContentRequest",
    "NormaliseContentRequest",
    "CartSummaryQuery",
    "validation_issues",
]

TranslatableText = str | dict[str, Any]


def _check_translatable(value: Any) -> Any:
    if isinstance(value, dict) and not is_valid_translation(value):
        raise ValueError("translated text requires a string 'en' and an optional string 'id'")
    return value


def _has_non_finite(value: Any) -> bool:
    if isinstance(value, float):
        return not math.isfinite(value)
    if isinstance(value, dict):
        return any(_has_non_finite(item) for item in value.values())
    if isinstance(value, list):
        return any(_has_non_finite(item) for item in value)
    return False


class FrameSize(BaseModel):
    """Frame measurements in millimetres."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, allow_inf_nan=False)

    bridge_width: float | None = Field(default=None, alias="bridgeWidth", ge=0)
    temple_length: float | None = Field(default=None, alias="templeLength", ge=0)
    lens_width: float | None = Field(default=None, alias="lensWidth", ge=0)


class Variation(BaseModel):
    """Colour variation of a frame."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    color: str
    color_code: str = Field(default="", alias="colorCode")
    color_image: str = Field(default="", alias="colorImage")
    image: str = ""


class ProductSnapshot(BaseModel):
    """Product projection stored in the cart, wishlist and compare collections.

    Unknown fields are kept so the browser gets back exactly what it stored.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, allow_inf_nan=False)

    id: str = Field(..., min_length=1)
    name: TranslatableText = ""
    slug: str = ""
    category: str = ""
    type: str = ""
    brand: str = ""
    description: TranslatableText = ""
    price: float = Field(default=0, ge=0)
    origin_price: float = Field(default=0, ge=0, alias="originPrice")
    sizes: list[str] = Field(default_factory=list)
    variation: list[Variation] = Field(default_factory=list)
    thumb_image: list[str] = Field(default_factory=list, alias="thumbImage")
    images: list[str] = Field(default_factory=list)
    lens_type: str | None = Field(default=None, alias="lensType")
    frame_material: str | None = Field(default=None, alias="frameMaterial")
    frame_size: FrameSize | None = Field(default=None, alias="frameSize")
    lens_coating: list[str] | None = Field(default=None, alias="lensCoating")

    @field_validator("name", "description")
    @classmethod
    def _validate_translatable(cls, value: Any) -> Any:
        return _check_translatable(value)

    @model_validator(mode="after")
    def _reject_non_finite_extras(self) -> Self:
        extras = [self.model_extra or {}]
        extras.extend(variation.model_extra or {} for variation in self.variation)
        if _has_non_finite(extras):
            raise ValueError("numbers must be finite")
        return self

    def to_item(self) -> dict[str, Any]:
        """Return the JSON-ready mapping persisted for this product."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class UpdateCartItemRequest(BaseModel):
    """Mutable cart line fields."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    quantity: int = Field(..., ge=1, le=999)
    selected_size: str = Field(default="", alias="selectedSize")
    selected_color: str = Field(default="", alias="selectedColor")


class ResolveContentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: TranslatableText | None = None
    locale: str | None = None


class NormaliseContentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str | None = None
    existing: dict[str, Any] | None = None

    @field_validator("existing")
    @classmethod
    def _validate_existing(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        if value is not None and not is_valid_translation(value):
            raise ValueError("existing must be a translation object with a string 'en'")
        return value


class CartSummaryQuery(BaseModel):
    """Query string accepted by the cart summary endpoint."""

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    shipping: str | None = None
    discount_percent: float = Field(default=0, ge=0, le=100)


def validation_issues(error: ValidationError) -> list[dict[str, Any]]:
    """Return JSON-safe validation issues for API responses."""

    return [
        {
            "loc": [str(part) for part in issue.get("loc", ())],
            "msg": issue.get("msg", "Invalid value"),
            "type": issue.get("type", "value_error"),
        }
        for issue in error.errors()
    ]

