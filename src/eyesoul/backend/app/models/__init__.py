"""Typed request and response models for the storefront client-state API."""

from .api import (
    CartSummaryQuery,
    FrameSize,
    NormaliseContentRequest,
    ProductSnapshot,
    ResolveContentRequest,
    UpdateCartItemRequest,
    Variation,
    validation_issues,
)

__all__ = [
    "CartSummaryQuery",
    "FrameSize",
    "NormaliseContentRequest",
    "ProductSnapshot",
    "ResolveContentRequest",
    "UpdateCartItemRequest",
    "Variation",
    "validation_issues",
]
