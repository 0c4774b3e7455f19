"""Cart reservation window and order summary helpers."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable

from eyesoul.backend.config.schema import ShippingConfig

from .storage import KeyValueStorage, safe_storage_get, safe_storage_set

CART_EXPIRY_KEY = "eyesoul_cart_expires_at"
CART_EXPIRY_WINDOW = timedelta(minutes=15)

_CENTS = Decimal("0.01")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_deadline(raw: str) -> datetime | None:
    """Return the deadline stored as epoch milliseconds, or ``None`` if unusable."""

    try:
        millis = float(raw)
    except ValueError:
        return None
    if not math.isfinite(millis):
        return None
    try:
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


class CartExpiry:
    """Track when the reserved cart contents expire.

    The deadline is stored as epoch milliseconds so browser and server agree
    on the format.
    """

    def __init__(
        self,
        storage: KeyValueStorage | None,
        *,
        storage_key: str = CART_EXPIRY_KEY,
        window: timedelta = CART_EXPIRY_WINDOW,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if window <= timedelta(0):
            raise ValueError("window must be positive")
        self._storage = storage
        self._key = storage_key
        self._window = window
        self._clock = clock or _utcnow
        self._fallback: datetime | None = None

    def _store(self, deadline: datetime) -> datetime:
        millis = int(deadline.timestamp() * 1000)
        if not safe_storage_set(self._storage, self._key, str(millis)).ok:
            self._fallback = deadline
        return deadline

    def expires_at(self) -> datetime:
        """Return the current deadline, starting a new window when none is valid."""

        now = self._clock()
        raw = safe_storage_get(self._storage, self._key)
        if raw.ok:
            stored = _parse_deadline(raw.value)
            if stored is not None and stored > now:
                return stored
        elif self._fallback is not None and self._fallback > now:
            return self._fallback

        return self._store(now + self._window)

    def reset(self) -> datetime:
        return self._store(self._clock() + self._window)

    def time_left(self) -> timedelta:
        remaining = self.expires_at() - self._clock()
        return max(remaining, timedelta(0))


@dataclass(frozen=True)
class CartSummary:
    subtotal: float
    discount: float
    shipping: float
    shipping_option: str
    total: float
    free_shipping_eligible: bool
    amount_to_free_shipping: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "subtotal": self.subtotal,
            "discount": self.discount,
            "shipping": self.shipping,
            "shipping_option": self.shipping_option,
            "total": self.total,
            "free_shipping_eligible": self.free_shipping_eligible,
            "amount_to_free_shipping": self.amount_to_free_shipping,
        }


def _money(value: Decimal) -> float:
    return float(value.quantize(_CENTS, rounding=ROUND_HALF_UP))


def _line_total(item: Mapping[str, Any]) -> Decimal:
    price = item.get("price", 0)
    quantity = item.get("quantity", 1)
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return Decimal(0)
    if not math.isfinite(price):
        return Decimal(0)
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        quantity = 1
    elif not math.isfinite(quantity):
        quantity = 1
    return Decimal(str(price)) * Decimal(str(quantity))


def summarise_cart(
    items: Iterable[Mapping[str, Any]],
    shipping: ShippingConfig,
    *,
    option: str | None = None,
    discount_percent: float = 0,
) -> CartSummary:
    """Compute cart totals the way the cart page presents them."""

    if discount_percent < 0 or discount_percent > 100:
        raise ValueError("discount_percent must be between 0 and 100")

    line_items = list(items)
    subtotal = sum((_line_total(item) for item in line_items), Decimal(0))
    threshold = Decimal(str(shipping.free_threshold))
    eligible = bool(line_items) and subtotal >= threshold

    selected = option or shipping.default_option
    if selected not in shipping.options:
        raise ValueError(f"Unknown shipping option '{selected}'")
    if selected == "free" and not eligible:
        selected = shipping.default_option if shipping.default_option != "free" else "local"
    shipping_cost = Decimal(str(shipping.options.get(selected, 0)))
    if not line_items:
        shipping_cost = Decimal(0)

    discount = (subtotal * Decimal(str(discount_percent)) / 100).quantize(
        _CENTS, rounding=ROUND_HALF_UP
    )

    return CartSummary(
        subtotal=_money(subtotal),
        discount=_money(discount),
        shipping=_money(shipping_cost),
        shipping_option=selected,
        total=_money(subtotal - discount + shipping_cost),
        free_shipping_eligible=eligible,
        amount_to_free_shipping=_money(max(threshold - subtotal, Decimal(0))),
    )


__all__ = [
    "CART_EXPIRY_KEY",
    "CART_EXPIRY_WINDOW",
    "CartExpiry",
    "CartSummary",
    "summarise_cart",
]
