"""Tests for the cart reservation window and order summary."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from eyesoul.backend.app.services.cart import CART_EXPIRY_KEY, CartExpiry, summarise_cart
from eyesoul.backend.app.services.storage import InMemoryStorage, UnavailableStorage
from eyesoul.backend.config import load_configuration


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.current = start

    def advance(self, delta: timedelta) -> None:
        self.current += delta

    def __call__(self) -> datetime:
        return self.current


START = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture()
def shipping():
    return load_configuration().shipping


def test_expiry_starts_a_window_and_persists_it() -> None:
    clock = FakeClock(START)
    storage = InMemoryStorage()
    expiry = CartExpiry(storage, clock=clock)

    deadline = expiry.expires_at()

    assert deadline == START + timedelta(minutes=15)
    assert storage.get_item(CART_EXPIRY_KEY) == str(int(deadline.timestamp() * 1000))

    clock.advance(timedelta(minutes=5))
    assert expiry.expires_at() == deadline
    assert expiry.time_left() == timedelta(minutes=10)


def test_expired_or_invalid_deadlines_are_replaced() -> None:
    clock = FakeClock(START)
    storage = InMemoryStorage({CART_EXPIRY_KEY: "garbage"})
    expiry = CartExpiry(storage, clock=clock)

    assert expiry.expires_at() == START + timedelta(minutes=15)

    clock.advance(timedelta(minutes=16))
    assert expiry.expires_at() == clock.current + timedelta(minutes=15)


@pytest.mark.parametrize("stored", ["1e300", "-1e300", "inf", "nan"])
def test_out_of_range_deadlines_are_replaced(stored: str) -> None:
    clock = FakeClock(START)
    storage = InMemoryStorage({CART_EXPIRY_KEY: stored})
    expiry = CartExpiry(storage, clock=clock)

    assert expiry.expires_at() == START + timedelta(minutes=15)
    assert expiry.time_left() == timedelta(minutes=15)


def test_reset_starts_a_new_window() -> None:
    clock = FakeClock(START)
    expiry = CartExpiry(InMemoryStorage(), clock=clock)
    expiry.expires_at()

    clock.advance(timedelta(minutes=14))
    assert expiry.reset() == clock.current + timedelta(minutes=15)
    assert expiry.time_left() == timedelta(minutes=15)


def test_expiry_works_without_storage() -> None:
    clock = FakeClock(START)
    expiry = CartExpiry(UnavailableStorage(), clock=clock)

    first = expiry.expires_at()
    clock.advance(timedelta(minutes=1))

    assert expiry.expires_at() == first
    assert expiry.time_left() == timedelta(minutes=14)


def test_expiry_rejects_non_positive_window() -> None:
    with pytest.raises(ValueError):
        CartExpiry(InMemoryStorage(), window=timedelta(0))


def test_summary_totals_lines_and_applies_discount(shipping) -> None:
    items = [
        {"id": "p-1", "price": 60, "quantity": 2},
        {"id": "p-2", "price": 19.99, "quantity": 1},
    ]

    summary = summarise_cart(items, shipping, discount_percent=10)

    assert summary.subtotal == 139.99
    assert summary.discount == 14.0
    assert summary.shipping == 30
    assert summary.shipping_option == "local"
    assert summary.total == 155.99
    assert summary.free_shipping_eligible is False
    assert summary.amount_to_free_shipping == 10.01


def test_free_shipping_requires_the_threshold(shipping) -> None:
    below = summarise_cart([{"id": "p-1", "price": 100, "quantity": 1}], shipping, option="free")
    above = summarise_cart([{"id": "p-1", "price": 75, "quantity": 2}], shipping, option="free")

    assert below.shipping_option == "local"
    assert below.shipping == 30
    assert above.shipping_option == "free"
    assert above.shipping == 0
    assert above.total == 150
    assert above.amount_to_free_shipping == 0


def test_empty_cart_ships_for_free(shipping) -> None:
    summary = summarise_cart([], shipping, option="flat_rate")

    assert summary.total == 0
    assert summary.shipping == 0
    assert summary.free_shipping_eligible is False


def test_summary_rejects_invalid_inputs(shipping) -> None:
    with pytest.raises(ValueError):
        summarise_cart([], shipping, option="teleport")
    with pytest.raises(ValueError):
        summarise_cart([], shipping, discount_percent=120)
