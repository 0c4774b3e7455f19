"""Persisted cart, wishlist and compare collections.

State transitions are pure (:func:`reduce_collection`); the
:class:`CollectionStore` applies them in dispatch order and mirrors the
resulting items into key-value storage through a debounced write.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from threading import Lock
from typing import Any, Callable, Union

from .debounce import Debouncer, TimerFactory
from .sanitize import sanitize_cart_items, sanitize_collection_items
from .storage import KeyValueStorage, read_persisted_array, write_persisted_array

logger = logging.getLogger(__name__)

DEFAULT_PERSIST_DELAY = 0.3


class CollectionKind(str, Enum):
    CART = "cart"
    WISHLIST = "wishlist"
    COMPARE = "compare"


class UnsupportedActionError(ValueError):
    """Raised when an action is dispatched to a collection that cannot apply it."""


@dataclass(frozen=True)
class AddItem:
    item: Mapping[str, Any]


@dataclass(frozen=True)
class RemoveItem:
    item_id: str


@dataclass(frozen=True)
class UpdateItem:
    item_id: str
    quantity: int
    selected_size: str
    selected_color: str


@dataclass(frozen=True)
class ClearItems:
    pass


@dataclass(frozen=True)
class LoadItems:
    items: tuple[Mapping[str, Any], ...]


CollectionAction = Union[AddItem, RemoveItem, UpdateItem, ClearItems, LoadItems]

SUPPORTED_ACTIONS: dict[CollectionKind, frozenset[type]] = {
    CollectionKind.CART: frozenset({AddItem, RemoveItem, UpdateItem, LoadItems}),
    CollectionKind.WISHLIST: frozenset({AddItem, RemoveItem, LoadItems}),
    CollectionKind.COMPARE: frozenset({AddItem, RemoveItem, ClearItems, LoadItems}),
}

SANITIZERS: dict[CollectionKind, Callable[[Any], list[dict[str, Any]]]] = {
    CollectionKind.CART: sanitize_cart_items,
    CollectionKind.WISHLIST: sanitize_collection_items,
    CollectionKind.COMPARE: sanitize_collection_items,
}


@dataclass(frozen=True)
class CollectionState:
    items: tuple[Mapping[str, Any], ...] = field(default_factory=tuple)

    def as_list(self) -> list[dict[str, Any]]:
        return [dict(item) for item in self.items]


def supports(kind: CollectionKind, action: CollectionAction | type) -> bool:
    action_type = action if isinstance(action, type) else type(action)
    return action_type in SUPPORTED_ACTIONS[CollectionKind(kind)]


def normalize_item(kind: CollectionKind, item: Mapping[str, Any]) -> dict[str, Any]:
    """Return the stored form of a product added to ``kind``."""

    if kind is CollectionKind.CART:
        return {**item, "quantity": 1, "selectedSize": "", "selectedColor": ""}
    return dict(item)


def reduce_collection(
    kind: CollectionKind,
    state: CollectionState,
    action: CollectionAction,
) -> CollectionState:
    """Apply ``action`` to ``state``; unsupported actions return ``state`` unchanged."""

    kind = CollectionKind(kind)
    if not supports(kind, action):
        return state

    if isinstance(action, AddItem):
        # Repeated adds of the same product become separate line items.
        return CollectionState(items=(*state.items, normalize_item(kind, action.item)))

    if isinstance(action, RemoveItem):
        return CollectionState(
            items=tuple(item for item in state.items if item.get("id") != action.item_id)
        )

    if isinstance(action, UpdateItem):
        return CollectionState(
            items=tuple(
                {
                    **item,
                    "quantity": action.quantity,
                    "selectedSize": action.selected_size,
                    "selectedColor": action.selected_color,
                }
                if item.get("id") == action.item_id
                else item
                for item in state.items
            )
        )

    if isinstance(action, ClearItems):
        return CollectionState()

    if isinstance(action, LoadItems):
        return CollectionState(items=tuple(dict(item) for item in action.items))

    return state


class CollectionStore:
    """In-memory collection mirrored to storage once hydrated."""

    def __init__(
        self,
        kind: CollectionKind | str,
        storage: KeyValueStorage | None,
        storage_key: str,
        *,
        persist_delay: float = DEFAULT_PERSIST_DELAY,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self.kind = CollectionKind(kind)
        self.storage_key = storage_key
        self._storage = storage
        self._state = CollectionState()
        self._hydrated = False
        self._lock = Lock()
        self._persist_lock = Lock()
        self._debouncer = Debouncer(
            self._persist,
            persist_delay,
            timer_factory=timer_factory,
        )

    @property
    def state(self) -> CollectionState:
        with self._lock:
            return self._state

    @property
    def items(self) -> list[dict[str, Any]]:
        return self.state.as_list()

    @property
    def hydrated(self) -> bool:
        return self._hydrated

    @property
    def persistence_pending(self) -> bool:
        return self._debouncer.pending

    def dispatch(self, action: CollectionAction) -> CollectionState:
        if not supports(self.kind, action):
            raise UnsupportedActionError(
                f"{type(action).__name__} is not supported by the {self.kind.value} collection"
            )

        with self._lock:
            previous = self._state
            self._state = reduce_collection(self.kind, previous, action)
            current = self._state
            should_persist = self._hydrated and current != previous

        if should_persist:
            self._debouncer.trigger()
        return current

    def add(self, item: Mapping[str, Any]) -> CollectionState:
        return self.dispatch(AddItem(item=item))

    def remove(self, item_id: str) -> CollectionState:
        return self.dispatch(RemoveItem(item_id=item_id))

    def update(
        self,
        item_id: str,
        quantity: int,
        selected_size: str,
        selected_color: str,
    ) -> CollectionState:
        return self.dispatch(
            UpdateItem(
                item_id=item_id,
                quantity=quantity,
                selected_size=selected_size,
                selected_color=selected_color,
            )
        )

    def clear(self) -> CollectionState:
        return self.dispatch(ClearItems())

    def load(self, items: Iterable[Mapping[str, Any]]) -> CollectionState:
        return self.dispatch(LoadItems(items=tuple(items)))

    def hydrate(self) -> bool:
        """Seed the store from storage once; return ``False`` if already hydrated.

        Nothing is written back before this runs, so an empty initial state
        never overwrites saved data.
        """

        if self._hydrated:
            return False

        items = read_persisted_array(self._storage, self.storage_key, SANITIZERS[self.kind])
        self.load(items)
        self._hydrated = True
        logger.debug("Hydrated %s with %d item(s)", self.kind.value, len(items))
        return True

    def _persist(self) -> None:
        with self._persist_lock:
            snapshot = self.items
            write_persisted_array(self._storage, self.storage_key, snapshot)

    def flush(self) -> bool:
        """Write a pending change immediately."""

        return self._debouncer.flush()

    def close(self) -> None:
        """Drop any pending write, as when the owning view goes away."""

        self._debouncer.cancel()


__all__ = [
    "AddItem",
    "ClearItems",
    "CollectionAction",
    "CollectionKind",
    "CollectionState",
    "CollectionStore",
    "LoadItems",
    "RemoveItem",
    "UnsupportedActionError",
    "UpdateItem",
    "normalize_item",
    "reduce_collection",
    "supports",
]
