"""Service-layer helpers for storefront client state."""

from .cart import CartExpiry, CartSummary, summarise_cart
from .collections import CollectionKind, CollectionStore, UnsupportedActionError
from .registry import ClientCollections, CollectionRegistry
from .storage import (
    InMemoryStorage,
    NamespacedStorage,
    SQLiteStorage,
    StorageResult,
    UnavailableStorage,
)

__all__ = [
    "CartExpiry",
    "CartSummary",
    "ClientCollections",
    "CollectionKind",
    "CollectionRegistry",
    "CollectionStore",
    "InMemoryStorage",
    "NamespacedStorage",
    "SQLiteStorage",
    "StorageResult",
    "UnavailableStorage",
    "UnsupportedActionError",
    "summarise_cart",
]
