"""Per-client collection stores shared by the HTTP layer."""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Lock
from typing import Callable

from eyesoul.backend.config.schema import StorefrontConfiguration

from .cart import CartExpiry
from .collections import CollectionKind, CollectionStore
from .debounce import TimerFactory
from .storage import KeyValueStorage, NamespacedStorage

logger = logging.getLogger(__name__)


@dataclass
class ClientCollections:
    """The cart, wishlist and compare stores belonging to one client."""

    client_id: str
    cart: CollectionStore
    wishlist: CollectionStore
    compare: CollectionStore
    cart_expiry: CartExpiry

    def get(self, kind: CollectionKind | str) -> CollectionStore:
        return getattr(self, CollectionKind(kind).value)

    def stores(self) -> tuple[CollectionStore, ...]:
        return (self.cart, self.wishlist, self.compare)

    def hydrate(self) -> None:
        for store in self.stores():
            store.hydrate()

    def flush(self) -> None:
        for store in self.stores():
            store.flush()

    def close(self) -> None:
        for store in self.stores():
            store.close()


class CollectionRegistry:
    """Create, hydrate and hand out client collections on first use.

    At most ``max_clients`` clients stay resident. The least recently used
    one is flushed to storage and released when a new client arrives, and
    hydrates again from storage on its next request.
    """

    def __init__(
        self,
        backend: KeyValueStorage,
        configuration: StorefrontConfiguration,
        *,
        persist_delay: float | None = None,
        timer_factory: TimerFactory | None = None,
        clock: Callable[[], datetime] | None = None,
        max_clients: int | None = None,
    ) -> None:
        if max_clients is None:
            max_clients = configuration.clients.max_clients
        if max_clients < 1:
            raise ValueError("max_clients must be at least 1")
        self._backend = backend
        self._configuration = configuration
        self._persist_delay = (
            configuration.persistence.debounce_seconds if persist_delay is None else persist_delay
        )
        self._timer_factory = timer_factory
        self._clock = clock
        self._max_clients = max_clients
        self._clients: OrderedDict[str, ClientCollections] = OrderedDict()
        self._lock = Lock()

    @property
    def configuration(self) -> StorefrontConfiguration:
        return self._configuration

    def _build(self, client_id: str) -> ClientCollections:
        storage = NamespacedStorage(self._backend, client_id)

        def store(kind: CollectionKind) -> CollectionStore:
            return CollectionStore(
                kind,
                storage,
                self._configuration.storage_key_for(kind.value),
                persist_delay=self._persist_delay,
                timer_factory=self._timer_factory,
            )

        expiry_config = self._configuration.cart_expiry
        collections = ClientCollections(
            client_id=client_id,
            cart=store(CollectionKind.CART),
            wishlist=store(CollectionKind.WISHLIST),
            compare=store(CollectionKind.COMPARE),
            cart_expiry=CartExpiry(
                storage,
                storage_key=expiry_config.storage_key,
                window=timedelta(minutes=expiry_config.window_minutes),
                clock=self._clock,
            ),
        )
        collections.hydrate()
        return collections

    def client(self, client_id: str) -> ClientCollections:
        with self._lock:
            collections = self._clients.get(client_id)
            if collections is not None:
                self._clients.move_to_end(client_id)
                return collections

            collections = self._build(client_id)
            self._clients[client_id] = collections
            logger.debug("Hydrated collections for client %s", client_id)
            while len(self._clients) > self._max_clients:
                # Evicted clients are written out before anyone can rehydrate them.
                _, oldest = self._clients.popitem(last=False)
                logger.debug("Releasing collections for client %s", oldest.client_id)
                oldest.flush()
                oldest.close()
            return collections

    @property
    def resident_clients(self) -> tuple[str, ...]:
        """Client ids currently held in memory, least recently used first."""

        with self._lock:
            return tuple(self._clients)

    def close(self, *, flush: bool = True) -> None:
        """Release every client, writing pending changes first unless ``flush`` is false."""

        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()

        for collections in clients:
            if flush:
                collections.flush()
            collections.close()


__all__ = ["ClientCollections", "CollectionRegistry"]
