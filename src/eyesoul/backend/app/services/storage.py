"""Key-value storage backends and the failure-tolerant wrapper around them.

Persisted client collections must keep working when storage is missing,
disabled or full. The ``safe_*`` helpers therefore never raise: every
outcome is reported through a :class:`StorageResult`.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Generic, Protocol, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class StorageUnavailableError(RuntimeError):
    """Raised by backends that cannot be used in the current context."""


@dataclass(frozen=True)
class StorageResult(Generic[T]):
    """Tagged outcome of a storage or JSON operation."""

    ok: bool
    value: T | None = None
    error: BaseException | None = None

    @classmethod
    def success(cls, value: T) -> "StorageResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: BaseException | None = None) -> "StorageResult[T]":
        return cls(ok=False, value=None, error=error)


class KeyValueStorage(Protocol):
    """Minimal string key-value interface mirrored by every backend."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class InMemoryStorage:
    """Thread-safe process-local storage."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})
        self._lock = Lock()

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._values)


class SQLiteStorage:
    """SQLite-backed storage that survives process restarts."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = str(path)
        self._lock = Lock()
        self._initialise()

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._path, check_same_thread=False)
        connection.execute("PRAGMA journal_mode=WAL")
        connection.execute("PRAGMA synchronous=NORMAL")
        return connection

    def _initialise(self) -> None:
        with self._connect() as connection:
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    def get_item(self, key: str) -> str | None:
        with self._lock:
            with self._connect() as connection:
                row = connection.execute(
                    "SELECT value FROM storage WHERE key = ?",
                    (key,),
                ).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            with self._connect() as connection:
                connection.execute(
                    "INSERT INTO storage (key, value) VALUES (?, ?)"
                    " ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )

    def remove_item(self, key: str) -> None:
        with self._lock:
            with self._connect() as connection:
                connection.execute("DELETE FROM storage WHERE key = ?", (key,))


class UnavailableStorage:
    """Storage stand-in for contexts where no durable storage exists."""

    def __init__(self, reason: str = "Storage is not available") -> None:
        self._reason = reason

    def get_item(self, key: str) -> str | None:
        raise StorageUnavailableError(self._reason)

    def set_item(self, key: str, value: str) -> None:
        raise StorageUnavailableError(self._reason)

    def remove_item(self, key: str) -> None:
        raise StorageUnavailableError(self._reason)


class NamespacedStorage:
    """View on a shared backend that prefixes every key with a namespace."""

    def __init__(self, backend: KeyValueStorage, namespace: str) -> None:
        self._backend = backend
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get_item(self, key: str) -> str | None:
        return self._backend.get_item(self._key(key))

    def set_item(self, key: str, value: str) -> None:
        self._backend.set_item(self._key(key), value)

    def remove_item(self, key: str) -> None:
        self._backend.remove_item(self._key(key))


def safe_storage_get(storage: KeyValueStorage | None, key: str) -> StorageResult[str]:
    """Read ``key``; an absent key is a failure without an error."""

    if storage is None:
        return StorageResult.failure(StorageUnavailableError("No storage configured"))
    try:
        value = storage.get_item(key)
    except Exception as error:  # noqa: BLE001 - every backend failure degrades
        return StorageResult.failure(error)
    if value is None:
        return StorageResult.failure(None)
    return StorageResult.success(value)


def safe_storage_set(storage: KeyValueStorage | None, key: str, value: str) -> StorageResult[bool]:
    if storage is None:
        return StorageResult.failure(StorageUnavailableError("No storage configured"))
    try:
        storage.set_item(key, value)
    except Exception as error:  # noqa: BLE001 - quota, disabled storage, I/O
        return StorageResult.failure(error)
    return StorageResult.success(True)


def safe_storage_remove(storage: KeyValueStorage | None, key: str) -> StorageResult[bool]:
    if storage is None:
        return StorageResult.failure(StorageUnavailableError("No storage configured"))
    try:
        storage.remove_item(key)
    except Exception as error:  # noqa: BLE001
        return StorageResult.failure(error)
    return StorageResult.success(True)


def safe_json_parse(raw: str) -> StorageResult[Any]:
    """Parse ``raw`` as JSON without raising."""

    try:
        return StorageResult.success(json.loads(raw))
    except (TypeError, ValueError) as error:
        return StorageResult.failure(error)


def safe_json_stringify(value: Any) -> StorageResult[str]:
    """Serialise ``value`` as compact JSON without raising.

    Non-finite floats are rejected because browsers cannot read them back.
    """

    try:
        return StorageResult.success(
            json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
        )
    except (TypeError, ValueError, RecursionError) as error:
        return StorageResult.failure(error)


def read_persisted_array(
    storage: KeyValueStorage | None,
    key: str,
    sanitize: Callable[[Any], list[T]],
) -> list[T]:
    """Load and sanitise the array stored at ``key``, or ``[]`` on any failure."""

    raw = safe_storage_get(storage, key)
    if not raw.ok:
        if raw.error is not None:
            logger.debug("Unable to read %s from storage: %s", key, raw.error)
        return []

    parsed = safe_json_parse(raw.value)
    if not parsed.ok:
        logger.debug("Discarding malformed value stored at %s", key)
        return []

    return sanitize(parsed.value)


def write_persisted_array(storage: KeyValueStorage | None, key: str, value: Any) -> bool:
    """Persist ``value`` at ``key``; failures are logged and reported as ``False``."""

    encoded = safe_json_stringify(list(value))
    if not encoded.ok:
        logger.warning("Failed to serialise %s for storage: %s", key, encoded.error)
        return False

    result = safe_storage_set(storage, key, encoded.value)
    if not result.ok:
        logger.warning("Failed to persist %s to storage: %s", key, result.error)
        return False
    return True


__all__ = [
    "InMemoryStorage",
    "KeyValueStorage",
    "NamespacedStorage",
    "SQLiteStorage",
    "StorageResult",
    "StorageUnavailableError",
    "UnavailableStorage",
    "read_persisted_array",
    "safe_json_parse",
    "safe_json_stringify",
    "safe_storage_get",
    "safe_storage_remove",
    "safe_storage_set",
    "write_persisted_array",
]
