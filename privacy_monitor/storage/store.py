"""Persisted key-value state and serialized writes.

The host owns the actual storage; the monitor talks to it through
the small async :class:`StateStore` protocol.  Two implementations
are provided: an in-memory store and a JSON directory store with one
file per key.

Writes to a shared aggregate go through :class:`SerializedWriter`,
which holds one lock per key and builds the payload *inside* the
lock.  A write therefore always carries the latest in-memory state,
and concurrent writers to the same key cannot lose each other's
updates.
"""

from __future__ import annotations

import asyncio
import copy
import json
import pathlib
from collections.abc import Callable
from typing import Any, Protocol

from privacy_monitor.utils import errors, logger

log = logger.create_logger("StateStore")

GLOBAL_STATS_KEY = "globalStats"


class StateStore(Protocol):
    """Async key-value store holding JSON-compatible values."""

    async def get(self, key: str) -> Any | None:
        """Return the value under *key*, or ``None`` when absent."""
        ...

    async def set(self, key: str, value: Any) -> None:
        """Replace the value under *key*."""
        ...


class MemoryStore:
    """Dictionary-backed store.  Values are deep-copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def snapshot(self) -> dict[str, Any]:
        """Copy of everything stored, for inspection."""
        return copy.deepcopy(self._data)


class JsonFileStore:
    """One JSON file per key under a directory.

    Files are replaced atomically via a temporary sibling so that a
    crash mid-write leaves the previous value intact.
    """

    def __init__(self, directory: str | pathlib.Path) -> None:
        self._dir = pathlib.Path(directory)

    def _path(self, key: str) -> pathlib.Path:
        safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in key)[:100]
        return self._dir / f"{safe}.json"

    async def get(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise errors.StoreReadError(f"Cannot read {key}: {errors.get_error_message(exc)}") from exc

    async def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(value), encoding="utf-8")
            tmp.replace(path)
        except (OSError, TypeError, ValueError) as exc:
            raise errors.StoreWriteError(f"Cannot write {key}: {errors.get_error_message(exc)}") from exc


class SerializedWriter:
    """Per-key write serialization in front of a :class:`StateStore`.

    Failed writes are logged and dropped: losing one sample is
    acceptable, blocking ingestion is not.
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def write(self, key: str, build: Callable[[], Any]) -> bool:
        """Write ``build()`` under *key*; returns False if the write was dropped."""
        async with self._lock(key):
            try:
                await self._store.set(key, build())
            except (errors.StoreError, OSError) as exc:
                log.warn("State write dropped", {"key": key, "error": errors.get_error_message(exc)})
                return False
        return True

    async def read(self, key: str) -> Any | None:
        """Read *key* after any in-flight write to it; ``None`` on failure."""
        async with self._lock(key):
            try:
                return await self._store.get(key)
            except (errors.StoreError, OSError) as exc:
                log.warn("State read failed", {"key": key, "error": errors.get_error_message(exc)})
                return None
