# src/screener_api/infrastructure/caching/response_cache.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""In-process response cache.

Synopsis:
    Process-wide TTL store for computed responses, plus an adapter that
    exposes it through the application ``CachePort``.

Design:
    * An entry is valid iff ``now - stored_at < ttl`` (strict).
    * Expired entries are removed lazily on ``get`` and by ``sweep()``,
      which ``put`` triggers once the store holds more than ``max_entries``.
    * The clock is injectable (``time.monotonic`` by default).
    * No locks: handlers run on one event loop and a cache race only means
      the last writer wins.

Layer:
    infrastructure/caching
"""

from __future__ import annotations

import copy
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from screener_api.application.interfaces.cache_port import CachePort
from screener_api.infrastructure.observability.metrics import get_cache_requests_total

__all__ = [
    "CacheEntry",
    "InMemoryResponseCache",
    "ResponseCache",
    "make_cache_key",
]


def make_cache_key(namespace: str, *parts: object) -> str:
    """Join ``namespace`` and ``parts`` with ``:``, skipping empty parts."""
    segments = [str(namespace).strip(":")]
    segments.extend(str(p).strip(":") for p in parts if p is not None and str(p) != "")
    return ":".join(s for s in segments if s)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Stored value with its write time and TTL (seconds)."""

    value: Any
    stored_at: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return now - self.stored_at < self.ttl


class ResponseCache:
    """Keyed TTL store.

    Args:
        max_entries: Store size above which ``put`` sweeps expired entries.
        clock: Monotonic time source in seconds.
    """

    def __init__(self, *, max_entries: int = 1000, clock: Callable[[], float] = time.monotonic) -> None:
        self._max_entries = max_entries
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str) -> Any | None:
        """Return the value for ``key`` if present and not expired."""
        entry = self._store.get(key)
        if entry is None:
            return None
        if not entry.is_valid(self._clock()):
            self._store.pop(key, None)
            return None
        return entry.value

    def put(self, key: str, value: Any, ttl: float) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""
        self._store[key] = CacheEntry(value=value, stored_at=self._clock(), ttl=ttl)
        if len(self._store) > self._max_entries:
            self.sweep()

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    def sweep(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        expired = [k for k, e in self._store.items() if not e.is_valid(now)]
        for k in expired:
            del self._store[k]
        return len(expired)


class InMemoryResponseCache(CachePort):
    """``CachePort`` backed by a :class:`ResponseCache`.

    Stored mappings are deep-copied in and out so callers never share
    mutable state with the cache.
    """

    def __init__(self, store: ResponseCache | None = None, *, namespace: str = "memory") -> None:
        self._store = store if store is not None else ResponseCache()
        self._ns = namespace

    @property
    def store(self) -> ResponseCache:
        return self._store

    async def get_json(self, key: str) -> Mapping[str, Any] | None:
        value = self._store.get(make_cache_key(self._ns, key))
        get_cache_requests_total().labels(
            namespace=self._ns, outcome="miss" if value is None else "hit"
        ).inc()
        return None if value is None else copy.deepcopy(value)

    async def set_json(self, key: str, value: Mapping[str, Any], *, ttl: float) -> None:
        if ttl <= 0:
            return
        self._store.put(make_cache_key(self._ns, key), copy.deepcopy(dict(value)), ttl)
