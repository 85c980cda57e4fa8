# src/screener_api/infrastructure/caching/json_cache.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""JSON Cache (Redis-backed).

Synopsis:
    Implements the application ``CachePort`` on the shared Redis client so
    that several API workers share one response cache.

Design:
    * Uses the global Redis client via ``get_redis_client()``.
    * Pure JSON (utf-8) serialization; no pickle.
    * Key policy: the namespace (``screener:v1`` by default) prefixes the
      tail built by use cases, e.g. ``screener:v1:pe:NSE:RELIANCE:1Y``.
    * TTLs are applied with ``SET ... PX`` so fractional seconds survive.

Layer:
    infrastructure/caching
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from screener_api.application.interfaces.cache_port import CachePort
from screener_api.infrastructure.caching.redis_client import get_redis_client
from screener_api.infrastructure.caching.response_cache import make_cache_key
from screener_api.infrastructure.observability.metrics import get_cache_requests_total

__all__ = ["RedisJsonCache"]


class RedisJsonCache(CachePort):
    """Redis-backed implementation of the ``CachePort`` Protocol."""

    def __init__(self, *, namespace: str = "screener:v1") -> None:
        self._ns = namespace

    def _k(self, key: str) -> str:
        return make_cache_key(self._ns, key)

    async def get_json(self, key: str) -> Mapping[str, Any] | None:
        """Return the decoded mapping for ``key``, or ``None`` on a miss."""
        raw = await get_redis_client().get(self._k(key))
        get_cache_requests_total().labels(
            namespace=self._ns, outcome="miss" if raw is None else "hit"
        ).inc()
        if raw is None:
            return None
        decoded = json.loads(raw)
        return decoded if isinstance(decoded, dict) else None

    async def set_json(self, key: str, value: Mapping[str, Any], *, ttl: float) -> None:
        """Store ``value`` for ``ttl`` seconds; non-positive TTLs are ignored."""
        if ttl <= 0:
            return
        await get_redis_client().set(
            self._k(key),
            json.dumps(value, separators=(",", ":")),
            px=max(1, int(ttl * 1000)),
        )
