# src/screener_api/infrastructure/caching/redis_client.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Async Redis client factory."""

from __future__ import annotations

from contextlib import suppress
from typing import Any, Protocol, cast, runtime_checkable

import redis.asyncio as aioredis

from screener_api.config.settings import Settings, get_settings

__all__ = [
    "RedisClient",
    "close_redis",
    "get_redis_client",
    "init_redis",
]


@runtime_checkable
class RedisClient(Protocol):
    """Minimal async Redis protocol used by the response cache."""

    async def ping(self) -> Any: ...
    async def close(self) -> None: ...

    async def get(self, key: str) -> Any: ...
    async def set(
        self,
        key: str,
        value: Any,
        *,
        ex: int | None = None,
        px: int | None = None,
        nx: bool | None = None,
        xx: bool | None = None,
    ) -> Any: ...
    async def delete(self, *keys: str) -> Any: ...


_client: RedisClient | None = None


def _create_aioredis_client(url: str) -> RedisClient:
    """Build the concrete asyncio Redis client from URL."""
    _from_url: Any = aioredis.from_url
    client = _from_url(
        url=url,
        encoding="utf-8",
        decode_responses=True,
        health_check_interval=15,
        socket_timeout=3.0,
        socket_connect_timeout=3.0,
    )
    return cast(RedisClient, client)


def init_redis(settings: Settings) -> None:
    """Initialize the global async Redis client (idempotent)."""
    global _client
    if _client is not None:
        return
    _client = _create_aioredis_client(settings.redis_url)


async def close_redis() -> None:
    """Close the global Redis client at shutdown."""
    global _client
    if _client is not None:
        with suppress(RuntimeError):
            await _client.close()
        _client = None


def get_redis_client() -> RedisClient:
    """Return the initialized Redis client (lazy-inits from settings)."""
    if _client is None:
        init_redis(get_settings())
    if _client is None:
        raise RuntimeError("Redis client not initialized (init_redis failed)")
    return _client
