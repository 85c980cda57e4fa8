# tests/unit/infrastructure/test_redis_json_cache.py
from __future__ import annotations

import json

import fakeredis.aioredis
import pytest

from screener_api.infrastructure.caching import redis_client as redis_client_module
from screener_api.infrastructure.caching.json_cache import RedisJsonCache


@pytest.mark.asyncio
async def test_redis_json_cache_key_shape_and_ttl(monkeypatch):
    """RedisJsonCache prefixes keys with its namespace and applies the TTL."""
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)

    cache = RedisJsonCache(namespace="screener:v1")
    tail = "statement:balance-sheet:NSE:TCS"
    payload = {"symbol": "NSE:TCS", "rows": [1, None]}

    await cache.set_json(tail, payload, ttl=900)

    full_key = f"screener:v1:{tail}"
    assert json.loads(await fake.get(full_key)) == payload
    ttl_ms = await fake.pttl(full_key)
    assert 0 < ttl_ms <= 900_000

    assert await cache.get_json(tail) == payload


@pytest.mark.asyncio
async def test_redis_json_cache_miss_and_non_object(monkeypatch):
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)
    cache = RedisJsonCache(namespace="screener:v1")

    assert await cache.get_json("absent") is None

    await fake.set("screener:v1:list", json.dumps([1, 2]))
    assert await cache.get_json("list") is None


@pytest.mark.asyncio
async def test_redis_json_cache_ignores_non_positive_ttl(monkeypatch):
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)
    cache = RedisJsonCache(namespace="screener:v1")

    await cache.set_json("k", {"v": 1}, ttl=0)
    assert await fake.get("screener:v1:k") is None
