# src/screener_api/infrastructure/observability/metrics.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Prometheus metrics utilities (registry-aware, hot-reload safe).

Every collector is obtained through an accessor that binds it to the
**current** ``prometheus_client.REGISTRY``. Accessors are safe under hot
reload and under tests that swap the default registry; the internal cache
resets when the active registry changes.

Collectors:
    * ``screener_cascade_resolutions_total{resource, provenance}``
    * ``screener_cascade_tier_failures_total{resource, provenance, reason}``
    * ``screener_cache_requests_total{namespace, outcome}``
    * ``screener_upstream_request_seconds{vendor, endpoint, outcome}``

Example:
    get_cascade_resolutions_total().labels(resource="statement", provenance="live").inc()

    with observe_upstream_request(vendor="insightsentry", endpoint="fundamentals"):
        ...
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from typing import Final, cast

import prometheus_client as prom
from prometheus_client import Counter, Histogram

_log = logging.getLogger(__name__)

_BUCKETS: Final[tuple[float, ...]] = (
    0.010,
    0.025,
    0.050,
    0.100,
    0.250,
    0.500,
    1.000,
    2.500,
    5.000,
    10.000,
)

_registry_id: int | None = None
_cache: dict[str, Counter | Histogram] = {}
_lock = threading.RLock()


def _ensure_registry() -> None:
    """Reset the accessor cache if the active registry changed."""
    global _registry_id
    with _lock:
        rid = id(prom.REGISTRY)
        if _registry_id != rid:
            _cache.clear()
            _registry_id = rid


def _lookup_existing(name: str, kind: type[Counter] | type[Histogram]) -> Counter | Histogram | None:
    with _lock, suppress(Exception):
        mapping = getattr(prom.REGISTRY, "_names_to_collectors", None)
        if isinstance(mapping, dict):
            col = mapping.get(name)
            if isinstance(col, kind):
                return col
    return None


def _get_or_create(
    kind: type[Counter] | type[Histogram],
    name: str,
    help_text: str,
    labelnames: tuple[str, ...],
) -> Counter | Histogram:
    """Get or create a registry-bound collector with stable identity.

    Strategy:
        1. Return from the module cache for the active registry.
        2. Reuse a collector the registry already holds under ``name``.
        3. Register a new collector.
        4. On a concurrent duplicate registration, retry step 2.
    """
    _ensure_registry()
    with _lock:
        cached = _cache.get(name)
        if isinstance(cached, kind):
            return cached

        existing = _lookup_existing(name, kind)
        if existing is not None:
            _cache[name] = existing
            return existing

        try:
            if kind is Histogram:
                col: Counter | Histogram = Histogram(
                    name, help_text, labelnames, buckets=_BUCKETS, registry=prom.REGISTRY
                )
            else:
                col = Counter(name, help_text, labelnames, registry=prom.REGISTRY)
        except ValueError as exc:
            if "Duplicated timeseries" in str(exc):
                again = _lookup_existing(name, kind)
                if again is not None:
                    _cache[name] = again
                    return again
            _log.exception("Failed to register Prometheus collector %s", name)
            raise
        _cache[name] = col
        return col


def get_cascade_resolutions_total() -> Counter:
    """Counter of cascade runs by resource and winning tier."""
    return cast(
        Counter,
        _get_or_create(
            Counter,
            "screener_cascade_resolutions_total",
            "Fallback cascade resolutions by resource and provenance.",
            ("resource", "provenance"),
        ),
    )


def get_cascade_tier_failures_total() -> Counter:
    """Counter of cascade tiers that failed, by reason (error, timeout, invalid)."""
    return cast(
        Counter,
        _get_or_create(
            Counter,
            "screener_cascade_tier_failures_total",
            "Fallback cascade tier failures by resource, provenance and reason.",
            ("resource", "provenance", "reason"),
        ),
    )


def get_cache_requests_total() -> Counter:
    """Counter of response-cache lookups by outcome (hit, miss)."""
    return cast(
        Counter,
        _get_or_create(
            Counter,
            "screener_cache_requests_total",
            "Response cache lookups by namespace and outcome.",
            ("namespace", "outcome"),
        ),
    )


def get_upstream_request_seconds() -> Histogram:
    """Histogram of upstream vendor call latency."""
    return cast(
        Histogram,
        _get_or_create(
            Histogram,
            "screener_upstream_request_seconds",
            "Latency of upstream vendor requests (seconds).",
            ("vendor", "endpoint", "outcome"),
        ),
    )


@contextmanager
def observe_upstream_request(*, vendor: str, endpoint: str) -> Iterator[None]:
    """Time an upstream call and record it with ``outcome=success|error``."""
    start = time.perf_counter()
    outcome = "error"
    try:
        yield
        outcome = "success"
    finally:
        get_upstream_request_seconds().labels(
            vendor=vendor, endpoint=endpoint, outcome=outcome
        ).observe(time.perf_counter() - start)


__all__ = [
    "get_cache_requests_total",
    "get_cascade_resolutions_total",
    "get_cascade_tier_failures_total",
    "get_upstream_request_seconds",
    "observe_upstream_request",
]
