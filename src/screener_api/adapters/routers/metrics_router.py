# src/screener_api/adapters/routers/metrics_router.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Prometheus scrape endpoint (``/metrics``).

The cascade and cache collectors are created lazily; the scrape touches
their accessors first so the series families exist on a cold start.

Layer:
    adapters/routers
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from screener_api.infrastructure.observability.metrics import (
    get_cache_requests_total,
    get_cascade_resolutions_total,
    get_cascade_tier_failures_total,
    get_upstream_request_seconds,
)

router = APIRouter()


@router.get("/metrics", include_in_schema=False)
async def metrics_endpoint() -> Response:
    """Expose Prometheus metrics in text format."""
    get_cascade_resolutions_total()
    get_cascade_tier_failures_total()
    get_cache_requests_total()
    get_upstream_request_seconds()
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
