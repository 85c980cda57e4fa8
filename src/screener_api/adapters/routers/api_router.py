# src/screener_api/adapters/routers/api_router.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""API Router Aggregator (Adapters Layer).

Purpose:
    Compose the top-level ``router`` that includes all feature routers.

Responsibilities:
    * Mount health endpoints under ``/health``.
    * Mount statements, derived series and key metrics under
      ``/v1/companies/...``.
    * Mount the Prometheus scrape endpoint at ``/metrics``.

Layer:
    adapters/routers
"""

from __future__ import annotations

from fastapi import APIRouter

from screener_api.adapters.routers.health_router import router as health_router
from screener_api.adapters.routers.key_metrics_router import router as key_metrics_router
from screener_api.adapters.routers.metrics_router import router as metrics_router
from screener_api.adapters.routers.series_router import router as series_router
from screener_api.adapters.routers.statements_router import router as statements_router

router = APIRouter()

router.include_router(health_router, prefix="/health", tags=["Health"])
router.include_router(statements_router)
router.include_router(series_router)
router.include_router(key_metrics_router)
router.include_router(metrics_router)
