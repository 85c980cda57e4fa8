# src/screener_api/dependencies/fundamentals.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Dependency wiring for fundamentals (sources, caches, use cases).

Overview:
    Provides FastAPI dependency providers for the statement, valuation
    series, sales-margin, price-chart and key-metrics use cases consumed by the routers.

Layer:
    dependencies

Design:
    * Always return the real use case types.
    * Assemble fallback tiers in cascade order:
        - LIVE: InsightSentry (fundamentals, price history, candles, EPS series).
        - SECONDARY_LIVE: ROIC.ai for statements, Alpha Vantage for candles.
        - SNAPSHOT: local JSON file when ``SNAPSHOT_PATH`` is set.
        - SYNTHETIC: seeded generators when enabled.
    * Deterministic mode (``ENVIRONMENT=test``, ``SCREENER_TEST_MODE=1`` or no
      vendor key) drops the network tiers so runs stay hermetic.
    * Caches are created once per app in ``main.create_app`` and read from
      ``app.state``; statements/metrics and series use separate instances.
    * Vendor clients are created per request and closed after the response.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from fastapi import Depends, Request

from screener_api.adapters.gateways.alphavantage_gateway import AlphaVantageGateway
from screener_api.adapters.gateways.insightsentry_gateway import InsightSentryGateway
from screener_api.adapters.gateways.roic_gateway import RoicGateway
from screener_api.adapters.gateways.snapshot_gateway import SnapshotGateway
from screener_api.application.interfaces.cache_port import CachePort
from screener_api.application.interfaces.gateways import (
    CandleSource,
    FundamentalSeriesSource,
    FundamentalsSource,
    PriceHistorySource,
)
from screener_api.application.services.synthetic_data import (
    SyntheticCandleSource,
    SyntheticEpsSource,
    SyntheticFundamentalsSource,
    SyntheticPriceSource,
)
from screener_api.application.use_cases.key_metrics.get_key_metrics import GetKeyMetricsUseCase
from screener_api.application.use_cases.series.get_price_chart import GetPriceChartUseCase
from screener_api.application.use_cases.series.get_sales_margin_series import (
    GetSalesMarginSeriesUseCase,
)
from screener_api.application.use_cases.series.get_valuation_series import (
    GetValuationSeriesUseCase,
)
from screener_api.application.use_cases.statements.get_financial_statement import (
    GetFinancialStatementUseCase,
)
from screener_api.domain.enums.provenance import Provenance
from screener_api.infrastructure.caching.json_cache import RedisJsonCache
from screener_api.infrastructure.caching.response_cache import (
    InMemoryResponseCache,
    ResponseCache,
)
from screener_api.infrastructure.external_apis.alphavantage.client import AlphaVantageClient
from screener_api.infrastructure.external_apis.alphavantage.settings import (
    AlphaVantageSettings,
)
from screener_api.infrastructure.external_apis.insightsentry.client import InsightSentryClient
from screener_api.infrastructure.external_apis.insightsentry.settings import (
    InsightSentrySettings,
)
from screener_api.infrastructure.external_apis.roic.client import RoicClient
from screener_api.infrastructure.external_apis.roic.settings import RoicSettings
from screener_api.infrastructure.logging.logger import get_json_logger
from screener_api.infrastructure.snapshots.loader import SnapshotStore

logger = get_json_logger(__name__)


def get_settings() -> Any:
    """Shim for tests to patch settings resolution in this module."""
    from screener_api.config.settings import get_settings as core_get_settings

    return core_get_settings()


def _load_insightsentry_settings() -> InsightSentrySettings:
    return InsightSentrySettings()


def _load_roic_settings() -> RoicSettings:
    return RoicSettings()


def _load_alphavantage_settings() -> AlphaVantageSettings:
    return AlphaVantageSettings()


def _is_deterministic_mode(*, key_configured: bool) -> bool:
    """Return True when network tiers must be skipped.

    Triggers:
        * ENVIRONMENT=test
        * SCREENER_TEST_MODE=1
        * No vendor key configured.
    """
    env = (os.getenv("ENVIRONMENT") or "").strip().lower()
    if env == "test" or os.getenv("SCREENER_TEST_MODE") == "1":
        return True
    return not key_configured


@lru_cache(maxsize=8)
def _snapshot_store(path: str) -> SnapshotStore:
    return SnapshotStore(path)


# =============================================================================
# Source assembly
# =============================================================================


@dataclass
class SourceSet:
    """Ordered fallback tiers for each fetch kind, plus owned resources."""

    fundamentals: list[tuple[Provenance, FundamentalsSource]] = field(default_factory=list)
    statement_fundamentals: list[tuple[Provenance, FundamentalsSource]] = field(
        default_factory=list
    )
    prices: list[tuple[Provenance, PriceHistorySource]] = field(default_factory=list)
    series: list[tuple[Provenance, FundamentalSeriesSource]] = field(default_factory=list)
    candles: list[tuple[Provenance, CandleSource]] = field(default_factory=list)
    closers: list[Callable[[], Awaitable[None]]] = field(default_factory=list)

    async def aclose(self) -> None:
        """Close every vendor client opened for this request."""
        for close in self.closers:
            try:
                await close()
            except Exception:  # noqa: BLE001
                logger.exception("error closing vendor HTTP client")


def build_sources(settings: Any) -> SourceSet:
    """Assemble fallback tiers from settings and environment."""
    sources = SourceSet()

    is_settings = _load_insightsentry_settings()
    if not _is_deterministic_mode(key_configured=is_settings.configured):
        client = InsightSentryClient(is_settings)
        gateway = InsightSentryGateway(client)
        sources.fundamentals.append((Provenance.LIVE, gateway))
        sources.statement_fundamentals.append((Provenance.LIVE, gateway))
        sources.prices.append((Provenance.LIVE, gateway))
        sources.series.append((Provenance.LIVE, gateway))
        sources.candles.append((Provenance.LIVE, gateway))
        sources.closers.append(client.aclose)

    roic_settings = _load_roic_settings()
    if not _is_deterministic_mode(key_configured=roic_settings.configured):
        roic_client = RoicClient(roic_settings)
        sources.statement_fundamentals.append((Provenance.SECONDARY_LIVE, RoicGateway(roic_client)))
        sources.closers.append(roic_client.aclose)

    av_settings = _load_alphavantage_settings()
    if not _is_deterministic_mode(key_configured=av_settings.configured):
        av_client = AlphaVantageClient(av_settings)
        sources.candles.append((Provenance.SECONDARY_LIVE, AlphaVantageGateway(av_client)))
        sources.closers.append(av_client.aclose)

    snapshot_path = getattr(settings, "snapshot_path", None)
    if snapshot_path:
        snapshot = SnapshotGateway(_snapshot_store(str(snapshot_path)))
        sources.fundamentals.append((Provenance.SNAPSHOT, snapshot))
        sources.statement_fundamentals.append((Provenance.SNAPSHOT, snapshot))

    if getattr(settings, "synthetic_fallback_enabled", True):
        synthetic = SyntheticFundamentalsSource()
        sources.fundamentals.append((Provenance.SYNTHETIC, synthetic))
        sources.statement_fundamentals.append((Provenance.SYNTHETIC, synthetic))
        sources.prices.append((Provenance.SYNTHETIC, SyntheticPriceSource()))
        sources.series.append((Provenance.SYNTHETIC, SyntheticEpsSource()))
        sources.candles.append((Provenance.SYNTHETIC, SyntheticCandleSource()))

    return sources


async def get_sources() -> AsyncGenerator[SourceSet, None]:
    """Yield the request's fallback tiers and close vendor clients afterwards."""
    sources = build_sources(get_settings())
    try:
        yield sources
    finally:
        await sources.aclose()


# =============================================================================
# Cache selection
# =============================================================================


def build_caches(settings: Any) -> tuple[CachePort, CachePort]:
    """Return ``(response_cache, series_cache)`` for the configured backend."""
    if getattr(settings, "cache_backend", "memory") == "redis":
        namespace = str(getattr(settings, "cache_namespace", "screener:v1"))
        return RedisJsonCache(namespace=namespace), RedisJsonCache(namespace=namespace)
    responses = InMemoryResponseCache(
        ResponseCache(max_entries=int(settings.response_cache_max_entries)),
        namespace="responses",
    )
    series = InMemoryResponseCache(
        ResponseCache(max_entries=int(settings.series_cache_max_entries)),
        namespace="series",
    )
    return responses, series


def _app_cache(request: Request, attr: str, index: int) -> CachePort:
    cache = getattr(request.app.state, attr, None)
    if cache is None:
        caches = build_caches(get_settings())
        request.app.state.response_cache, request.app.state.series_cache = caches
        cache = caches[index]
    return cache


def get_response_cache(request: Request) -> CachePort:
    """Shared cache for statements and key metrics."""
    return _app_cache(request, "response_cache", 0)


def get_series_cache(request: Request) -> CachePort:
    """Shared cache for price-derived series."""
    return _app_cache(request, "series_cache", 1)


# =============================================================================
# Use case providers
# =============================================================================


def get_statement_use_case(
    sources: SourceSet = Depends(get_sources),
    cache: CachePort = Depends(get_response_cache),
) -> GetFinancialStatementUseCase:
    settings = get_settings()
    return GetFinancialStatementUseCase(
        sources=sources.statement_fundamentals,
        cache=cache,
        ttl_s=settings.response_cache_ttl_s,
        tier_timeout_s=settings.cascade_tier_timeout_s,
        default_exchange=settings.default_exchange,
    )


def get_valuation_series_use_case(
    sources: SourceSet = Depends(get_sources),
    cache: CachePort = Depends(get_series_cache),
) -> GetValuationSeriesUseCase:
    settings = get_settings()
    return GetValuationSeriesUseCase(
        price_sources=sources.prices,
        fundamentals_sources=sources.fundamentals,
        series_sources=sources.series,
        cache=cache,
        ttl_s=settings.response_cache_ttl_s,
        tier_timeout_s=settings.cascade_tier_timeout_s,
        default_exchange=settings.default_exchange,
    )


def get_sales_margin_use_case(
    sources: SourceSet = Depends(get_sources),
    cache: CachePort = Depends(get_series_cache),
) -> GetSalesMarginSeriesUseCase:
    settings = get_settings()
    return GetSalesMarginSeriesUseCase(
        sources=sources.fundamentals,
        cache=cache,
        ttl_s=settings.response_cache_ttl_s,
        tier_timeout_s=settings.cascade_tier_timeout_s,
        default_exchange=settings.default_exchange,
    )


def get_price_chart_use_case(
    sources: SourceSet = Depends(get_sources),
    cache: CachePort = Depends(get_series_cache),
) -> GetPriceChartUseCase:
    settings = get_settings()
    return GetPriceChartUseCase(
        sources=sources.candles,
        cache=cache,
        ttl_s=settings.chart_cache_ttl_s,
        tier_timeout_s=settings.cascade_tier_timeout_s,
        default_exchange=settings.default_exchange,
    )


def get_key_metrics_use_case(
    sources: SourceSet = Depends(get_sources),
    cache: CachePort = Depends(get_response_cache),
) -> GetKeyMetricsUseCase:
    settings = get_settings()
    return GetKeyMetricsUseCase(
        sources=sources.fundamentals,
        cache=cache,
        ttl_s=settings.response_cache_ttl_s,
        tier_timeout_s=settings.cascade_tier_timeout_s,
        default_exchange=settings.default_exchange,
    )


__all__ = [
    "SourceSet",
    "build_caches",
    "build_sources",
    "get_key_metrics_use_case",
    "get_price_chart_use_case",
    "get_response_cache",
    "get_sales_margin_use_case",
    "get_series_cache",
    "get_sources",
    "get_statement_use_case",
    "get_valuation_series_use_case",
]
