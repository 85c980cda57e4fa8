# src/screener_api/application/services/data_acquisition.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Cascaded data acquisition.

Synopsis:
    Turn an ordered list of ``(Provenance, source)`` pairs into a
    :class:`FallbackCascade` for one fetch. Each fetch kind has its own
    default validity predicate; callers may tighten it.

Layer:
    application/services
"""

from __future__ import annotations

from collections.abc import Callable
from functools import partial

from screener_api.application.interfaces.gateways import (
    CandleSources,
    FundamentalSeriesSources,
    FundamentalsSources,
    PriceHistorySources,
)
from screener_api.application.services.fallback_cascade import (
    CascadeResult,
    CascadeTier,
    FallbackCascade,
)
from screener_api.domain.entities.candle import CandleSeries
from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.entities.series import FundamentalSample, PricePoint
from screener_api.domain.enums.timeframe import Timeframe
from screener_api.domain.value_objects.symbol import Symbol


def has_historical_series(fields: FieldMap) -> bool:
    """Default fundamentals validity: at least one populated history."""
    return fields.has_populated_series("_h")


def has_prices(points: list[PricePoint]) -> bool:
    return any(p.close > 0 for p in points)


def has_candles(series: CandleSeries) -> bool:
    return len(series) > 0


def has_positive_samples(samples: list[FundamentalSample]) -> bool:
    return any(s.value > 0 for s in samples)


async def fetch_fundamentals(
    sources: FundamentalsSources,
    symbol: Symbol,
    *,
    resource: str = "fundamentals",
    is_valid: Callable[[FieldMap], bool] = has_historical_series,
    timeout_s: float | None = None,
) -> CascadeResult[FieldMap]:
    """Fetch fundamentals for ``symbol`` through the fallback cascade."""
    tiers = [
        CascadeTier(provenance, partial(source.get_fundamentals, symbol), is_valid)
        for provenance, source in sources
    ]
    cascade = FallbackCascade(
        tiers, resource=resource, entity=symbol.qualified, default_timeout_s=timeout_s
    )
    return await cascade.run()


async def fetch_price_history(
    sources: PriceHistorySources,
    symbol: Symbol,
    timeframe: Timeframe,
    *,
    timeout_s: float | None = None,
) -> CascadeResult[list[PricePoint]]:
    """Fetch price history for ``symbol`` through the fallback cascade."""
    tiers = [
        CascadeTier(provenance, partial(source.get_price_history, symbol, timeframe), has_prices)
        for provenance, source in sources
    ]
    cascade = FallbackCascade(
        tiers, resource="price_history", entity=symbol.qualified, default_timeout_s=timeout_s
    )
    return await cascade.run()


async def fetch_candles(
    sources: CandleSources,
    symbol: Symbol,
    timeframe: Timeframe,
    *,
    timeout_s: float | None = None,
) -> CascadeResult[CandleSeries]:
    """Fetch OHLCV candles for ``symbol`` through the fallback cascade."""
    tiers = [
        CascadeTier(provenance, partial(source.get_candles, symbol, timeframe), has_candles)
        for provenance, source in sources
    ]
    cascade = FallbackCascade(
        tiers, resource="candles", entity=symbol.qualified, default_timeout_s=timeout_s
    )
    return await cascade.run()


async def fetch_fundamental_series(
    sources: FundamentalSeriesSources,
    symbol: Symbol,
    field_id: str,
    *,
    timeout_s: float | None = None,
) -> CascadeResult[list[FundamentalSample]]:
    """Fetch one fundamental field's history through the fallback cascade."""
    tiers = [
        CascadeTier(
            provenance,
            partial(source.get_fundamental_series, symbol, field_id),
            has_positive_samples,
        )
        for provenance, source in sources
    ]
    cascade = FallbackCascade(
        tiers, resource=f"series:{field_id}", entity=symbol.qualified, default_timeout_s=timeout_s
    )
    return await cascade.run()


__all__ = [
    "fetch_candles",
    "fetch_fundamental_series",
    "fetch_fundamentals",
    "fetch_price_history",
    "has_candles",
    "has_historical_series",
    "has_positive_samples",
    "has_prices",
]
