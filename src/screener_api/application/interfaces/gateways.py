# src/screener_api/application/interfaces/gateways.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Application-level data source interfaces.

Synopsis:
    Abstractions over fundamentals and price providers. Each concrete source
    (InsightSentry, ROIC, local snapshot, synthetic generator) implements one
    or more of these protocols; use cases receive them as an ordered list of
    ``(Provenance, source)`` pairs and turn that list into a fallback
    cascade.

    Implementations raise :class:`UpstreamUnavailable` or
    :class:`MalformedUpstreamData` on failure and return empty results when
    the upstream simply has nothing for the symbol.

Layer:
    application/interfaces
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from screener_api.domain.entities.candle import CandleSeries
from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.entities.series import FundamentalSample, PricePoint
from screener_api.domain.enums.provenance import Provenance
from screener_api.domain.enums.timeframe import Timeframe
from screener_api.domain.value_objects.symbol import Symbol


class FundamentalsSource(Protocol):
    """Source of flattened fundamentals for one company."""

    async def get_fundamentals(self, symbol: Symbol) -> FieldMap:
        """Return every available fundamentals field for ``symbol``."""


class PriceHistorySource(Protocol):
    """Source of closing prices over a timeframe."""

    async def get_price_history(self, symbol: Symbol, timeframe: Timeframe) -> list[PricePoint]:
        """Return price bars covering ``timeframe``, in any order."""


class CandleSource(Protocol):
    """Source of OHLCV bars for the price chart."""

    async def get_candles(self, symbol: Symbol, timeframe: Timeframe) -> CandleSeries:
        """Return candles covering ``timeframe``, oldest first."""


class FundamentalSeriesSource(Protocol):
    """Source of timestamped history for a single fundamentals field."""

    async def get_fundamental_series(
        self, symbol: Symbol, field_id: str
    ) -> list[FundamentalSample]:
        """Return samples for ``field_id`` (e.g. ``earnings_per_share_basic_ttm``)."""


FundamentalsSources = Sequence[tuple[Provenance, FundamentalsSource]]
PriceHistorySources = Sequence[tuple[Provenance, PriceHistorySource]]
FundamentalSeriesSources = Sequence[tuple[Provenance, FundamentalSeriesSource]]
CandleSources = Sequence[tuple[Provenance, CandleSource]]


__all__ = [
    "CandleSource",
    "CandleSources",
    "FundamentalSeriesSource",
    "FundamentalSeriesSources",
    "FundamentalsSource",
    "FundamentalsSources",
    "PriceHistorySource",
    "PriceHistorySources",
]
