# src/screener_api/application/use_cases/series/get_valuation_series.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Use case: Get derived valuation series (P/E, market-cap/sales).

Synopsis:
    Fuse a price history with a low-frequency fundamental into a ratio
    series with a quarterly bar overlay and a median reference line.

Responsibilities:
    * Validate symbol and timeframe before any I/O.
    * Serve from cache when fresh.
    * Fetch price and fundamental inputs concurrently; each fetch runs its
      own cascade, so one degrading does not affect the other.
    * Report per-fetch ``sources`` and an overall ``provenance`` equal to
      the least live of them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, Final

from screener_api.application.interfaces.cache_port import CachePort
from screener_api.application.interfaces.gateways import (
    FundamentalSeriesSources,
    FundamentalsSources,
    PriceHistorySources,
)
from screener_api.application.schemas.dto.series import (
    MarketCapSalesPointDTO,
    MarketCapSalesSeriesDTO,
    PriceEarningsPointDTO,
    PriceEarningsSeriesDTO,
)
from screener_api.application.services.data_acquisition import (
    fetch_fundamental_series,
    fetch_fundamentals,
    fetch_price_history,
)
from screener_api.application.services.fallback_cascade import CascadeResult
from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.enums.provenance import Provenance
from screener_api.domain.enums.timeframe import Timeframe
from screener_api.domain.services.derived_series import (
    build_derived_series,
    ttm_sales_samples,
    ttm_windows,
)
from screener_api.domain.services.fiscal_calendar import quarter_end_dates
from screener_api.domain.services.formatting import CRORE
from screener_api.domain.value_objects.symbol import Symbol
from screener_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

EPS_SERIES_ID: Final[str] = "earnings_per_share_basic_ttm"
PE_PRECISION: Final[int] = 2
MCAP_SALES_PRECISION: Final[int] = 3

SHARES_FIELDS: Final[tuple[str, ...]] = (
    "basic_shares_outstanding_fq",
    "total_shares_outstanding_fq",
    "diluted_shares_outstanding_fq",
    "float_shares_outstanding_fy",
    "total_shares_outstanding_current",
)
QUARTERLY_REVENUE_FIELDS: Final[tuple[str, ...]] = ("total_revenue_fq_h", "revenue_fq_h")


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def shares_outstanding(fields: FieldMap) -> float | None:
    """First positive share count among :data:`SHARES_FIELDS`."""
    shares = fields.first_scalar(*SHARES_FIELDS)
    return shares if shares and shares > 0 else None


def has_sales_inputs(fields: FieldMap) -> bool:
    """Market-cap/sales needs a share count and one positive TTM revenue window.

    A window is four consecutive populated quarters, the same rule
    :func:`ttm_sales_samples` applies when building the series.
    """
    revenue = fields.first_series(*QUARTERLY_REVENUE_FIELDS)
    if shares_outstanding(fields) is None or revenue is None:
        return False
    return any(total > 0 for _, total in ttm_windows(revenue.values))


async def _gather_pair(
    first: Awaitable[CascadeResult[Any]], second: Awaitable[CascadeResult[Any]]
) -> tuple[CascadeResult[Any], CascadeResult[Any]]:
    """Await both fetches to completion, then re-raise the first failure."""
    a, b = await asyncio.gather(first, second, return_exceptions=True)
    for outcome in (a, b):
        if isinstance(outcome, BaseException):
            raise outcome
    return a, b


class GetValuationSeriesUseCase:
    """Serve P/E and market-cap/sales series."""

    def __init__(
        self,
        *,
        price_sources: PriceHistorySources,
        fundamentals_sources: FundamentalsSources,
        series_sources: FundamentalSeriesSources,
        cache: CachePort,
        ttl_s: float,
        tier_timeout_s: float | None = None,
        default_exchange: str = "NSE",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._price_sources = price_sources
        self._fundamentals_sources = fundamentals_sources
        self._series_sources = series_sources
        self._cache = cache
        self._ttl_s = ttl_s
        self._tier_timeout_s = tier_timeout_s
        self._default_exchange = default_exchange
        self._clock = clock

    # ------------------------------------------------------------------ #
    # P/E
    # ------------------------------------------------------------------ #
    async def price_to_earnings(
        self, symbol: str, timeframe: Timeframe | str
    ) -> PriceEarningsSeriesDTO:
        """Price over trailing EPS, step-interpolated onto every price bar."""
        sym, tf = self._parse(symbol, timeframe)
        cache_key = f"pe:{sym.qualified}:{tf.value}"
        cached = await self._cache.get_json(cache_key)
        if cached is not None:
            logger.info("cache_hit", extra={"extra": {"key": cache_key}})
            return PriceEarningsSeriesDTO.model_validate({**cached, "cached": True})

        prices, eps = await _gather_pair(
            fetch_price_history(self._price_sources, sym, tf, timeout_s=self._tier_timeout_s),
            fetch_fundamental_series(
                self._series_sources, sym, EPS_SERIES_ID, timeout_s=self._tier_timeout_s
            ),
        )
        series = build_derived_series(prices.value, eps.value, precision=PE_PRECISION)

        dto = PriceEarningsSeriesDTO(
            symbol=sym.qualified,
            timeframe=tf,
            data=[
                PriceEarningsPointDTO(
                    time=p.time,
                    price=p.price,
                    eps=round(p.fundamental, 2),
                    ratio=p.ratio,
                    eps_bar=None if p.bar is None else round(p.bar, 2),
                )
                for p in series.points
            ],
            median=round(series.median, PE_PRECISION),
            provenance=Provenance.weakest(prices.provenance, eps.provenance),
            sources={"price": prices.provenance, "eps": eps.provenance},
        )
        self._log_built("pe", sym, tf, dto.provenance, len(dto.data))
        await self._cache.set_json(cache_key, dto.model_dump(mode="json"), ttl=self._ttl_s)
        return dto

    # ------------------------------------------------------------------ #
    # Market cap / sales
    # ------------------------------------------------------------------ #
    async def market_cap_to_sales(
        self, symbol: str, timeframe: Timeframe | str
    ) -> MarketCapSalesSeriesDTO:
        """Market capitalisation over trailing-twelve-month sales.

        ``market_cap`` and ``sales_ttm`` are reported in crores.
        """
        sym, tf = self._parse(symbol, timeframe)
        cache_key = f"mcap_sales:{sym.qualified}:{tf.value}"
        cached = await self._cache.get_json(cache_key)
        if cached is not None:
            logger.info("cache_hit", extra={"extra": {"key": cache_key}})
            return MarketCapSalesSeriesDTO.model_validate({**cached, "cached": True})

        prices, fundamentals = await _gather_pair(
            fetch_price_history(self._price_sources, sym, tf, timeout_s=self._tier_timeout_s),
            fetch_fundamentals(
                self._fundamentals_sources,
                sym,
                resource="market_cap_sales",
                is_valid=has_sales_inputs,
                timeout_s=self._tier_timeout_s,
            ),
        )
        fields = fundamentals.value
        shares = shares_outstanding(fields) or 0.0
        revenue = fields.first_series(*QUARTERLY_REVENUE_FIELDS)
        revenues = list(revenue.values) if revenue is not None else []
        samples = ttm_sales_samples(revenues, quarter_end_dates(self._clock(), len(revenues)))

        series = build_derived_series(
            prices.value, samples, multiplier=shares, precision=MCAP_SALES_PRECISION
        )
        dto = MarketCapSalesSeriesDTO(
            symbol=sym.qualified,
            timeframe=tf,
            data=[
                MarketCapSalesPointDTO(
                    time=p.time,
                    price=p.price,
                    market_cap=round(p.price * shares / CRORE, 2),
                    sales_ttm=round(p.fundamental / CRORE, 2),
                    ratio=p.ratio,
                    sales_ttm_bar=None if p.bar is None else round(p.bar / CRORE, 2),
                )
                for p in series.points
            ],
            median=round(series.median, MCAP_SALES_PRECISION),
            provenance=Provenance.weakest(prices.provenance, fundamentals.provenance),
            sources={"price": prices.provenance, "fundamentals": fundamentals.provenance},
        )
        self._log_built("market_cap_sales", sym, tf, dto.provenance, len(dto.data))
        await self._cache.set_json(cache_key, dto.model_dump(mode="json"), ttl=self._ttl_s)
        return dto

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _parse(self, symbol: str, timeframe: Timeframe | str) -> tuple[Symbol, Timeframe]:
        tf = timeframe if isinstance(timeframe, Timeframe) else Timeframe.parse(timeframe)
        return Symbol.parse(symbol, default_exchange=self._default_exchange), tf

    @staticmethod
    def _log_built(
        view: str, sym: Symbol, tf: Timeframe, provenance: Provenance, points: int
    ) -> None:
        logger.info(
            "series_built",
            extra={
                "extra": {
                    "view": view,
                    "symbol": sym.qualified,
                    "timeframe": tf.value,
                    "provenance": provenance.value,
                    "points": points,
                }
            },
        )


__all__ = [
    "EPS_SERIES_ID",
    "GetValuationSeriesUseCase",
    "has_sales_inputs",
    "shares_outstanding",
]
