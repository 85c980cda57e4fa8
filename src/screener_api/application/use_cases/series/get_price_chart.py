# src/screener_api/application/use_cases/series/get_price_chart.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Use case: Get an OHLCV price chart.

Synopsis:
    OHLCV candles for one listing over a timeframe, resolved through the
    candle cascade (InsightSentry, Alpha Vantage, synthetic) and cached for
    a short TTL since intraday prices move.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from screener_api.application.interfaces.cache_port import CachePort
from screener_api.application.interfaces.gateways import CandleSources
from screener_api.application.schemas.dto.chart import CandleDTO, PriceChartDTO
from screener_api.application.services.data_acquisition import fetch_candles
from screener_api.domain.enums.timeframe import Timeframe
from screener_api.domain.services.fiscal_calendar import date_from_timestamp
from screener_api.domain.value_objects.symbol import Symbol
from screener_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class GetPriceChartUseCase:
    """Serve the OHLCV price chart."""

    def __init__(
        self,
        *,
        sources: CandleSources,
        cache: CachePort,
        ttl_s: float,
        tier_timeout_s: float | None = None,
        default_exchange: str = "NSE",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._sources = sources
        self._cache = cache
        self._ttl_s = ttl_s
        self._tier_timeout_s = tier_timeout_s
        self._default_exchange = default_exchange
        self._clock = clock

    async def execute(self, symbol: str, timeframe: Timeframe | str) -> PriceChartDTO:
        """Execute the use case.

        Raises:
            InvalidRequest: Bad symbol or timeframe.
            NoDataAvailable: Every fallback tier failed.
        """
        tf = timeframe if isinstance(timeframe, Timeframe) else Timeframe.parse(timeframe)
        sym = Symbol.parse(symbol, default_exchange=self._default_exchange)
        cache_key = f"chart:{sym.qualified}:{tf.value}"

        cached = await self._cache.get_json(cache_key)
        if cached is not None:
            logger.info("cache_hit", extra={"extra": {"key": cache_key}})
            return PriceChartDTO.model_validate({**cached, "cached": True})

        result = await fetch_candles(self._sources, sym, tf, timeout_s=self._tier_timeout_s)
        series = result.value
        dto = PriceChartDTO(
            symbol=sym.qualified,
            timeframe=tf,
            exchange=series.exchange,
            data=[
                CandleDTO(
                    timestamp=c.time,
                    date=date_from_timestamp(c.time).isoformat(),
                    open=c.open,
                    high=c.high,
                    low=c.low,
                    close=c.close,
                    volume=c.volume,
                )
                for c in series.candles
            ],
            last_update=int(self._clock().timestamp()),
            provenance=result.provenance,
        )
        logger.info(
            "price_chart_built",
            extra={
                "extra": {
                    "symbol": sym.qualified,
                    "timeframe": tf.value,
                    "bars": len(dto.data),
                    "provenance": result.provenance.value,
                }
            },
        )
        await self._cache.set_json(cache_key, dto.model_dump(mode="json"), ttl=self._ttl_s)
        return dto


__all__ = ["GetPriceChartUseCase"]
