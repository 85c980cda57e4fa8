# src/screener_api/application/use_cases/series/get_sales_margin_series.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Use case: Get quarterly sales and margin series.

Synopsis:
    Quarterly revenue with gross, operating and net margins for the most
    recent quarters of a timeframe, oldest first.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from screener_api.application.interfaces.cache_port import CachePort
from screener_api.application.interfaces.gateways import FundamentalsSources
from screener_api.application.schemas.dto.series import (
    SalesMarginPointDTO,
    SalesMarginSeriesDTO,
)
from screener_api.application.services.data_acquisition import fetch_fundamentals
from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.enums.timeframe import Timeframe
from screener_api.domain.services.fiscal_calendar import quarter_end_dates
from screener_api.domain.services.formatting import CRORE
from screener_api.domain.services.sales_margin import REVENUE_FIELDS, build_margin_series
from screener_api.domain.value_objects.symbol import Symbol
from screener_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def has_quarterly_revenue(fields: FieldMap) -> bool:
    return fields.first_series(*REVENUE_FIELDS) is not None


class GetSalesMarginSeriesUseCase:
    """Serve the quarterly sales-margin chart."""

    def __init__(
        self,
        *,
        sources: FundamentalsSources,
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

    async def execute(self, symbol: str, timeframe: Timeframe | str) -> SalesMarginSeriesDTO:
        """Execute the use case.

        ``quarterly_sales`` is reported in crores.

        Raises:
            InvalidRequest: Bad symbol or timeframe.
            NoDataAvailable: Every fallback tier failed.
        """
        tf = timeframe if isinstance(timeframe, Timeframe) else Timeframe.parse(timeframe)
        sym = Symbol.parse(symbol, default_exchange=self._default_exchange)
        cache_key = f"sales_margin:{sym.qualified}:{tf.value}"

        cached = await self._cache.get_json(cache_key)
        if cached is not None:
            logger.info("cache_hit", extra={"extra": {"key": cache_key}})
            return SalesMarginSeriesDTO.model_validate({**cached, "cached": True})

        result = await fetch_fundamentals(
            self._sources,
            sym,
            resource="sales_margin",
            is_valid=has_quarterly_revenue,
            timeout_s=self._tier_timeout_s,
        )
        fields = result.value
        quarters = fields.longest("_fq_h")
        points = build_margin_series(
            fields, quarter_end_dates(self._clock(), quarters), limit=tf.margin_quarters
        )

        dto = SalesMarginSeriesDTO(
            symbol=sym.qualified,
            timeframe=tf,
            data=[
                SalesMarginPointDTO(
                    time=p.time,
                    quarter=p.quarter,
                    quarterly_sales=round(p.revenue / CRORE, 2),
                    gross_profit_margin=p.gross_margin,
                    operating_profit_margin=p.operating_margin,
                    net_profit_margin=p.net_margin,
                )
                for p in points
            ],
            provenance=result.provenance,
        )
        await self._cache.set_json(cache_key, dto.model_dump(mode="json"), ttl=self._ttl_s)
        return dto


__all__ = ["GetSalesMarginSeriesUseCase", "has_quarterly_revenue"]
