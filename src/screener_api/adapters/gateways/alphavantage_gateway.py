# src/screener_api/adapters/gateways/alphavantage_gateway.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Adapter Gateway: Alpha Vantage daily series → candles.

``TIME_SERIES_DAILY`` keys bars by ISO date under ``"Time Series (Daily)"``
with numbered fields (``"1. open"`` .. ``"5. volume"``). Dates become the
UTC midnight timestamp of the trading day. The compact output holds only
the latest 100 sessions, so the full history is requested whenever the
timeframe reaches further back than that.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, date, datetime, timedelta
from typing import Any, Final, Protocol

from screener_api.domain.entities.candle import Candle, CandleSeries, normalize_candles
from screener_api.domain.entities.field_map import coerce_number
from screener_api.domain.enums.timeframe import Timeframe
from screener_api.domain.exceptions.fundamentals import MalformedUpstreamData
from screener_api.domain.services.fiscal_calendar import timestamp_of
from screener_api.domain.value_objects.symbol import Symbol

SERIES_KEY: Final[str] = "Time Series (Daily)"
COMPACT_LOOKBACK_DAYS: Final[int] = 140
LISTING_EXCHANGE: Final[str] = "BSE"


class AlphaVantageTransport(Protocol):
    async def daily_series(self, ticker: str, *, full: bool = False) -> Mapping[str, Any]: ...


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _parse_day(day: str, fields: Any) -> Candle | None:
    if not isinstance(fields, Mapping):
        return None
    try:
        t = timestamp_of(date.fromisoformat(day))
    except ValueError:
        return None
    o = coerce_number(fields.get("1. open"))
    h = coerce_number(fields.get("2. high"))
    low = coerce_number(fields.get("3. low"))
    c = coerce_number(fields.get("4. close"))
    if o is None or h is None or low is None or c is None or min(o, h, low, c) <= 0:
        return None
    volume = coerce_number(fields.get("5. volume"))
    return Candle(time=t, open=o, high=h, low=low, close=c, volume=int(volume or 0))


def parse_daily_series(payload: Mapping[str, Any], *, since: int) -> tuple[Candle, ...]:
    """Extract daily candles at or after ``since``, oldest first.

    Raises:
        MalformedUpstreamData: The series object is missing or not an object.
    """
    days = payload.get(SERIES_KEY)
    if not isinstance(days, Mapping):
        raise MalformedUpstreamData(
            "bad_shape", details={"endpoint": "daily_series", "expected": f"{SERIES_KEY}:object"}
        )
    parsed = (_parse_day(str(day), fields) for day, fields in days.items())
    return normalize_candles((c for c in parsed if c is not None), since=since)


class AlphaVantageGateway:
    """Alpha Vantage adapter implementing ``CandleSource`` for the Bombay listing."""

    def __init__(
        self,
        client: AlphaVantageTransport,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._client = client
        self._clock = clock

    async def get_candles(self, symbol: Symbol, timeframe: Timeframe) -> CandleSeries:
        since = int((self._clock() - timedelta(days=timeframe.lookback_days)).timestamp())
        payload = await self._client.daily_series(
            symbol.ticker, full=timeframe.lookback_days > COMPACT_LOOKBACK_DAYS
        )
        return CandleSeries(
            exchange=LISTING_EXCHANGE, candles=parse_daily_series(payload, since=since)
        )


__all__ = ["AlphaVantageGateway", "parse_daily_series"]
