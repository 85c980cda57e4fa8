# src/screener_api/adapters/gateways/insightsentry_gateway.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Adapter Gateway: InsightSentry → domain entities.

This gateway sits on top of the transport client and implements the
``FundamentalsSource``, ``PriceHistorySource``, ``CandleSource`` and
``FundamentalSeriesSource`` ports.

Design principles:
    * Validate provider payloads deterministically; an unexpected outer shape
      raises ``MalformedUpstreamData``, a malformed individual row is skipped.
    * Price bars may be objects (``{"time", "close"}``) or arrays
      (``[t, o, h, l, c, v]``); millisecond timestamps are normalized to
      seconds.
    * Price history is filtered client-side to the timeframe's lookback.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from screener_api.domain.entities.candle import Candle, CandleSeries, normalize_candles
from screener_api.domain.entities.field_map import FieldMap, coerce_number
from screener_api.domain.entities.series import FundamentalSample, PricePoint
from screener_api.domain.enums.timeframe import Timeframe
from screener_api.domain.exceptions.fundamentals import MalformedUpstreamData
from screener_api.domain.value_objects.symbol import Symbol

_MS_THRESHOLD = 10**11
_BAR_KEYS = ("series", "candles", "data", "bars")
_OHLC_KEYS = ("open", "high", "low", "close")


class InsightSentryTransport(Protocol):
    """Subset of :class:`InsightSentryClient` used by the gateway."""

    async def fundamentals(self, symbol: str) -> Mapping[str, Any]: ...

    async def fundamentals_series(
        self, symbol: str, ids: Sequence[str]
    ) -> Mapping[str, Any]: ...

    async def history(
        self, symbol: str, *, bar_type: str, start: int, end: int
    ) -> Mapping[str, Any]: ...


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _epoch_seconds(raw: Any) -> int | None:
    value = coerce_number(raw)
    if value is None or value <= 0:
        return None
    if value >= _MS_THRESHOLD:
        value /= 1000
    return int(value)


def _require_list(payload: Mapping[str, Any], key: str, *, endpoint: str) -> list[Any]:
    rows = payload.get(key)
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise MalformedUpstreamData(
            "bad_shape", details={"endpoint": endpoint, "expected": f"{key}:list"}
        )
    return rows


def flatten_fundamentals(payload: Mapping[str, Any]) -> FieldMap:
    """Flatten ``{"data": [{"id", "value"}]}`` into a :class:`FieldMap`."""
    flat: dict[str, Any] = {}
    for item in _require_list(payload, "data", endpoint="fundamentals"):
        if not isinstance(item, Mapping):
            continue
        field_id = item.get("id")
        if isinstance(field_id, str) and field_id:
            flat[field_id] = item.get("value")
    return FieldMap.from_payload(flat)


def parse_bar(raw: Any) -> PricePoint | None:
    """Parse one bar, object or ``[t, o, h, l, c, v]`` array; ``None`` if unusable."""
    if isinstance(raw, Mapping):
        t = _epoch_seconds(raw.get("time", raw.get("t")))
        close = coerce_number(raw.get("close", raw.get("c")))
    elif isinstance(raw, list | tuple) and len(raw) >= 5:
        t = _epoch_seconds(raw[0])
        close = coerce_number(raw[4])
    else:
        return None
    if t is None or close is None or close <= 0:
        return None
    return PricePoint(time=t, close=close)


def parse_candle(raw: Any) -> Candle | None:
    """Parse one OHLCV bar; ``None`` unless every price is positive."""
    if isinstance(raw, Mapping):
        t = _epoch_seconds(raw.get("time", raw.get("t")))
        prices = [coerce_number(raw.get(k, raw.get(k[0]))) for k in _OHLC_KEYS]
        volume = coerce_number(raw.get("volume", raw.get("v")))
    elif isinstance(raw, list | tuple) and len(raw) >= 5:
        t = _epoch_seconds(raw[0])
        prices = [coerce_number(v) for v in raw[1:5]]
        volume = coerce_number(raw[5]) if len(raw) > 5 else None
    else:
        return None
    o, h, low, c = prices
    if t is None or o is None or h is None or low is None or c is None:
        return None
    if min(o, h, low, c) <= 0:
        return None
    return Candle(time=t, open=o, high=h, low=low, close=c, volume=int(volume or 0))


def _bar_rows(payload: Mapping[str, Any]) -> list[Any]:
    for key in _BAR_KEYS:
        rows = _require_list(payload, key, endpoint="history")
        if rows:
            return rows
    return []


def parse_candles(payload: Mapping[str, Any], *, since: int) -> tuple[Candle, ...]:
    """Extract OHLCV bars at or after ``since``, chronological."""
    parsed = (parse_candle(raw) for raw in _bar_rows(payload))
    return normalize_candles((c for c in parsed if c is not None), since=since)


def parse_price_history(payload: Mapping[str, Any], *, since: int) -> list[PricePoint]:
    """Extract bars at or after ``since``, chronological and unique per timestamp."""
    by_time: dict[int, PricePoint] = {}
    for raw in _bar_rows(payload):
        point = parse_bar(raw)
        if point is not None and point.time >= since:
            by_time[point.time] = point
    return [by_time[t] for t in sorted(by_time)]


def parse_fundamental_series(
    payload: Mapping[str, Any], field_id: str
) -> list[FundamentalSample]:
    """Extract the samples of ``field_id`` from a series payload, chronological."""
    for entry in _require_list(payload, "data", endpoint="fundamentals_series"):
        if not isinstance(entry, Mapping) or entry.get("id") != field_id:
            continue
        points = entry.get("data")
        if not isinstance(points, list):
            raise MalformedUpstreamData(
                "bad_shape",
                details={"endpoint": "fundamentals_series", "expected": "data[].data:list"},
            )
        samples: list[FundamentalSample] = []
        for p in points:
            if not isinstance(p, Mapping):
                continue
            t = _epoch_seconds(p.get("time"))
            value = coerce_number(p.get("close", p.get("value")))
            if t is not None and value is not None:
                samples.append(FundamentalSample(time=t, value=value))
        samples.sort(key=lambda s: s.time)
        return samples
    return []


class InsightSentryGateway:
    """InsightSentry adapter implementing the fundamentals and price ports."""

    def __init__(
        self,
        client: InsightSentryTransport,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._client = client
        self._clock = clock

    async def get_fundamentals(self, symbol: Symbol) -> FieldMap:
        payload = await self._client.fundamentals(symbol.qualified)
        return flatten_fundamentals(payload)

    async def get_price_history(self, symbol: Symbol, timeframe: Timeframe) -> list[PricePoint]:
        payload, since = await self._history(symbol, timeframe)
        return parse_price_history(payload, since=since)

    async def get_candles(self, symbol: Symbol, timeframe: Timeframe) -> CandleSeries:
        payload, since = await self._history(symbol, timeframe)
        return CandleSeries(exchange=symbol.exchange, candles=parse_candles(payload, since=since))

    async def _history(
        self, symbol: Symbol, timeframe: Timeframe
    ) -> tuple[Mapping[str, Any], int]:
        now = self._clock()
        since = int((now - timedelta(days=timeframe.lookback_days)).timestamp())
        payload = await self._client.history(
            symbol.qualified,
            bar_type=timeframe.bar_type,
            start=since,
            end=int(now.timestamp()),
        )
        return payload, since

    async def get_fundamental_series(
        self, symbol: Symbol, field_id: str
    ) -> list[FundamentalSample]:
        payload = await self._client.fundamentals_series(symbol.qualified, [field_id])
        return parse_fundamental_series(payload, field_id)


__all__ = [
    "InsightSentryGateway",
    "flatten_fundamentals",
    "parse_bar",
    "parse_candle",
    "parse_candles",
    "parse_fundamental_series",
    "parse_price_history",
]
