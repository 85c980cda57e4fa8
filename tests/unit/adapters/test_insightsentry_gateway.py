# tests/unit/adapters/test_insightsentry_gateway.py
from __future__ import annotations

from datetime import UTC, datetime

import pytest

from screener_api.adapters.gateways.insightsentry_gateway import (
    InsightSentryGateway,
    flatten_fundamentals,
    parse_bar,
    parse_candle,
    parse_candles,
    parse_fundamental_series,
    parse_price_history,
)
from screener_api.domain.entities.candle import Candle
from screener_api.domain.entities.series import FundamentalSample, PricePoint
from screener_api.domain.enums.timeframe import Timeframe
from screener_api.domain.exceptions.fundamentals import MalformedUpstreamData
from screener_api.domain.value_objects.symbol import Symbol

NOW = datetime(2025, 6, 15, tzinfo=UTC)


def test_flatten_fundamentals() -> None:
    fields = flatten_fundamentals(
        {
            "data": [
                {"id": "close", "value": "1,850.5"},
                {"id": "net_income_fy_h", "value": [10, 9]},
                {"id": "sector", "value": "Banks"},
                {"value": 1},
                "junk",
            ]
        }
    )
    assert fields.scalar("close") == 1850.5
    assert fields.values("net_income_fy_h", 2) == [10.0, 9.0]
    assert fields.sector == "Banks"


def test_flatten_rejects_non_list_data() -> None:
    with pytest.raises(MalformedUpstreamData):
        flatten_fundamentals({"data": {"close": 1}})


def test_parse_bar_shapes() -> None:
    assert parse_bar({"time": 1_700_000_000, "close": 10}) == PricePoint(1_700_000_000, 10.0)
    assert parse_bar({"t": 1_700_000_000_000, "c": "12.5"}) == PricePoint(1_700_000_000, 12.5)
    assert parse_bar([1_700_000_000, 1, 2, 0.5, 1.5, 100]) == PricePoint(1_700_000_000, 1.5)
    assert parse_bar({"time": 1_700_000_000, "close": 0}) is None
    assert parse_bar([1, 2, 3]) is None
    assert parse_bar("x") is None


def test_parse_price_history_filters_dedupes_and_sorts() -> None:
    payload = {
        "series": [
            {"time": 300, "close": 3},
            {"time": 100, "close": 1},
            {"time": 300, "close": 4},
            {"time": 50, "close": 9},
        ]
    }
    assert parse_price_history(payload, since=100) == [PricePoint(100, 1.0), PricePoint(300, 4.0)]


def test_parse_price_history_falls_back_through_keys() -> None:
    payload = {"series": [], "candles": [[200, 0, 0, 0, 5]]}
    assert parse_price_history(payload, since=0) == [PricePoint(200, 5.0)]
    assert parse_price_history({}, since=0) == []


def test_parse_fundamental_series() -> None:
    payload = {
        "data": [
            {"id": "other", "data": [{"time": 1, "close": 1}]},
            {
                "id": "earnings_per_share_basic_ttm",
                "data": [{"time": 200, "close": 11}, {"time": 100, "value": "10"}, {"time": 0}],
            },
        ]
    }
    assert parse_fundamental_series(payload, "earnings_per_share_basic_ttm") == [
        FundamentalSample(100, 10.0),
        FundamentalSample(200, 11.0),
    ]
    assert parse_fundamental_series(payload, "missing") == []
    with pytest.raises(MalformedUpstreamData):
        parse_fundamental_series({"data": [{"id": "x", "data": "nope"}]}, "x")


class RecordingClient:
    def __init__(self) -> None:
        self.history_args: dict | None = None

    async def fundamentals(self, symbol: str) -> dict:
        return {"data": [{"id": "close", "value": 10}]}

    async def fundamentals_series(self, symbol: str, ids) -> dict:
        return {"data": [{"id": ids[0], "data": [{"time": 100, "close": 5}]}]}

    async def history(self, symbol: str, *, bar_type: str, start: int, end: int) -> dict:
        self.history_args = {"symbol": symbol, "bar_type": bar_type, "start": start, "end": end}
        return {"series": [{"time": start - 1, "close": 1}, {"time": start, "close": 2}]}


@pytest.mark.asyncio
async def test_gateway_requests_the_timeframe_window() -> None:
    client = RecordingClient()
    gateway = InsightSentryGateway(client, clock=lambda: NOW)
    sym = Symbol.parse("TCS")

    points = await gateway.get_price_history(sym, Timeframe.ONE_MONTH)

    end = int(NOW.timestamp())
    assert client.history_args == {
        "symbol": "NSE:TCS",
        "bar_type": "day",
        "start": end - 30 * 86_400,
        "end": end,
    }
    assert [p.close for p in points] == [2.0]
    assert (await gateway.get_fundamentals(sym)).scalar("close") == 10.0
    assert await gateway.get_fundamental_series(sym, "eps") == [FundamentalSample(100, 5.0)]


def test_parse_candle_shapes() -> None:
    bar = {"time": 1_700_000_000, "open": 10, "high": 12, "low": 9, "close": 11, "volume": 500}
    assert parse_candle(bar) == Candle(1_700_000_000, 10.0, 12.0, 9.0, 11.0, 500)
    short = {"t": 1_700_000_000_000, "o": 1, "h": 2, "l": 0.5, "c": "1.5"}
    assert parse_candle(short) == Candle(1_700_000_000, 1.0, 2.0, 0.5, 1.5, 0)
    assert parse_candle([1_700_000_000, 1, 2, 0.5, 1.5, 100]).volume == 100
    assert parse_candle([1_700_000_000, 1, 2, 0.5, 1.5]).volume == 0
    assert parse_candle({"time": 1_700_000_000, "close": 10}) is None
    assert parse_candle([1_700_000_000, 1, 2, 0, 1.5]) is None
    assert parse_candle("x") is None


def test_parse_candles_filters_and_dedupes() -> None:
    payload = {
        "series": [
            [300, 3, 3, 3, 3, 1],
            [100, 1, 1, 1, 1, 1],
            [300, 4, 4, 4, 4, 2],
            [50, 9, 9, 9, 9, 9],
            [200, 0, 0, 0, 0, 0],
        ]
    }
    candles = parse_candles(payload, since=100)
    assert [c.time for c in candles] == [100, 300]
    assert candles[-1].close == 4.0


class CandleClient(RecordingClient):
    async def history(self, symbol: str, *, bar_type: str, start: int, end: int) -> dict:
        self.history_args = {"symbol": symbol, "bar_type": bar_type, "start": start, "end": end}
        return {"series": [[start, 10, 11, 9, 10.5, 1000], [start - 86_400, 1, 1, 1, 1, 1]]}


@pytest.mark.asyncio
async def test_gateway_candles_keep_the_listing_exchange() -> None:
    client = CandleClient()
    gateway = InsightSentryGateway(client, clock=lambda: NOW)

    series = await gateway.get_candles(Symbol.parse("BSE:TCS"), Timeframe.SIX_MONTHS)

    assert series.exchange == "BSE"
    assert len(series) == 1
    assert series.candles[0].high == 11.0
    assert client.history_args is not None
    assert client.history_args["symbol"] == "BSE:TCS"
