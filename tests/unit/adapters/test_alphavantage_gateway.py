# tests/unit/adapters/test_alphavantage_gateway.py
from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from screener_api.adapters.gateways.alphavantage_gateway import (
    SERIES_KEY,
    AlphaVantageGateway,
    parse_daily_series,
)
from screener_api.domain.enums.timeframe import Timeframe
from screener_api.domain.exceptions.fundamentals import MalformedUpstreamData
from screener_api.domain.services.fiscal_calendar import timestamp_of
from screener_api.domain.value_objects.symbol import Symbol

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


def _day(o: str, h: str, low: str, c: str, v: str = "1000") -> dict[str, str]:
    return {"1. open": o, "2. high": h, "3. low": low, "4. close": c, "5. volume": v}


PAYLOAD = {
    "Meta Data": {"2. Symbol": "TCS.BSE"},
    SERIES_KEY: {
        "2025-06-13": _day("3410.0", "3450.5", "3400.0", "3440.25", "52011"),
        "2025-06-12": _day("3390.0", "3420.0", "3380.0", "3410.0"),
        "2025-06-11": _day("0", "0", "0", "0"),
        "not-a-date": _day("1", "1", "1", "1"),
        "2024-01-02": _day("3000", "3010", "2990", "3005"),
    },
}


def test_parse_daily_series_orders_and_filters() -> None:
    since = timestamp_of(date(2025, 6, 1))
    candles = parse_daily_series(PAYLOAD, since=since)

    assert [c.time for c in candles] == [
        timestamp_of(date(2025, 6, 12)),
        timestamp_of(date(2025, 6, 13)),
    ]
    latest = candles[-1]
    assert (latest.open, latest.high, latest.low, latest.close) == (3410.0, 3450.5, 3400.0, 3440.25)
    assert latest.volume == 52011


def test_parse_daily_series_requires_the_series_object() -> None:
    with pytest.raises(MalformedUpstreamData):
        parse_daily_series({"Meta Data": {}}, since=0)
    with pytest.raises(MalformedUpstreamData):
        parse_daily_series({SERIES_KEY: []}, since=0)


class RecordingDailyClient:
    def __init__(self) -> None:
        self.calls: list[tuple[str, bool]] = []

    async def daily_series(self, ticker: str, *, full: bool = False) -> dict:
        self.calls.append((ticker, full))
        return PAYLOAD


@pytest.mark.asyncio
async def test_gateway_requests_full_history_beyond_compact_window() -> None:
    client = RecordingDailyClient()
    gateway = AlphaVantageGateway(client, clock=lambda: NOW)
    sym = Symbol.parse("NSE:TCS")

    short = await gateway.get_candles(sym, Timeframe.ONE_MONTH)
    await gateway.get_candles(sym, Timeframe.ONE_YEAR)

    assert client.calls == [("TCS", False), ("TCS", True)]
    assert short.exchange == "BSE"
    assert len(short) == 2
