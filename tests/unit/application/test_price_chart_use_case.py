# tests/unit/application/test_price_chart_use_case.py
from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from screener_api.application.use_cases.series.get_price_chart import GetPriceChartUseCase
from screener_api.domain.entities.candle import Candle, CandleSeries
from screener_api.domain.enums.provenance import Provenance
from screener_api.domain.enums.timeframe import Timeframe
from screener_api.domain.exceptions.fundamentals import (
    InvalidRequest,
    NoDataAvailable,
    UpstreamUnavailable,
)
from screener_api.domain.services.fiscal_calendar import timestamp_of
from screener_api.domain.value_objects.symbol import Symbol

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)
T0 = timestamp_of(date(2025, 6, 12))
T1 = timestamp_of(date(2025, 6, 13))


class FakeCandles:
    def __init__(self, series: CandleSeries | None) -> None:
        self.series = series
        self.calls: list[tuple[str, Timeframe]] = []

    async def get_candles(self, symbol: Symbol, timeframe: Timeframe) -> CandleSeries:
        self.calls.append((symbol.qualified, timeframe))
        if self.series is None:
            raise UpstreamUnavailable("candles down")
        return self.series


BSE_SERIES = CandleSeries(
    exchange="BSE",
    candles=(
        Candle(T0, 3390.0, 3420.0, 3380.0, 3410.0, 1000),
        Candle(T1, 3410.0, 3450.5, 3400.0, 3440.25, 52011),
    ),
)


def _use_case(cache, tiers) -> GetPriceChartUseCase:
    return GetPriceChartUseCase(sources=tiers, cache=cache, ttl_s=900.0, clock=lambda: NOW)


@pytest.mark.asyncio
async def test_failed_and_empty_tiers_fall_through(fake_cache) -> None:
    uc = _use_case(
        fake_cache,
        [
            (Provenance.LIVE, FakeCandles(None)),
            (Provenance.SECONDARY_LIVE, FakeCandles(CandleSeries(exchange="BSE"))),
            (Provenance.SYNTHETIC, FakeCandles(BSE_SERIES)),
        ],
    )

    dto = await uc.execute("tcs", "1M")

    assert dto.symbol == "NSE:TCS"
    assert dto.timeframe is Timeframe.ONE_MONTH
    assert dto.provenance is Provenance.SYNTHETIC
    assert dto.exchange == "BSE"
    assert dto.currency == "INR"
    assert dto.timezone == "Asia/Kolkata"
    assert [c.date for c in dto.data] == ["2025-06-12", "2025-06-13"]
    assert dto.data[-1].close == 3440.25
    assert dto.data[-1].volume == 52011
    assert dto.last_update == int(NOW.timestamp())
    assert fake_cache.ttls["chart:NSE:TCS:1M"] == 900.0


@pytest.mark.asyncio
async def test_second_request_is_served_from_cache(fake_cache) -> None:
    live = FakeCandles(BSE_SERIES)
    uc = _use_case(fake_cache, [(Provenance.LIVE, live)])

    first = await uc.execute("TCS", Timeframe.SIX_MONTHS)
    second = await uc.execute("NSE:TCS", "6m")

    assert first.cached is False
    assert second.cached is True
    assert second.data == first.data
    assert len(live.calls) == 1


@pytest.mark.asyncio
async def test_invalid_timeframe_is_rejected_before_fetching(fake_cache) -> None:
    live = FakeCandles(BSE_SERIES)
    uc = _use_case(fake_cache, [(Provenance.LIVE, live)])

    with pytest.raises(InvalidRequest):
        await uc.execute("TCS", "2Y")
    assert live.calls == []


@pytest.mark.asyncio
async def test_exhausted_tiers_raise_no_data(fake_cache) -> None:
    uc = _use_case(fake_cache, [(Provenance.LIVE, FakeCandles(None))])

    with pytest.raises(NoDataAvailable):
        await uc.execute("TCS", "1Y")
    assert fake_cache.store == {}
