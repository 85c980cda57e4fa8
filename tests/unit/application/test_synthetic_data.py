# tests/unit/application/test_synthetic_data.py
from __future__ import annotations

from datetime import UTC, datetime

import pytest

from screener_api.application.services.synthetic_data import (
    ANNUAL_PERIODS,
    EPS_QUARTERS,
    QUARTERLY_PERIODS,
    SyntheticCandleSource,
    SyntheticEpsSource,
    SyntheticPriceSource,
    looks_like_bank,
    seeded_rng,
    synthetic_fundamentals,
)
from screener_api.domain.enums.company_type import CompanyType
from screener_api.domain.enums.statement import StatementKind
from screener_api.domain.enums.timeframe import Timeframe
from screener_api.domain.services.company_classifier import classify_company
from screener_api.domain.services.row_schemas import schema_fields
from screener_api.domain.value_objects.symbol import Symbol

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


def test_seeded_rng_is_deterministic() -> None:
    assert seeded_rng("NSE:TCS", "x").random() == seeded_rng("NSE:TCS", "x").random()
    assert seeded_rng("NSE:TCS", "x").random() != seeded_rng("NSE:INFY", "x").random()


def test_fundamentals_are_reproducible_per_symbol() -> None:
    a = synthetic_fundamentals(Symbol.parse("TCS"), as_of=NOW)
    b = synthetic_fundamentals(Symbol.parse("TCS"), as_of=NOW)
    assert a == b


def test_non_bank_profile() -> None:
    fields = synthetic_fundamentals(Symbol.parse("TCS"), as_of=NOW)

    assert not looks_like_bank(Symbol.parse("TCS"))
    assert classify_company(fields) is CompanyType.NON_BANKING
    assert fields.longest("_fy_h") == ANNUAL_PERIODS
    assert fields.longest("_fq_h") == QUARTERLY_PERIODS
    assert fields.period_labels[0] == "Mar 2025"
    for kind in StatementKind:
        assert any(fields.has_data(name) for name in schema_fields(kind))


def test_bank_profile() -> None:
    sym = Symbol.parse("HDFCBANK")
    fields = synthetic_fundamentals(sym, as_of=NOW)
    assert looks_like_bank(sym)
    assert classify_company(fields) is CompanyType.BANKING
    assert fields.has_data("total_deposits_fy_h")


@pytest.mark.asyncio
async def test_price_walk_is_bounded_and_spaced() -> None:
    points = await SyntheticPriceSource(clock=lambda: NOW).get_price_history(
        Symbol.parse("TCS"), Timeframe.ONE_YEAR
    )

    assert len(points) == Timeframe.ONE_YEAR.data_points
    gaps = {b.time - a.time for a, b in zip(points, points[1:], strict=False)}
    assert gaps == {7 * 86_400}
    for a, b in zip(points, points[1:], strict=False):
        assert abs(b.close / a.close - 1) <= 0.0201


@pytest.mark.asyncio
async def test_eps_series_is_quarterly_and_positive() -> None:
    samples = await SyntheticEpsSource(clock=lambda: NOW).get_fundamental_series(
        Symbol.parse("TCS"), "earnings_per_share_basic_ttm"
    )
    assert len(samples) == EPS_QUARTERS
    assert [s.time for s in samples] == sorted(s.time for s in samples)
    assert all(s.value > 0 for s in samples)


@pytest.mark.asyncio
async def test_candles_are_weekday_bars_with_consistent_ranges() -> None:
    source = SyntheticCandleSource(clock=lambda: NOW)
    series = await source.get_candles(Symbol.parse("BSE:TCS"), Timeframe.ONE_MONTH)

    assert series.exchange == "BSE"
    assert 20 <= len(series) <= 23
    times = [c.time for c in series.candles]
    assert times == sorted(times)
    for candle in series.candles:
        assert datetime.fromtimestamp(candle.time, tz=UTC).weekday() < 5
        assert candle.low <= min(candle.open, candle.close)
        assert candle.high >= max(candle.open, candle.close)
        assert 100_000 <= candle.volume <= 1_100_000
    assert 900 < series.candles[0].open < 3100

    again = await source.get_candles(Symbol.parse("BSE:TCS"), Timeframe.ONE_MONTH)
    assert again == series
