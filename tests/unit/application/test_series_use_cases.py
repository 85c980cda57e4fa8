# tests/unit/application/test_series_use_cases.py
from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from screener_api.application.use_cases.series.get_sales_margin_series import (
    GetSalesMarginSeriesUseCase,
)
from screener_api.application.use_cases.series.get_valuation_series import (
    EPS_SERIES_ID,
    GetValuationSeriesUseCase,
    has_sales_inputs,
)
from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.entities.series import FundamentalSample, PricePoint
from screener_api.domain.enums.provenance import Provenance
from screener_api.domain.enums.timeframe import Timeframe
from screener_api.domain.exceptions.fundamentals import InvalidRequest, UpstreamUnavailable
from screener_api.domain.services.fiscal_calendar import timestamp_of
from screener_api.domain.value_objects.symbol import Symbol

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)
T0 = timestamp_of(date(2025, 5, 2))
T1 = timestamp_of(date(2025, 5, 5))


class FakePrices:
    def __init__(self, points: list[PricePoint] | None) -> None:
        self.points = points
        self.calls: list[tuple[str, Timeframe]] = []

    async def get_price_history(self, symbol: Symbol, timeframe: Timeframe) -> list[PricePoint]:
        self.calls.append((symbol.qualified, timeframe))
        if self.points is None:
            raise UpstreamUnavailable("prices down")
        return self.points


class FakeSeries:
    def __init__(self, samples: list[FundamentalSample]) -> None:
        self.samples = samples
        self.requested: list[str] = []

    async def get_fundamental_series(
        self, symbol: Symbol, field_id: str
    ) -> list[FundamentalSample]:
        self.requested.append(field_id)
        return self.samples


class FakeFundamentals:
    def __init__(self, fields: FieldMap) -> None:
        self.fields = fields

    async def get_fundamentals(self, symbol: Symbol) -> FieldMap:
        return self.fields


def _valuation(cache, *, prices, series=(), fundamentals=()) -> GetValuationSeriesUseCase:
    return GetValuationSeriesUseCase(
        price_sources=list(prices),
        fundamentals_sources=list(fundamentals),
        series_sources=list(series),
        cache=cache,
        ttl_s=600.0,
        clock=lambda: NOW,
    )


@pytest.mark.asyncio
async def test_price_to_earnings_series(fake_cache) -> None:
    eps = FakeSeries([FundamentalSample(T0, 10.0)])
    uc = _valuation(
        fake_cache,
        prices=[(Provenance.LIVE, FakePrices([PricePoint(T0, 100.0), PricePoint(T1, 110.0)]))],
        series=[(Provenance.LIVE, eps)],
    )

    dto = await uc.price_to_earnings("TCS", "1Y")

    assert [p.ratio for p in dto.data] == [10.0, 11.0]
    assert [p.eps for p in dto.data] == [10.0, 10.0]
    assert dto.median == 10.5
    assert dto.timeframe is Timeframe.ONE_YEAR
    assert dto.provenance is Provenance.LIVE
    assert dto.sources == {"price": Provenance.LIVE, "eps": Provenance.LIVE}
    assert eps.requested == [EPS_SERIES_ID]
    assert "pe:NSE:TCS:1Y" in fake_cache.store


@pytest.mark.asyncio
async def test_provenance_is_the_weakest_input(fake_cache) -> None:
    uc = _valuation(
        fake_cache,
        prices=[
            (Provenance.LIVE, FakePrices(None)),
            (Provenance.SYNTHETIC, FakePrices([PricePoint(T0, 100.0)])),
        ],
        series=[(Provenance.LIVE, FakeSeries([FundamentalSample(T0, 20.0)]))],
    )

    dto = await uc.price_to_earnings("TCS", Timeframe.ONE_MONTH)

    assert dto.sources == {"price": Provenance.SYNTHETIC, "eps": Provenance.LIVE}
    assert dto.provenance is Provenance.SYNTHETIC


@pytest.mark.asyncio
async def test_invalid_timeframe_is_rejected_before_fetching(fake_cache) -> None:
    prices = FakePrices([PricePoint(T0, 100.0)])
    uc = _valuation(fake_cache, prices=[(Provenance.LIVE, prices)])

    with pytest.raises(InvalidRequest):
        await uc.price_to_earnings("TCS", "10Y")
    assert prices.calls == []


@pytest.mark.asyncio
async def test_cached_series_is_flagged(fake_cache) -> None:
    prices = FakePrices([PricePoint(T0, 100.0)])
    uc = _valuation(
        fake_cache,
        prices=[(Provenance.LIVE, prices)],
        series=[(Provenance.LIVE, FakeSeries([FundamentalSample(T0, 10.0)]))],
    )
    await uc.price_to_earnings("TCS", "6M")
    again = await uc.price_to_earnings("NSE:TCS", "6m")

    assert again.cached is True
    assert len(prices.calls) == 1


def _sales_fields() -> FieldMap:
    return FieldMap.from_payload(
        {
            "basic_shares_outstanding_fq": 1_000_000_000,
            "total_revenue_fq_h": [25_000_000_000.0] * 4,
        }
    )


def test_has_sales_inputs() -> None:
    assert has_sales_inputs(_sales_fields())
    assert not has_sales_inputs(FieldMap.from_payload({"total_revenue_fq_h": [1.0] * 4}))
    assert not has_sales_inputs(
        FieldMap.from_payload({"basic_shares_outstanding_fq": 10, "total_revenue_fq_h": [1.0] * 3})
    )


@pytest.mark.asyncio
async def test_market_cap_to_sales_series(fake_cache) -> None:
    uc = _valuation(
        fake_cache,
        prices=[(Provenance.LIVE, FakePrices([PricePoint(T0, 100.0), PricePoint(T1, 150.0)]))],
        fundamentals=[(Provenance.SNAPSHOT, FakeFundamentals(_sales_fields()))],
    )

    dto = await uc.market_cap_to_sales("TCS", "1Y")

    assert [p.ratio for p in dto.data] == [1.0, 1.5]
    first = dto.data[0]
    assert first.market_cap == 10_000.0
    assert first.sales_ttm == 10_000.0
    assert dto.median == 1.25
    assert dto.provenance is Provenance.SNAPSHOT
    assert dto.sources == {"price": Provenance.LIVE, "fundamentals": Provenance.SNAPSHOT}
    assert "mcap_sales:NSE:TCS:1Y" in fake_cache.store


def test_gapped_revenue_has_no_sales_inputs() -> None:
    gapped = FieldMap.from_payload(
        {
            "basic_shares_outstanding_fq": 1_000_000_000,
            "total_revenue_fq_h": [1e9, None, 1e9, None, 1e9, None, 1e9],
        }
    )
    assert not has_sales_inputs(gapped)


@pytest.mark.asyncio
async def test_gapped_live_revenue_falls_through_to_snapshot(fake_cache) -> None:
    gapped = FieldMap.from_payload(
        {
            "basic_shares_outstanding_fq": 1_000_000_000,
            "total_revenue_fq_h": [1e9, None, 1e9, None, 1e9, None, 1e9],
        }
    )
    uc = _valuation(
        fake_cache,
        prices=[(Provenance.SYNTHETIC, FakePrices([PricePoint(T0, 100.0)]))],
        fundamentals=[
            (Provenance.LIVE, FakeFundamentals(gapped)),
            (Provenance.SNAPSHOT, FakeFundamentals(_sales_fields())),
        ],
    )

    dto = await uc.market_cap_to_sales("TCS", "1Y")

    assert dto.sources["fundamentals"] is Provenance.SNAPSHOT
    assert [p.ratio for p in dto.data] == [1.0]
    assert dto.median == 1.0


@pytest.mark.asyncio
async def test_sales_margin_series(fake_cache) -> None:
    fields = FieldMap.from_payload(
        {
            "total_revenue_fq_h": [200_000_000.0, 100_000_000.0, 100_000_000.0, 50_000_000.0, 10.0],
            "net_income_fq_h": [20_000_000.0, 5_000_000.0, 10_000_000.0, 5_000_000.0, 1.0],
        }
    )
    uc = GetSalesMarginSeriesUseCase(
        sources=[(Provenance.LIVE, FakeFundamentals(fields))],
        cache=fake_cache,
        ttl_s=600.0,
        clock=lambda: NOW,
    )

    dto = await uc.execute("tcs", "1Y")

    assert [p.quarter for p in dto.data] == ["Jun 2024", "Sep 2024", "Dec 2024", "Mar 2025"]
    assert [p.quarterly_sales for p in dto.data] == [5.0, 10.0, 10.0, 20.0]
    assert [p.net_profit_margin for p in dto.data] == [10.0, 10.0, 5.0, 10.0]
    assert dto.provenance is Provenance.LIVE
    assert "sales_margin:NSE:TCS:1Y" in fake_cache.store


@pytest.mark.asyncio
async def test_sales_margin_rejects_tiers_without_quarterly_revenue(fake_cache) -> None:
    uc = GetSalesMarginSeriesUseCase(
        sources=[
            (Provenance.LIVE, FakeFundamentals(FieldMap.from_payload({"net_income_fq_h": [1.0]}))),
            (
                Provenance.SYNTHETIC,
                FakeFundamentals(FieldMap.from_payload({"revenue_fq_h": [100.0]})),
            ),
        ],
        cache=fake_cache,
        ttl_s=600.0,
        clock=lambda: NOW,
    )
    dto = await uc.execute("TCS", "1M")
    assert dto.provenance is Provenance.SYNTHETIC
    assert len(dto.data) == 1
