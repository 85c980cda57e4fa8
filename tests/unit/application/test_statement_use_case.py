# tests/unit/application/test_statement_use_case.py
from __future__ import annotations

from datetime import UTC, datetime

import pytest

from screener_api.application.use_cases.statements.get_financial_statement import (
    GetFinancialStatementUseCase,
)
from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.enums.company_type import CompanyType
from screener_api.domain.enums.provenance import Provenance
from screener_api.domain.enums.statement import StatementKind
from screener_api.domain.exceptions.fundamentals import (
    InvalidRequest,
    NoDataAvailable,
    UpstreamUnavailable,
)
from screener_api.domain.value_objects.symbol import Symbol

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


class FakeSource:
    def __init__(self, fields: FieldMap | None = None, *, fail: bool = False) -> None:
        self.fields = fields
        self.fail = fail
        self.calls: list[str] = []

    async def get_fundamentals(self, symbol: Symbol) -> FieldMap:
        self.calls.append(symbol.qualified)
        if self.fail or self.fields is None:
            raise UpstreamUnavailable("vendor down")
        return self.fields


def _uc(sources, cache) -> GetFinancialStatementUseCase:
    return GetFinancialStatementUseCase(
        sources=sources, cache=cache, ttl_s=900.0, clock=lambda: NOW
    )


@pytest.mark.asyncio
async def test_live_failure_serves_snapshot_and_caches(fake_cache, non_banking_fields) -> None:
    live = FakeSource(fail=True)
    snapshot = FakeSource(non_banking_fields)
    uc = _uc([(Provenance.LIVE, live), (Provenance.SNAPSHOT, snapshot)], fake_cache)

    dto = await uc.execute("tcs", "balance-sheet")

    assert dto.symbol == "NSE:TCS"
    assert dto.kind is StatementKind.BALANCE_SHEET
    assert dto.provenance is Provenance.SNAPSHOT
    assert dto.company_type is CompanyType.NON_BANKING
    assert dto.periods == ["Mar 2025", "Mar 2024", "Mar 2023"]
    assert dto.last_updated == NOW
    assert dto.cached is False
    assert live.calls == ["NSE:TCS"]

    key = "statement:balance-sheet:NSE:TCS"
    assert fake_cache.ttls[key] == 900.0
    assert fake_cache.store[key]["provenance"] == "snapshot"


@pytest.mark.asyncio
async def test_cache_hit_skips_sources(fake_cache, non_banking_fields) -> None:
    source = FakeSource(non_banking_fields)
    uc = _uc([(Provenance.LIVE, source)], fake_cache)

    first = await uc.execute("NSE:TCS", StatementKind.CASH_FLOW)
    second = await uc.execute("tcs", "cash-flow")

    assert len(source.calls) == 1
    assert first.cached is False
    assert second.cached is True
    assert second.symbol == "NSE:TCS"
    net = next(r for r in second.rows if r.key == "net_cash_flow")
    assert net.raw_values[0] == pytest.approx(6_000.0)
    assert second.model_dump(exclude={"cached"}) == first.model_dump(exclude={"cached"})


@pytest.mark.asyncio
async def test_tier_without_statement_fields_is_rejected(fake_cache, non_banking_fields) -> None:
    unrelated = FakeSource(FieldMap.from_payload({"foo_fy_h": [1.0, 2.0]}))
    synthetic = FakeSource(non_banking_fields)
    uc = _uc(
        [(Provenance.LIVE, unrelated), (Provenance.SYNTHETIC, synthetic)], fake_cache
    )

    dto = await uc.execute("TCS", "profit-and-loss")

    assert dto.provenance is Provenance.SYNTHETIC


@pytest.mark.asyncio
async def test_bank_gets_the_banking_layout(fake_cache) -> None:
    fields = FieldMap.from_payload(
        {"sector": "Private Sector Bank", "total_deposits_fy_h": [1.2e13, 1.1e13]}
    )
    uc = _uc([(Provenance.LIVE, FakeSource(fields))], fake_cache)

    dto = await uc.execute("HDFCBANK", "balance-sheet")

    assert dto.company_type is CompanyType.BANKING
    deposits = next(r for r in dto.rows if r.key == "deposits")
    assert deposits.values == ["12,00,000", "11,00,000"]


@pytest.mark.asyncio
async def test_invalid_kind_is_rejected_before_any_fetch(fake_cache) -> None:
    source = FakeSource(fail=True)
    uc = _uc([(Provenance.LIVE, source)], fake_cache)

    with pytest.raises(InvalidRequest):
        await uc.execute("TCS", "income-statement")
    assert source.calls == []


@pytest.mark.asyncio
async def test_all_tiers_failing_raises_no_data(fake_cache) -> None:
    uc = _uc([(Provenance.LIVE, FakeSource(fail=True))], fake_cache)
    with pytest.raises(NoDataAvailable):
        await uc.execute("TCS", "ratios")
    assert fake_cache.store == {}
