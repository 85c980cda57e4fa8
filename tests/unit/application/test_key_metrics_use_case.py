# tests/unit/application/test_key_metrics_use_case.py
from __future__ import annotations

import pytest

from screener_api.application.use_cases.key_metrics.get_key_metrics import (
    GetKeyMetricsUseCase,
    has_metric_inputs,
)
from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.enums.company_type import CompanyType
from screener_api.domain.enums.provenance import Provenance
from screener_api.domain.value_objects.symbol import Symbol


class StaticSource:
    def __init__(self, fields: FieldMap) -> None:
        self.fields = fields
        self.calls = 0

    async def get_fundamentals(self, symbol: Symbol) -> FieldMap:
        self.calls += 1
        return self.fields


def test_has_metric_inputs() -> None:
    assert has_metric_inputs(FieldMap.from_payload({"close": 10.0}))
    assert not has_metric_inputs(FieldMap.from_payload({"net_income_fy_h": [1.0]}))


@pytest.mark.asyncio
async def test_key_metrics_report_methods_and_cache(fake_cache) -> None:
    source = StaticSource(
        FieldMap.from_payload(
            {
                "close": 250.0,
                "total_equity_fq": 1_000.0,
                "total_debt_fq": 250.0,
                "oper_income_ttm": 125.0,
                "total_shares_outstanding_current": 10.0,
                "market_cap": 2_500.0,
            }
        )
    )
    uc = GetKeyMetricsUseCase(
        sources=[(Provenance.SNAPSHOT, source)], cache=fake_cache, ttl_s=300.0
    )

    dto = await uc.execute("infy")

    assert dto.symbol == "NSE:INFY"
    assert dto.company_type is CompanyType.NON_BANKING
    assert (dto.roce.value, dto.roce.method) == (10.0, "operating_income")
    assert (dto.book_value.value, dto.book_value.method) == (100.0, "equity_per_share")
    assert (dto.price_to_book.value, dto.price_to_book.method) == (2.5, "close_over_book_value")
    assert dto.provenance is Provenance.SNAPSHOT
    assert fake_cache.ttls["key_metrics:NSE:INFY"] == 300.0

    cached = await uc.execute("NSE:INFY")
    assert cached.cached is True
    assert source.calls == 1
