# tests/unit/adapters/test_roic_and_snapshot_gateways.py
from __future__ import annotations

import json
from pathlib import Path

import pytest

from screener_api.adapters.gateways.roic_gateway import RoicGateway, map_balance_sheet
from screener_api.adapters.gateways.snapshot_gateway import SnapshotGateway
from screener_api.domain.exceptions.fundamentals import UpstreamUnavailable
from screener_api.domain.value_objects.symbol import Symbol
from screener_api.infrastructure.snapshots.loader import SnapshotStore

RECORDS = [
    {
        "fiscal_year": 2024,
        "bs_tot_asset": 900.0,
        "bs_st_borrow": 10.0,
        "bs_lt_borrow": None,
        "bs_common_stock": 5.0,
    },
    {
        "fiscal_year": 2025,
        "bs_tot_asset": 1000.0,
        "bs_st_borrow": 20.0,
        "bs_lt_borrow": 30.0,
        "bs_common_stock": 5.0,
    },
]


def test_map_balance_sheet_orders_recent_first_and_sums_debt() -> None:
    fields = map_balance_sheet(RECORDS)

    assert fields.period_labels == ("Mar 2025", "Mar 2024")
    assert fields.values("total_assets_fy_h", 2) == [1000.0, 900.0]
    assert fields.values("common_stock_par_fy_h", 2) == [5.0, 5.0]
    assert fields.values("total_debt_fy_h", 2) == [50.0, 10.0]
    assert fields.get("goodwill_fy_h") is None


def test_map_balance_sheet_without_years_has_no_labels() -> None:
    fields = map_balance_sheet([{"bs_tot_asset": 1.0}])
    assert fields.period_labels == ()
    assert fields.get("total_debt_fy_h") is None


class FakeRoic:
    def __init__(self) -> None:
        self.tickers: list[str] = []

    async def balance_sheet(self, ticker: str) -> list[dict]:
        self.tickers.append(ticker)
        return RECORDS


@pytest.mark.asyncio
async def test_roic_gateway_uses_bare_ticker() -> None:
    client = FakeRoic()
    fields = await RoicGateway(client).get_fundamentals(Symbol.parse("NSE:TCS"))
    assert client.tickers == ["TCS"]
    assert fields.has_data("total_assets_fy_h")


@pytest.mark.asyncio
async def test_snapshot_gateway(tmp_path: Path) -> None:
    path = tmp_path / "snap.json"
    path.write_text(json.dumps({"TCS": {"sector": "IT", "net_income_fy_h": [1, 2]}}))
    gateway = SnapshotGateway(SnapshotStore(path))

    fields = await gateway.get_fundamentals(Symbol.parse("tcs"))
    assert fields.sector == "IT"

    with pytest.raises(UpstreamUnavailable):
        await gateway.get_fundamentals(Symbol.parse("INFY"))
