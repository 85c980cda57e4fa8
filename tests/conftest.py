# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator
from datetime import UTC, datetime

import pytest

# Deterministic mode must be in place before the app module builds its settings.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SCREENER_TEST_MODE", "1")

from screener_api.config.settings import get_settings  # noqa: E402
from screener_api.domain.entities.field_map import FieldMap  # noqa: E402

FIXED_NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _test_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Pin the environment and reset the settings singleton around each test."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("SCREENER_TEST_MODE", "1")
    monkeypatch.delenv("CACHE_BACKEND", raising=False)
    monkeypatch.delenv("SNAPSHOT_PATH", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


class FakeCache:
    """In-process ``CachePort`` that records writes."""

    def __init__(self) -> None:
        self.store: dict[str, dict] = {}
        self.ttls: dict[str, float] = {}

    async def get_json(self, key: str) -> dict | None:
        return self.store.get(key)

    async def set_json(self, key: str, value: dict, *, ttl: float) -> None:
        self.store[key] = dict(value)
        self.ttls[key] = ttl


@pytest.fixture
def fake_cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def non_banking_fields() -> FieldMap:
    """Three years of a plain operating company."""
    return FieldMap.from_payload(
        {
            "sector": "Information Technology",
            "revenue_fy_h": [2_400_000_000_000, 2_250_000_000_000, 1_900_000_000_000],
            "cost_of_goods_fy_h": [1_800_000_000_000, 1_700_000_000_000, 1_450_000_000_000],
            "gross_profit_fy_h": [600_000_000_000, 550_000_000_000, 450_000_000_000],
            "gross_margin_fy_h": [25.0, 24.4, 23.7],
            "pretax_income_fy_h": [620_000_000_000, 560_000_000_000, 500_000_000_000],
            "income_tax_fy_h": [155_000_000_000, 140_000_000_000, 125_000_000_000],
            "net_income_fy_h": [465_000_000_000, 420_000_000_000, 375_000_000_000],
            "earnings_per_share_basic_fy_h": [128.4, 115.2, 102.6],
            "common_stock_par_fy_h": [3_620_000_000, 3_660_000_000, 3_660_000_000],
            "retained_earnings_fy_h": [900_000_000_000, 880_000_000_000, 860_000_000_000],
            "short_term_debt_fy_h": [20_000_000_000, None, 15_000_000_000],
            "long_term_debt_fy_h": [60_000_000_000, 50_000_000_000, None],
            "total_assets_fy_h": [1_450_000_000_000, 1_420_000_000_000, 1_300_000_000_000],
            "total_liabilities_fy_h": [546_380_000_000, 536_340_000_000, 436_340_000_000],
            "cash_f_operating_activities_fy_h": [480_000_000_000, 440_000_000_000, 390_000_000_000],
            "cash_f_investing_activities_fy_h": [-120_000_000_000, -90_000_000_000, -80_000_000_000],
            "cash_f_financing_activities_fy_h": [-300_000_000_000, -310_000_000_000, -260_000_000_000],
        }
    )
