# src/screener_api/application/services/synthetic_data.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Seeded synthetic datasets.

Synopsis:
    Last tier of every fallback cascade. Generates plausible fundamentals,
    price history, OHLCV candles and EPS history for any symbol so that views always
    render. Output is tagged ``synthetic`` by the cascade and never mixed
    with live data inside a single fetch.

Design:
    * Deterministic: every generator seeds a private ``random.Random`` from
      ``(symbol, purpose, timeframe)``; identical requests give identical
      datasets.
    * Symbols that look like banks get a banking profile, which the
      classifier recognizes through the ``report_type`` hint.
    * Currency fields are raw rupees so that crore conversion applies as it
      does for vendor data.

Layer:
    application/services
"""

from __future__ import annotations

import hashlib
import random
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any, Final

from screener_api.domain.entities.candle import Candle, CandleSeries
from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.entities.series import FundamentalSample, PricePoint
from screener_api.domain.enums.timeframe import Timeframe
from screener_api.domain.services.fiscal_calendar import (
    annual_period_labels,
    quarter_end_dates,
    timestamp_of,
)
from screener_api.domain.services.formatting import CRORE
from screener_api.domain.value_objects.symbol import Symbol

ANNUAL_PERIODS: Final[int] = 12
QUARTERLY_PERIODS: Final[int] = 13
EPS_QUARTERS: Final[int] = 24
BANK_MARKERS: Final[tuple[str, ...]] = ("BANK", "HDFC", "ICICI", "SBIN", "AXIS")

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def seeded_rng(*parts: str) -> random.Random:
    """Return a ``random.Random`` seeded from ``parts``."""
    digest = hashlib.sha256("|".join(parts).encode("utf-8")).digest()
    return random.Random(int.from_bytes(digest[:8], "big"))


def looks_like_bank(symbol: Symbol) -> bool:
    """True when the ticker contains a well-known bank marker."""
    return any(marker in symbol.ticker for marker in BANK_MARKERS)


def _history(
    rng: random.Random, base: float, growth: float, count: int, *, jitter: float = 0.03
) -> list[float]:
    """Most-recent-first history compounding backwards from ``base``."""
    return [
        round(base * (1 + growth) ** (-i) * (1 + rng.uniform(-jitter, jitter)), 2)
        for i in range(count)
    ]


def _ratio(values: Sequence[float], rng: random.Random, low: float, high: float) -> list[float]:
    return [round(v * rng.uniform(low, high), 2) for v in values]


def _pct(rng: random.Random, low: float, high: float, count: int) -> list[float]:
    return [round(rng.uniform(low, high), 2) for _ in range(count)]


def _minus(a: Sequence[float], b: Sequence[float]) -> list[float]:
    return [round(x - y, 2) for x, y in zip(a, b, strict=True)]


def _pct_of(part: Sequence[float], whole: Sequence[float]) -> list[float]:
    return [round(p / w * 100, 2) if w else 0.0 for p, w in zip(part, whole, strict=True)]


def _non_banking_annual(rng: random.Random, n: int) -> dict[str, Any]:
    revenue = _history(rng, rng.uniform(20_000, 80_000) * CRORE, 0.10, n)
    cogs = _ratio(revenue, rng, 0.58, 0.66)
    operating = _minus(revenue, cogs)
    other = _ratio(revenue, rng, 0.01, 0.03)
    interest = _ratio(revenue, rng, 0.01, 0.02)
    depreciation = _ratio(revenue, rng, 0.03, 0.05)
    pretax = [round(o + x - i - d, 2) for o, x, i, d in zip(operating, other, interest, depreciation, strict=True)]
    tax = _ratio(pretax, rng, 0.24, 0.27)
    net = _minus(pretax, tax)
    equity = _history(rng, revenue[0] * 0.8, 0.12, n)
    debt = _history(rng, revenue[0] * 0.3, 0.07, n)
    assets = _history(rng, revenue[0] * 1.7, 0.10, n)
    operating_cf = _ratio(net, rng, 1.1, 1.3)
    return {
        "revenue_fy_h": revenue,
        "total_revenue_fy_h": revenue,
        "cost_of_goods_fy_h": cogs,
        "gross_profit_fy_h": operating,
        "gross_margin_fy_h": _pct_of(operating, revenue),
        "other_income_fy_h": other,
        "interest_expense_fy_h": interest,
        "depreciation_fy_h": depreciation,
        "pretax_income_fy_h": pretax,
        "income_tax_fy_h": tax,
        "net_income_fy_h": net,
        "oper_income_fy_h": _minus(operating, depreciation),
        "dividend_payout_ratio_fy_h": _pct(rng, 15, 40, n),
        "common_stock_par_fy_h": _history(rng, revenue[0] * 0.02, 0.01, n),
        "retained_earnings_fy_h": _ratio(equity, rng, 0.85, 0.9),
        "total_equity_fy_h": equity,
        "total_debt_fy_h": debt,
        "total_current_liabilities_fy_h": _history(rng, revenue[0] * 0.25, 0.10, n),
        "total_liabilities_fy_h": _minus(assets, equity),
        "ppe_total_net_fy_h": _ratio(assets, rng, 0.28, 0.32),
        "cwip_fy_h": _ratio(assets, rng, 0.02, 0.04),
        "long_term_investments_fy_h": _ratio(assets, rng, 0.15, 0.2),
        "long_term_other_assets_total_fy_h": _ratio(assets, rng, 0.1, 0.13),
        "total_assets_fy_h": assets,
        "cash_f_operating_activities_fy_h": operating_cf,
        "cash_f_investing_activities_fy_h": [round(-v, 2) for v in _ratio(net, rng, 0.5, 0.7)],
        "cash_f_financing_activities_fy_h": [round(-v, 2) for v in _ratio(net, rng, 0.3, 0.5)],
        "free_cash_flow_fy_h": _ratio(operating_cf, rng, 0.6, 0.8),
        "return_on_equity_fy_h": _pct_of(net, equity),
        "return_on_assets_fy_h": _pct_of(net, assets),
        "debt_to_equity_fy_h": [round(d / e, 2) for d, e in zip(debt, equity, strict=True)],
        "price_earnings_fy_h": _pct(rng, 18, 35, n),
        "price_book_fy_h": _pct(rng, 2, 6, n),
        "operating_margin_fy_h": _pct_of(_minus(operating, depreciation), revenue),
        "net_margin_fy_h": _pct_of(net, revenue),
        "current_ratio_fy_h": _pct(rng, 1.1, 2.2, n),
        "quick_ratio_fy_h": _pct(rng, 0.8, 1.6, n),
        "asset_turnover_fy_h": _pct(rng, 0.5, 1.2, n),
        "invent_turnover_fy_h": _pct(rng, 4, 9, n),
        "price_sales_fy_h": _pct(rng, 1.5, 5, n),
    }


def _banking_annual(rng: random.Random, n: int) -> dict[str, Any]:
    revenue = _history(rng, rng.uniform(100_000, 300_000) * CRORE, 0.14, n)
    interest_income = _ratio(revenue, rng, 0.82, 0.88)
    interest_expense = _ratio(interest_income, rng, 0.48, 0.55)
    pretax = _ratio(revenue, rng, 0.22, 0.28)
    tax = _ratio(pretax, rng, 0.24, 0.26)
    net = _minus(pretax, tax)
    assets = _history(rng, revenue[0] * 11, 0.12, n)
    equity = _ratio(assets, rng, 0.1, 0.13)
    deposits = _ratio(assets, rng, 0.72, 0.78)
    debt = _ratio(assets, rng, 0.08, 0.1)
    loans_net = _ratio(deposits, rng, 0.8, 0.9)
    return {
        "total_revenue_fy_h": revenue,
        "interest_income_fy_h": interest_income,
        "minority_interest_exp_fy_h": _ratio(revenue, rng, 0.001, 0.003),
        "other_oper_expense_total_fy_h": _ratio(revenue, rng, 0.2, 0.26),
        "interest_expense_on_debt_fy_h": interest_expense,
        "interest_income_net_fy_h": _minus(interest_income, interest_expense),
        "net_interest_margin_fy_h": _pct(rng, 3.4, 4.3, n),
        "non_interest_income_fy_h": _ratio(revenue, rng, 0.12, 0.18),
        "depreciation_depletion_fy_h": _ratio(revenue, rng, 0.008, 0.012),
        "pretax_income_fy_h": pretax,
        "income_tax_fy_h": tax,
        "net_income_fy_h": net,
        "oper_income_fy_h": pretax,
        "dividend_payout_ratio_fy_h": _pct(rng, 15, 25, n),
        "common_stock_par_fy_h": _ratio(equity, rng, 0.015, 0.02),
        "retained_earnings_fy_h": _ratio(equity, rng, 0.85, 0.9),
        "total_equity_fy_h": equity,
        "total_deposits_fy_h": deposits,
        "total_debt_fy_h": debt,
        "other_liabilities_total_fy_h": _ratio(assets, rng, 0.04, 0.06),
        "total_liabilities_fy_h": _minus(assets, equity),
        "loans_net_fy_h": loans_net,
        "loans_gross_fy_h": _ratio(loans_net, rng, 1.02, 1.04),
        "ppe_total_net_fy_h": _ratio(assets, rng, 0.01, 0.015),
        "cwip_fy_h": _ratio(assets, rng, 0.0005, 0.001),
        "long_term_investments_fy_h": _ratio(assets, rng, 0.18, 0.22),
        "long_term_other_assets_total_fy_h": _ratio(assets, rng, 0.03, 0.05),
        "total_assets_fy_h": assets,
        "cash_f_operating_activities_fy_h": _ratio(net, rng, 0.8, 2.5),
        "cash_f_investing_activities_fy_h": [round(-v, 2) for v in _ratio(net, rng, 0.2, 0.6)],
        "cash_f_financing_activities_fy_h": _ratio(net, rng, -0.4, 0.6),
        "free_cash_flow_fy_h": _ratio(net, rng, 0.6, 1.8),
        "return_on_equity_fy_h": _pct_of(net, equity),
        "return_on_assets_fy_h": _pct_of(net, assets),
        "debt_to_equity_fy_h": [round(d / e, 2) for d, e in zip(debt, equity, strict=True)],
        "price_earnings_fy_h": _pct(rng, 14, 24, n),
        "price_book_fy_h": _pct(rng, 2, 4, n),
        "efficiency_ratio_fy_h": _pct(rng, 38, 48, n),
        "loans_net_total_deposits_fy_h": _pct_of(loans_net, deposits),
        "demand_deposits_total_deposits_fy_h": _pct(rng, 38, 46, n),
        "nonperf_loans_loans_gross_fy_h": _pct(rng, 1.1, 2.2, n),
        "loan_loss_coverage_fy_h": _pct(rng, 65, 80, n),
    }


def _quarterly(rng: random.Random, annual_revenue: float, n: int, *, banking: bool) -> dict[str, Any]:
    revenue = _history(rng, annual_revenue / 4, 0.025, n, jitter=0.04)
    expenses = _ratio(revenue, rng, 0.7, 0.8)
    operating = _minus(revenue, expenses)
    depreciation = _ratio(revenue, rng, 0.01, 0.04)
    pretax = _ratio(operating, rng, 0.8, 0.95)
    net = _ratio(pretax, rng, 0.74, 0.76)
    out: dict[str, Any] = {
        "total_revenue_fq_h": revenue,
        "total_oper_expense_fq_h": expenses,
        "depreciation_fq_h": depreciation,
        "pretax_income_fq_h": pretax,
        "tax_rate_fq_h": _pct(rng, 24, 26, n),
        "net_income_fq_h": net,
        "gross_profit_fq_h": _ratio(revenue, rng, 0.36, 0.42),
        "oper_income_fq_h": operating,
    }
    if banking:
        interest_income = _ratio(revenue, rng, 0.82, 0.88)
        loans = _history(rng, annual_revenue * 7, 0.03, n)
        npl = _ratio(loans, rng, 0.012, 0.02)
        out |= {
            "interest_income_fq_h": interest_income,
            "interest_income_net_fq_h": _ratio(interest_income, rng, 0.45, 0.5),
            "net_interest_margin_fq_h": _pct(rng, 3.4, 4.3, n),
            "non_interest_income_fq_h": _ratio(revenue, rng, 0.12, 0.18),
            "nonperf_loans_loans_gross_fq_h": _pct(rng, 1.1, 2.2, n),
            "nonperf_loans_fq_h": npl,
            "loan_loss_allowances_fq_h": _ratio(npl, rng, 0.65, 0.8),
            "loans_net_fq_h": loans,
        }
    else:
        out |= {
            "revenue_fq_h": revenue,
            "operating_margin_fq_h": _pct_of(operating, revenue),
            "non_oper_income_fq_h": _ratio(revenue, rng, 0.01, 0.03),
            "non_oper_interest_income_fq_h": _ratio(revenue, rng, 0.003, 0.01),
        }
    return out


def synthetic_fundamentals(symbol: Symbol, *, as_of: datetime) -> FieldMap:
    """Build a full synthetic fundamentals map for ``symbol``."""
    banking = looks_like_bank(symbol)
    rng = seeded_rng(symbol.qualified, "fundamentals", "banking" if banking else "non-banking")

    annual = (_banking_annual if banking else _non_banking_annual)(rng, ANNUAL_PERIODS)
    revenue_now = annual["total_revenue_fy_h"][0]
    quarterly = _quarterly(rng, revenue_now, QUARTERLY_PERIODS, banking=banking)

    close = round(rng.uniform(1500, 2500), 2)
    shares = round(revenue_now * rng.uniform(2.5, 4.0) / close)
    net_ttm = sum(quarterly["net_income_fq_h"][:4])
    eps_quarters = [round(v / shares, 2) for v in quarterly["net_income_fq_h"]]
    quarterly["earnings_per_share_basic_fq_h"] = eps_quarters
    annual["earnings_per_share_basic_fy_h"] = [round(v / shares, 2) for v in annual["net_income_fy_h"]]

    payload: dict[str, Any] = {
        **annual,
        **quarterly,
        "years": annual_period_labels(as_of.date(), ANNUAL_PERIODS),
        "sector": "Private Sector Bank" if banking else "Diversified",
        "industry": "Banks" if banking else "Conglomerates",
        "report_type": "banking" if banking else "non-banking",
        "close": close,
        "market_cap": round(close * shares, 2),
        "total_shares_outstanding_current": shares,
        "net_income_ttm": round(net_ttm, 2),
        "oper_income_ttm": round(sum(quarterly["oper_income_fq_h"][:4]), 2),
        "total_equity_fq": annual["total_equity_fy_h"][0],
        "total_debt_fq": annual["total_debt_fy_h"][0],
        "total_assets_fq": annual["total_assets_fy_h"][0],
        "return_on_equity_fq": annual["return_on_equity_fy_h"][0],
        "return_on_assets_fq": annual["return_on_assets_fy_h"][0],
        "earnings_per_share_basic_ttm": round(sum(eps_quarters[:4]), 2),
        "price_earnings_ttm": round(close * shares / net_ttm, 2) if net_ttm else None,
        "dividends_yield": round(rng.uniform(0.5, 2.0), 2),
    }
    return FieldMap.from_payload(payload)


class SyntheticFundamentalsSource:
    """:class:`FundamentalsSource` backed by :func:`synthetic_fundamentals`."""

    def __init__(self, *, clock: Clock = _utcnow) -> None:
        self._clock = clock

    async def get_fundamentals(self, symbol: Symbol) -> FieldMap:
        return synthetic_fundamentals(symbol, as_of=self._clock())


class SyntheticPriceSource:
    """:class:`PriceHistorySource` producing a bounded random walk.

    Starts between 1500 and 2500 and moves at most 2% per bar, with bar
    spacing and count taken from the timeframe.
    """

    def __init__(self, *, clock: Clock = _utcnow) -> None:
        self._clock = clock

    async def get_price_history(self, symbol: Symbol, timeframe: Timeframe) -> list[PricePoint]:
        rng = seeded_rng(symbol.qualified, "price", timeframe.value)
        end = self._clock().date()
        spacing = timedelta(days=timeframe.bar_spacing_days)
        count = timeframe.data_points

        price = rng.uniform(1500, 2500)
        points: list[PricePoint] = []
        for i in range(count):
            day = end - spacing * (count - 1 - i)
            points.append(PricePoint(time=timestamp_of(day), close=round(price, 2)))
            price *= 1 + rng.uniform(-0.02, 0.02)
        return points


class SyntheticCandleSource:
    """:class:`CandleSource` producing weekday daily bars over the lookback.

    Opens between 1000 and 3000 and moves at most 2% per session; highs and
    lows stay within 1% of the open/close range and volume lies between
    100k and 1.1M shares.
    """

    def __init__(self, *, clock: Clock = _utcnow) -> None:
        self._clock = clock

    async def get_candles(self, symbol: Symbol, timeframe: Timeframe) -> CandleSeries:
        rng = seeded_rng(symbol.qualified, "candles", timeframe.value)
        end = self._clock().date()
        start = end - timedelta(days=timeframe.lookback_days)

        price = rng.uniform(1000, 3000)
        candles: list[Candle] = []
        day = start
        while day <= end:
            if day.weekday() < 5:
                close = price * (1 + rng.uniform(-0.02, 0.02))
                high = max(price, close) * (1 + rng.uniform(0, 0.01))
                low = min(price, close) * (1 - rng.uniform(0, 0.01))
                candles.append(
                    Candle(
                        time=timestamp_of(day),
                        open=round(price, 2),
                        high=round(high, 2),
                        low=round(low, 2),
                        close=round(close, 2),
                        volume=rng.randint(100_000, 1_100_000),
                    )
                )
                price = close
            day += timedelta(days=1)
        return CandleSeries(exchange=symbol.exchange, candles=tuple(candles))


class SyntheticEpsSource:
    """:class:`FundamentalSeriesSource` producing quarterly TTM EPS.

    Starts between 35 and 55 and moves at most 1% per quarter; samples are
    stamped at completed quarter ends.
    """

    def __init__(self, *, clock: Clock = _utcnow) -> None:
        self._clock = clock

    async def get_fundamental_series(
        self, symbol: Symbol, field_id: str
    ) -> list[FundamentalSample]:
        rng = seeded_rng(symbol.qualified, "series", field_id)
        dates = sorted(quarter_end_dates(self._clock().date(), EPS_QUARTERS))
        value = rng.uniform(35, 55)
        samples: list[FundamentalSample] = []
        for d in dates:
            samples.append(FundamentalSample(time=timestamp_of(d), value=round(value, 2)))
            value *= 1 + rng.uniform(-0.01, 0.01)
        return samples


__all__ = [
    "ANNUAL_PERIODS",
    "BANK_MARKERS",
    "QUARTERLY_PERIODS",
    "SyntheticCandleSource",
    "SyntheticEpsSource",
    "SyntheticFundamentalsSource",
    "SyntheticPriceSource",
    "looks_like_bank",
    "seeded_rng",
    "synthetic_fundamentals",
]
