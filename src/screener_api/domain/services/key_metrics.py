# src/screener_api/domain/services/key_metrics.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Key metrics not reported directly by vendors.

Synopsis:
    ROCE, book value per share and price-to-book, each estimated through an
    ordered list of methods. The first method whose inputs are all present
    and non-zero wins, and the result records which method produced it.

ROCE methods (capital employed = total equity + total debt):
    1. ``operating_income_ttm / capital_employed * 100``
    2. ``net_income_ttm * 1.4 / capital_employed * 100`` (EBIT proxy)
    3. ``return_on_assets * total_assets / capital_employed``
    4. ``return_on_equity * total_equity / capital_employed``

Book value per share methods:
    1. ``total_equity / shares_outstanding``
    2. ``close / price_to_book``
    3. ``market_cap / price_to_book / shares_outstanding``

Layer:
    domain/services
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from screener_api.domain.entities.field_map import FieldMap

EBIT_PROXY_MULTIPLIER = 1.4


@dataclass(frozen=True, slots=True)
class MetricEstimate:
    """Estimated value and the method that produced it (``None`` if none did)."""

    value: float | None
    method: str | None

    @property
    def available(self) -> bool:
        return self.value is not None


@dataclass(frozen=True, slots=True)
class KeyMetrics:
    """Headline valuation and return figures for one company."""

    roce: MetricEstimate
    book_value: MetricEstimate
    price_to_book: MetricEstimate
    close: float | None
    market_cap: float | None
    price_earnings: float | None
    dividend_yield: float | None


_NONE = MetricEstimate(value=None, method=None)


def _nz(value: float | None) -> float | None:
    return value if value else None


def _capital_employed(equity: float | None, debt: float | None) -> float | None:
    if not equity or not debt:
        return None
    capital = equity + debt
    return capital if capital > 0 else None


def estimate_roce(
    *,
    operating_income: float | None,
    net_income: float | None,
    total_equity: float | None,
    total_debt: float | None,
    total_assets: float | None = None,
    return_on_assets: float | None = None,
    return_on_equity: float | None = None,
) -> MetricEstimate:
    """Estimate ROCE (percent) from whichever inputs are available."""
    capital = _capital_employed(total_equity, total_debt)
    if capital is None:
        return _NONE
    if _nz(operating_income) is not None:
        return MetricEstimate(operating_income / capital * 100, "operating_income")  # type: ignore[operator]
    if _nz(net_income) is not None:
        ebit = net_income * EBIT_PROXY_MULTIPLIER  # type: ignore[operator]
        return MetricEstimate(ebit / capital * 100, "net_income_proxy")
    if _nz(return_on_assets) is not None and total_assets and total_assets > 0:
        return MetricEstimate(
            return_on_assets * (total_assets / capital),  # type: ignore[operator]
            "return_on_assets",
        )
    if _nz(return_on_equity) is not None and total_equity is not None:
        equity_ratio = total_equity / capital
        if equity_ratio > 0:
            return MetricEstimate(return_on_equity * equity_ratio, "return_on_equity")  # type: ignore[operator]
    return _NONE


def estimate_book_value(
    *,
    total_equity: float | None,
    shares_outstanding: float | None,
    close: float | None,
    price_to_book: float | None,
    market_cap: float | None,
) -> MetricEstimate:
    """Estimate book value per share."""
    if total_equity and shares_outstanding and shares_outstanding > 0:
        return MetricEstimate(total_equity / shares_outstanding, "equity_per_share")
    if close and price_to_book and price_to_book > 0:
        return MetricEstimate(close / price_to_book, "price_over_pb")
    if market_cap and price_to_book and price_to_book > 0:
        if shares_outstanding and shares_outstanding > 0:
            return MetricEstimate(
                market_cap / price_to_book / shares_outstanding, "market_cap_over_pb"
            )
    return _NONE


def compute_key_metrics(fields: FieldMap) -> KeyMetrics:
    """Derive key metrics from the scalar fields of ``fields``.

    Reported values win over estimates: ``return_on_invested_capital_fq``
    and ``price_book_fq`` are used as-is when present.
    """
    s = fields.scalar
    shares = fields.first_scalar(
        "total_shares_outstanding_current",
        "basic_shares_outstanding_fq",
        "total_shares_outstanding_fq",
    )
    close = s("close")

    reported_roce = _nz(s("return_on_invested_capital_fq"))
    if reported_roce is not None:
        roce = MetricEstimate(reported_roce, "reported")
    else:
        roce = estimate_roce(
            operating_income=s("oper_income_ttm"),
            net_income=s("net_income_ttm"),
            total_equity=s("total_equity_fq"),
            total_debt=s("total_debt_fq"),
            total_assets=s("total_assets_fq"),
            return_on_assets=s("return_on_assets_fq"),
            return_on_equity=s("return_on_equity_fq"),
        )

    reported_pb = _nz(s("price_book_fq"))
    book = estimate_book_value(
        total_equity=s("total_equity_fq"),
        shares_outstanding=shares,
        close=close,
        price_to_book=reported_pb,
        market_cap=s("market_cap"),
    )

    if reported_pb is not None:
        pb = MetricEstimate(reported_pb, "reported")
    elif close and book.value and book.value > 0:
        pb = MetricEstimate(close / book.value, "close_over_book_value")
    else:
        pb = _NONE

    return KeyMetrics(
        roce=roce,
        book_value=book,
        price_to_book=pb,
        close=close,
        market_cap=s("market_cap"),
        price_earnings=s("price_earnings_ttm"),
        dividend_yield=s("dividends_yield"),
    )


def roce_series(
    fields: FieldMap,
    rows: Mapping[str, Sequence[float | None]],
    periods: int,
) -> list[float | None]:
    """Per-year ROCE for the ratios statement.

    Applies the first two ROCE methods period by period using the annual
    ``*_fy_h`` histories.
    """
    get: Callable[[str], list[float | None]] = lambda name: fields.values(name, periods)  # noqa: E731
    oper, net = get("oper_income_fy_h"), get("net_income_fy_h")
    equity, debt = get("total_equity_fy_h"), get("total_debt_fy_h")
    out: list[float | None] = []
    for i in range(periods):
        estimate = estimate_roce(
            operating_income=oper[i],
            net_income=net[i],
            total_equity=equity[i],
            total_debt=debt[i],
        )
        out.append(estimate.value)
    return out


__all__ = [
    "EBIT_PROXY_MULTIPLIER",
    "KeyMetrics",
    "MetricEstimate",
    "compute_key_metrics",
    "estimate_book_value",
    "estimate_roce",
    "roce_series",
]
