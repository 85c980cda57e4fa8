# src/screener_api/domain/entities/series.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Time-series entities for derived valuation charts.

Purpose:
    Value objects shared by the price/fundamental fusion pipeline. All
    timestamps are UTC epoch seconds, matching the upstream vendor.

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PricePoint:
    """Closing price at one bar timestamp."""

    time: int
    close: float


@dataclass(frozen=True, slots=True)
class FundamentalSample:
    """A low-frequency fundamental observation (TTM EPS, TTM sales)."""

    time: int
    value: float


@dataclass(frozen=True, slots=True)
class DerivedPoint:
    """One output sample of a derived ratio series.

    Attributes:
        time: Bar timestamp (epoch seconds).
        price: Closing price.
        fundamental: Step-interpolated fundamental in effect at ``time``.
        ratio: ``price * multiplier / fundamental``.
        bar: Quarter's fundamental on points near the quarter's latest bar,
            otherwise ``None``.
    """

    time: int
    price: float
    fundamental: float
    ratio: float
    bar: float | None = None


@dataclass(frozen=True, slots=True)
class QuarterBucket:
    """Derived points falling in one fiscal quarter.

    Attributes:
        key: Fiscal bucket key, e.g. ``"2025-Q3"``.
        points: Points in the quarter, chronological.
        fundamental: Fundamental value at the quarter's latest point.
    """

    key: str
    points: tuple[DerivedPoint, ...]
    fundamental: float

    @property
    def representative(self) -> DerivedPoint:
        """Latest-dated point in the quarter."""
        return max(self.points, key=lambda p: p.time)


@dataclass(frozen=True, slots=True)
class DerivedSeries:
    """Ratio series plus its static median reference line."""

    points: tuple[DerivedPoint, ...]
    median: float

    @property
    def ratios(self) -> list[float]:
        """Ratios of all points, chronological."""
        return [p.ratio for p in self.points]


@dataclass(frozen=True, slots=True)
class MarginPoint:
    """Quarterly profitability margins (percent of revenue)."""

    time: int
    quarter: str
    revenue: float
    gross_margin: float | None
    operating_margin: float | None
    net_margin: float | None


__all__ = [
    "DerivedPoint",
    "DerivedSeries",
    "FundamentalSample",
    "MarginPoint",
    "PricePoint",
    "QuarterBucket",
]
