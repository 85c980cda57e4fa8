# src/screener_api/domain/services/derived_series.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Derived valuation series (P/E, market-cap/sales).

Purpose:
    Fuse a high-frequency price series with a low-frequency fundamental
    series into a per-bar ratio series with a sparse quarterly bar overlay
    and a static median reference line.

Pipeline:
    1. Step-interpolate the fundamental onto every price bar.
    2. ``ratio = price * multiplier / fundamental`` (0 when the fundamental
       is not positive).
    3. Drop points whose ratio falls outside the sane open interval
       ``(0, 1000)``. Points are dropped, never clamped.
    4. Bucket the survivors by fiscal quarter and set ``bar`` on points
       within seven days of each quarter's latest point.
    5. Median over the surviving ratios.

Layer:
    domain/services
"""

from __future__ import annotations

import bisect
import math
import statistics
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Final

from screener_api.domain.entities.series import (
    DerivedPoint,
    DerivedSeries,
    FundamentalSample,
    PricePoint,
    QuarterBucket,
)
from screener_api.domain.services.fiscal_calendar import (
    date_from_timestamp,
    quarter_label,
    timestamp_of,
)

SANE_RATIO_MIN: Final[float] = 0.0
SANE_RATIO_MAX: Final[float] = 1000.0
BAR_WINDOW_S: Final[int] = 7 * 86_400


def step_interpolate(
    times: Sequence[int],
    samples: Sequence[FundamentalSample],
) -> list[float | None]:
    """Value in effect at each timestamp.

    For each ``t`` the result is the latest sample with ``sample.time <= t``;
    timestamps before the first sample take the earliest sample's value.
    Returns ``None`` everywhere when ``samples`` is empty.
    """
    if not samples:
        return [None] * len(times)
    ordered = sorted(samples, key=lambda s: s.time)
    keys = [s.time for s in ordered]
    out: list[float | None] = []
    for t in times:
        idx = bisect.bisect_right(keys, t) - 1
        out.append(ordered[max(idx, 0)].value)
    return out


def compute_ratio(
    price: float,
    fundamental: float | None,
    *,
    multiplier: float = 1.0,
    precision: int = 2,
) -> float:
    """``price * multiplier / fundamental`` rounded, or 0 when undefined."""
    if fundamental is None or not math.isfinite(fundamental) or fundamental <= 0:
        return 0.0
    return round(price * multiplier / fundamental, precision)


def is_sane_ratio(ratio: float) -> bool:
    """True when ``ratio`` lies strictly between the sane bounds."""
    return math.isfinite(ratio) and SANE_RATIO_MIN < ratio < SANE_RATIO_MAX


def median(values: Iterable[float]) -> float:
    """Standard median; 0.0 for an empty input."""
    collected = list(values)
    if not collected:
        return 0.0
    return float(statistics.median(collected))


def bucket_by_quarter(points: Sequence[DerivedPoint]) -> list[QuarterBucket]:
    """Group points by fiscal quarter, chronological within and across buckets."""
    grouped: dict[str, list[DerivedPoint]] = {}
    for p in sorted(points, key=lambda p: p.time):
        key = quarter_label(date_from_timestamp(p.time)).bucket_key
        grouped.setdefault(key, []).append(p)

    buckets: list[QuarterBucket] = []
    for key, members in grouped.items():
        latest = max(members, key=lambda p: p.time)
        buckets.append(
            QuarterBucket(key=key, points=tuple(members), fundamental=latest.fundamental)
        )
    return buckets


def mark_quarter_bars(points: Sequence[DerivedPoint]) -> list[DerivedPoint]:
    """Return ``points`` (chronological) with the quarterly ``bar`` field set.

    A point carries its quarter's fundamental as ``bar`` when it lies within
    :data:`BAR_WINDOW_S` of the quarter's latest point; every other point
    carries ``None``.
    """
    out: list[DerivedPoint] = []
    for bucket in bucket_by_quarter(points):
        anchor = bucket.representative.time
        for p in bucket.points:
            bar = bucket.fundamental if anchor - p.time <= BAR_WINDOW_S else None
            out.append(
                DerivedPoint(
                    time=p.time,
                    price=p.price,
                    fundamental=p.fundamental,
                    ratio=p.ratio,
                    bar=bar,
                )
            )
    return out


def build_derived_series(
    prices: Sequence[PricePoint],
    samples: Sequence[FundamentalSample],
    *,
    multiplier: float = 1.0,
    precision: int = 2,
) -> DerivedSeries:
    """Fuse ``prices`` with ``samples`` into a ratio series.

    Args:
        prices: Price bars in any order.
        samples: Fundamental observations in any order.
        multiplier: Scales the price before division (shares outstanding
            for market-cap/sales, 1 for P/E).
        precision: Decimal places kept on each ratio.

    Returns:
        Chronological surviving points and their median ratio. Empty when
        either input is empty.
    """
    if not prices or not samples:
        return DerivedSeries(points=(), median=0.0)

    ordered = sorted(prices, key=lambda p: p.time)
    effective = step_interpolate([p.time for p in ordered], samples)

    kept: list[DerivedPoint] = []
    for price, fundamental in zip(ordered, effective, strict=True):
        if fundamental is None:
            continue
        ratio = compute_ratio(
            price.close, fundamental, multiplier=multiplier, precision=precision
        )
        if not is_sane_ratio(ratio):
            continue
        kept.append(
            DerivedPoint(time=price.time, price=price.close, fundamental=fundamental, ratio=ratio)
        )

    marked = mark_quarter_bars(kept)
    return DerivedSeries(points=tuple(marked), median=median(p.ratio for p in marked))


def ttm_sales_samples(
    quarterly_revenues: Sequence[float | None],
    quarter_dates: Sequence[date],
) -> list[FundamentalSample]:
    """Trailing-twelve-month revenue at each quarter end.

    ``quarterly_revenues`` and ``quarter_dates`` are most recent first. Each
    sample sums four consecutive quarters ending at its date; windows with
    a missing quarter are skipped.

    Returns:
        Samples in chronological order.
    """
    pairs = list(zip(quarterly_revenues, quarter_dates, strict=False))
    revenues = [value for value, _ in pairs]
    samples = [
        FundamentalSample(time=timestamp_of(pairs[i][1]), value=total)
        for i, total in ttm_windows(revenues)
    ]
    samples.sort(key=lambda s: s.time)
    return samples


def ttm_windows(quarterly_revenues: Sequence[float | None]) -> list[tuple[int, float]]:
    """``(start index, sum)`` of every run of four consecutive populated quarters."""
    windows: list[tuple[int, float]] = []
    for i in range(len(quarterly_revenues) - 3):
        window = quarterly_revenues[i : i + 4]
        if any(v is None for v in window):
            continue
        windows.append((i, sum(v for v in window if v is not None)))
    return windows


__all__ = [
    "BAR_WINDOW_S",
    "SANE_RATIO_MAX",
    "SANE_RATIO_MIN",
    "bucket_by_quarter",
    "build_derived_series",
    "compute_ratio",
    "is_sane_ratio",
    "mark_quarter_bars",
    "median",
    "step_interpolate",
    "ttm_sales_samples",
    "ttm_windows",
]
