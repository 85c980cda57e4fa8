# src/screener_api/domain/services/fiscal_calendar.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Indian fiscal calendar.

Purpose:
    Single home for every quarter and fiscal-year computation in the
    service. The Indian fiscal year runs April to March and is named by the
    calendar year in which it ends, so FY2025 covers Apr 2024 to Mar 2025.

Quarter mapping (by calendar month of the date):

    ========  ==========  ===================
    Months    Label       Fiscal attribution
    ========  ==========  ===================
    Jan-Mar   Mar {Y}     Q4 of FY{Y}
    Apr-Jun   Jun {Y}     Q1 of FY{Y+1}
    Jul-Sep   Sep {Y}     Q2 of FY{Y+1}
    Oct-Dec   Dec {Y}     Q3 of FY{Y+1}
    ========  ==========  ===================

Layer:
    domain/services
"""

from __future__ import annotations

import calendar
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime

_QUARTER_END_MONTHS = (3, 6, 9, 12)


@dataclass(frozen=True, slots=True)
class FiscalQuarter:
    """Fiscal attribution of a date.

    Attributes:
        fiscal_year: Fiscal year the quarter belongs to.
        quarter: Fiscal quarter number; Q1 is Apr-Jun, Q4 is Jan-Mar.
        label: Display label naming the quarter-end month, e.g. ``"Sep 2024"``.
    """

    fiscal_year: int
    quarter: int
    label: str

    @property
    def bucket_key(self) -> str:
        """Stable grouping key, e.g. ``"2025-Q2"``."""
        return f"{self.fiscal_year}-Q{self.quarter}"


@dataclass(frozen=True, slots=True)
class AnnualValue:
    """Sum of four fiscal quarters."""

    fiscal_year: int
    value: float

    @property
    def label(self) -> str:
        """Fiscal-year label, e.g. ``"Mar 2025"``."""
        return f"Mar {self.fiscal_year}"


def quarter_label(d: date) -> FiscalQuarter:
    """Map a date to its fiscal quarter.

    Args:
        d: Any date (``datetime`` values are accepted).

    Returns:
        Fiscal year, fiscal quarter number and display label.
    """
    year, month = d.year, d.month
    if month <= 3:
        return FiscalQuarter(fiscal_year=year, quarter=4, label=f"Mar {year}")
    if month <= 6:
        return FiscalQuarter(fiscal_year=year + 1, quarter=1, label=f"Jun {year}")
    if month <= 9:
        return FiscalQuarter(fiscal_year=year + 1, quarter=2, label=f"Sep {year}")
    return FiscalQuarter(fiscal_year=year + 1, quarter=3, label=f"Dec {year}")


def fiscal_year_of(d: date) -> int:
    """Return the fiscal year containing ``d``."""
    return quarter_label(d).fiscal_year


def date_from_timestamp(ts: float) -> date:
    """Convert epoch seconds to a UTC calendar date."""
    return datetime.fromtimestamp(ts, tz=UTC).date()


def timestamp_of(d: date) -> int:
    """Epoch seconds of UTC midnight on ``d``."""
    return int(datetime(d.year, d.month, d.day, tzinfo=UTC).timestamp())


def _as_date(d: date) -> date:
    return d.date() if isinstance(d, datetime) else d


def quarter_end(d: date) -> date:
    """Last calendar day of the quarter containing ``d``."""
    month = _QUARTER_END_MONTHS[(d.month - 1) // 3]
    return date(d.year, month, calendar.monthrange(d.year, month)[1])


def previous_quarter_end(d: date) -> date:
    """Quarter end immediately before the quarter containing ``d``."""
    end = quarter_end(d)
    month = end.month - 3
    year = end.year
    if month <= 0:
        month += 12
        year -= 1
    return date(year, month, calendar.monthrange(year, month)[1])


def quarter_end_dates(as_of: date, count: int) -> list[date]:
    """Return the last ``count`` completed quarter ends, most recent first.

    A quarter counts as completed when its end date is on or before
    ``as_of``.
    """
    if count <= 0:
        return []
    as_of = _as_date(as_of)
    current = quarter_end(as_of)
    if current > as_of:
        current = previous_quarter_end(as_of)
    out = [current]
    while len(out) < count:
        current = previous_quarter_end(current)
        out.append(current)
    return out


def latest_completed_fiscal_year(as_of: date) -> int:
    """Most recent fiscal year whose 31 March is on or before ``as_of``."""
    return as_of.year if (as_of.month, as_of.day) >= (3, 31) else as_of.year - 1


def annual_period_labels(as_of: date, count: int) -> list[str]:
    """Labels for the last ``count`` completed fiscal years, most recent first."""
    latest = latest_completed_fiscal_year(as_of)
    return [f"Mar {latest - i}" for i in range(count)]


def quarter_period_labels(as_of: date, count: int) -> list[str]:
    """Labels for the last ``count`` completed quarters, most recent first."""
    return [quarter_label(d).label for d in quarter_end_dates(as_of, count)]


def annualize(
    values: Sequence[float | None],
    quarter_dates: Sequence[date],
) -> list[AnnualValue]:
    """Sum quarterly values into fiscal years.

    Quarters are grouped by fiscal attribution, not by position, so the
    result does not depend on the input being contiguous or ordered. A
    fiscal year is emitted only when all four of its quarters are present
    with a value; partial years are dropped rather than partially summed.
    When the same fiscal quarter appears twice, the first occurrence wins.

    Args:
        values: Quarterly values, paired positionally with ``quarter_dates``.
        quarter_dates: Date inside (typically the end of) each quarter.

    Returns:
        Annual sums, most recent fiscal year first.
    """
    groups: dict[int, dict[int, float | None]] = {}
    for value, d in zip(values, quarter_dates, strict=False):
        fq = quarter_label(d)
        groups.setdefault(fq.fiscal_year, {}).setdefault(fq.quarter, value)

    annual: list[AnnualValue] = []
    for fiscal_year, quarters in groups.items():
        present = [v for v in quarters.values() if v is not None]
        if len(quarters) == 4 and len(present) == 4:
            annual.append(AnnualValue(fiscal_year=fiscal_year, value=sum(present)))
    annual.sort(key=lambda a: a.fiscal_year, reverse=True)
    return annual


__all__ = [
    "AnnualValue",
    "FiscalQuarter",
    "annual_period_labels",
    "annualize",
    "date_from_timestamp",
    "fiscal_year_of",
    "latest_completed_fiscal_year",
    "previous_quarter_end",
    "quarter_end",
    "quarter_end_dates",
    "quarter_label",
    "quarter_period_labels",
    "timestamp_of",
]
