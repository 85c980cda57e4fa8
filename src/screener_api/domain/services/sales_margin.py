# src/screener_api/domain/services/sales_margin.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Quarterly profitability margins.

Computes gross, operating and net margins as a percentage of revenue for
each completed quarter, pairing quarterly ``*_fq_h`` histories (most recent
first) with quarter-end dates from the fiscal calendar.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.entities.series import MarginPoint
from screener_api.domain.services.fiscal_calendar import quarter_label, timestamp_of

REVENUE_FIELDS = ("total_revenue_fq_h", "revenue_fq_h")
GROSS_PROFIT_FIELDS = ("gross_profit_fq_h",)
OPERATING_PROFIT_FIELDS = ("ebit_fq_h", "operating_income_fq_h", "oper_income_fq_h")
NET_PROFIT_FIELDS = ("net_income_fq_h",)


def margin_pct(profit: float | None, revenue: float | None) -> float | None:
    """``profit / revenue * 100`` to two decimals; ``None`` when undefined."""
    if profit is None or not revenue:
        return None
    return round(profit / revenue * 100, 2)


def _pick(fields: FieldMap, names: Sequence[str], length: int) -> list[float | None]:
    series = fields.first_series(*names)
    if series is None:
        return [None] * length
    return list(series.padded(length).values)[:length]


def build_margin_series(
    fields: FieldMap,
    quarter_dates: Sequence[date],
    *,
    limit: int | None = None,
) -> list[MarginPoint]:
    """Build margin points, oldest first.

    Quarters without revenue are skipped. When ``limit`` is given, only the
    ``limit`` most recent remaining quarters are kept.
    """
    n = len(quarter_dates)
    revenue = _pick(fields, REVENUE_FIELDS, n)
    gross = _pick(fields, GROSS_PROFIT_FIELDS, n)
    operating = _pick(fields, OPERATING_PROFIT_FIELDS, n)
    net = _pick(fields, NET_PROFIT_FIELDS, n)

    points: list[MarginPoint] = []
    for i, d in enumerate(quarter_dates):
        rev = revenue[i]
        if not rev:
            continue
        points.append(
            MarginPoint(
                time=timestamp_of(d),
                quarter=quarter_label(d).label,
                revenue=rev,
                gross_margin=margin_pct(gross[i], rev),
                operating_margin=margin_pct(operating[i], rev),
                net_margin=margin_pct(net[i], rev),
            )
        )
    points.sort(key=lambda p: p.time)
    if limit is not None:
        points = points[-limit:] if limit > 0 else []
    return points


__all__ = ["build_margin_series", "margin_pct"]
