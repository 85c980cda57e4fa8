# tests/unit/domain/test_sales_margin.py
from __future__ import annotations

from datetime import date

from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.services.fiscal_calendar import quarter_end_dates, timestamp_of
from screener_api.domain.services.sales_margin import build_margin_series, margin_pct

QUARTERS = quarter_end_dates(date(2025, 6, 15), 4)


def _fields() -> FieldMap:
    return FieldMap.from_payload(
        {
            "total_revenue_fq_h": [200.0, 0.0, 100.0, 80.0],
            "gross_profit_fq_h": [80.0, 0.0, 30.0, None],
            "ebit_fq_h": [40.0, 0.0, 15.0, 8.0],
            "net_income_fq_h": [30.0, 0.0, 10.0, 4.0],
        }
    )


def test_margin_pct() -> None:
    assert margin_pct(25.0, 200.0) == 12.5
    assert margin_pct(1.0, 3.0) == 33.33
    assert margin_pct(None, 100.0) is None
    assert margin_pct(5.0, 0.0) is None


def test_margins_are_oldest_first_and_skip_quarters_without_revenue() -> None:
    points = build_margin_series(_fields(), QUARTERS)

    assert [p.quarter for p in points] == ["Jun 2024", "Sep 2024", "Mar 2025"]
    assert points[0].time == timestamp_of(date(2024, 6, 30))
    assert points[0].gross_margin is None
    assert (points[0].operating_margin, points[0].net_margin) == (10.0, 5.0)
    assert (points[-1].gross_margin, points[-1].operating_margin, points[-1].net_margin) == (
        40.0,
        20.0,
        15.0,
    )


def test_limit_keeps_the_most_recent_quarters() -> None:
    points = build_margin_series(_fields(), QUARTERS, limit=2)
    assert [p.quarter for p in points] == ["Sep 2024", "Mar 2025"]
    assert build_margin_series(_fields(), QUARTERS, limit=0) == []


def test_revenue_falls_back_to_alternative_field() -> None:
    fields = FieldMap.from_payload({"revenue_fq_h": [50.0], "net_income_fq_h": [5.0]})
    (point,) = build_margin_series(fields, QUARTERS[:1])
    assert point.revenue == 50.0
    assert point.net_margin == 10.0
    assert point.operating_margin is None
