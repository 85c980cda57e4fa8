# src/screener_api/domain/services/statement_builder.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Statement builder.

Purpose:
    Turn a :class:`FieldMap` and a row schema into a :class:`StatementResult`
    with one display string and one raw number per period for every
    non-section row.

Design:
    * Output row count always equals schema length; column count always
      equals the resolved period count. Short series are padded with
      ``None``; long ones are cut at the period count.
    * Computed rows see the raw (unconverted) values of every row built
      before them.
    * Currency rows are converted to crores before formatting. Percentage
      and number rows are never converted.
    * Pure and deterministic: identical inputs give identical output.
    * No logging.

Layer:
    domain/services
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date, datetime
from typing import Final

from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.entities.row_spec import ComputedRow, FieldRow, RowSpec, SectionRow
from screener_api.domain.entities.statement import MetricRow, StatementResult
from screener_api.domain.enums.company_type import CompanyType
from screener_api.domain.enums.provenance import Provenance
from screener_api.domain.enums.statement import StatementKind, ValueType
from screener_api.domain.services.fiscal_calendar import (
    annual_period_labels,
    quarter_period_labels,
)
from screener_api.domain.services.formatting import format_value, to_crores

FALLBACK_YEARS: Final[int] = 12
FALLBACK_QUARTERS: Final[int] = 13


def resolve_periods(fields: FieldMap, kind: StatementKind, *, as_of: date) -> list[str]:
    """Resolve period labels for ``kind``, most recent first.

    The period count is the length of the longest populated series carrying
    the statement's suffix, or the fixed fallback count when there is none.
    Explicit labels from the payload are used when they match that count;
    otherwise labels come from the fiscal calendar.
    """
    fallback = FALLBACK_QUARTERS if kind.is_quarterly else FALLBACK_YEARS
    count = fields.longest(kind.series_suffix) or fallback
    if fields.period_labels and len(fields.period_labels) == count:
        return list(fields.period_labels)
    if kind.is_quarterly:
        return quarter_period_labels(as_of, count)
    return annual_period_labels(as_of, count)


def _fit(values: Sequence[float | None], length: int) -> list[float | None]:
    out: list[float | None] = []
    for i in range(length):
        v = values[i] if i < len(values) else None
        out.append(v if v is not None and math.isfinite(v) else None)
    return out


def build_rows(
    fields: FieldMap,
    specs: Sequence[RowSpec],
    period_count: int,
    *,
    convert_to_crores: bool = True,
) -> list[MetricRow]:
    """Materialize ``specs`` against ``fields``.

    Args:
        fields: Flattened fundamentals.
        specs: Row schema, in display order.
        period_count: Number of columns.
        convert_to_crores: Divide currency rows by one crore.

    Returns:
        One :class:`MetricRow` per spec, in order.
    """
    raw_by_key: dict[str, list[float | None]] = {}
    rows: list[MetricRow] = []

    for spec in specs:
        if isinstance(spec, SectionRow):
            rows.append(
                MetricRow(
                    key=spec.key,
                    label=spec.label,
                    value_type=ValueType.SECTION,
                    level=spec.level,
                    is_section=True,
                )
            )
            continue

        if isinstance(spec, FieldRow):
            raw = _fit(fields.values(spec.field, period_count), period_count)
        elif isinstance(spec, ComputedRow):
            raw = _fit(spec.derive(fields, raw_by_key, period_count), period_count)
        else:  # pragma: no cover - RowSpec is a closed union
            raise TypeError(f"unsupported row spec: {type(spec).__name__}")

        raw_by_key[spec.key] = raw

        if spec.value_type is ValueType.CURRENCY and convert_to_crores:
            shown = [to_crores(v) for v in raw]
        else:
            shown = raw

        rows.append(
            MetricRow(
                key=spec.key,
                label=spec.label,
                value_type=spec.value_type,
                values=tuple(format_value(v, spec.value_type) for v in shown),
                raw_values=tuple(shown),
                level=spec.level,
                is_subtotal=spec.is_subtotal,
                is_total=spec.is_total,
            )
        )
    return rows


def build_statement(
    fields: FieldMap,
    specs: Sequence[RowSpec],
    *,
    symbol: str,
    kind: StatementKind,
    company_type: CompanyType,
    provenance: Provenance,
    as_of: datetime,
    convert_to_crores: bool = True,
) -> StatementResult:
    """Build a complete statement.

    ``as_of`` drives fiscal-calendar period labels and is stamped as
    ``last_updated``; callers pass a fixed value for reproducible output.
    """
    periods = resolve_periods(fields, kind, as_of=as_of.date())
    rows = build_rows(fields, specs, len(periods), convert_to_crores=convert_to_crores)
    return StatementResult(
        symbol=symbol,
        kind=kind,
        company_type=company_type,
        periods=tuple(periods),
        rows=tuple(rows),
        last_updated=as_of,
        provenance=provenance,
    )


__all__ = [
    "FALLBACK_QUARTERS",
    "FALLBACK_YEARS",
    "build_rows",
    "build_statement",
    "resolve_periods",
]
