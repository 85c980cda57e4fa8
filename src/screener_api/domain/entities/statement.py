# src/screener_api/domain/entities/statement.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Materialized statement entities.

Purpose:
    ``MetricRow`` is one built row (display strings plus the raw numbers
    behind them); ``StatementResult`` is the full table for one company and
    statement kind.

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from screener_api.domain.enums.company_type import CompanyType
from screener_api.domain.enums.provenance import Provenance
from screener_api.domain.enums.statement import StatementKind, ValueType


@dataclass(frozen=True, slots=True)
class MetricRow:
    """One materialized statement row.

    Attributes:
        key: Stable row identifier from the row schema.
        label: Human-readable label.
        value_type: Display type.
        values: Formatted display strings, one per period.
        raw_values: Numbers behind ``values`` (after unit conversion), one per
            period; ``None`` marks a gap.
        level: Nesting level for indented rendering.
        is_section: True for structural headers, which carry no values.
        is_subtotal: True for subtotal rows.
        is_total: True for grand-total rows.
    """

    key: str
    label: str
    value_type: ValueType
    values: tuple[str, ...] = ()
    raw_values: tuple[float | None, ...] = ()
    level: int = 0
    is_section: bool = False
    is_subtotal: bool = False
    is_total: bool = False

    def __post_init__(self) -> None:
        if len(self.values) != len(self.raw_values):
            raise ValueError(
                f"row {self.key!r}: {len(self.values)} display values "
                f"but {len(self.raw_values)} raw values"
            )
        if self.is_section and self.values:
            raise ValueError(f"section row {self.key!r} cannot carry values")


@dataclass(frozen=True, slots=True)
class StatementResult:
    """A complete, normalized statement for one company."""

    symbol: str
    kind: StatementKind
    company_type: CompanyType
    periods: tuple[str, ...]
    rows: tuple[MetricRow, ...]
    last_updated: datetime
    provenance: Provenance

    def __post_init__(self) -> None:
        width = len(self.periods)
        for row in self.rows:
            if not row.is_section and len(row.raw_values) != width:
                raise ValueError(
                    f"row {row.key!r} has {len(row.raw_values)} values for {width} periods"
                )

    def row(self, key: str) -> MetricRow | None:
        """Return the row with ``key``, if present."""
        for r in self.rows:
            if r.key == key:
                return r
        return None


__all__ = ["MetricRow", "StatementResult"]
