# src/screener_api/application/schemas/dto/statements.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Application DTOs for tabular financial statements.

Synopsis:
    Strict (Pydantic v2) DTOs returned by the statement use case and cached
    as JSON. ``raw_values`` carries the numbers behind the display strings
    (in crores for currency rows).

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from screener_api.application.schemas.dto.base import BaseDTO
from screener_api.domain.entities.statement import MetricRow, StatementResult
from screener_api.domain.enums.company_type import CompanyType
from screener_api.domain.enums.provenance import Provenance
from screener_api.domain.enums.statement import StatementKind, ValueType


class MetricRowDTO(BaseDTO):
    """One statement row."""

    key: str
    label: str
    values: list[str]
    raw_values: list[float | None]
    type: ValueType
    is_section: bool = False
    is_subtotal: bool = False
    is_total: bool = False
    level: int = 0

    @classmethod
    def from_entity(cls, row: MetricRow) -> MetricRowDTO:
        return cls(
            key=row.key,
            label=row.label,
            values=list(row.values),
            raw_values=list(row.raw_values),
            type=row.value_type,
            is_section=row.is_section,
            is_subtotal=row.is_subtotal,
            is_total=row.is_total,
            level=row.level,
        )


class StatementDTO(BaseDTO):
    """A normalized statement for one company.

    Attributes:
        symbol: Exchange-qualified symbol, e.g. ``NSE:RELIANCE``.
        kind: Statement kind.
        periods: Period labels, most recent first.
        rows: Rows in display order.
        company_type: Classifier verdict that selected the row schema.
        last_updated: UTC time the statement was built.
        provenance: Fallback tier that supplied the data.
        cached: True when served from the response cache.
    """

    symbol: str
    kind: StatementKind
    periods: list[str]
    rows: list[MetricRowDTO]
    company_type: CompanyType
    last_updated: datetime
    provenance: Provenance
    cached: bool = Field(default=False)

    @classmethod
    def from_entity(cls, result: StatementResult) -> StatementDTO:
        return cls(
            symbol=result.symbol,
            kind=result.kind,
            periods=list(result.periods),
            rows=[MetricRowDTO.from_entity(r) for r in result.rows],
            company_type=result.company_type,
            last_updated=result.last_updated,
            provenance=result.provenance,
        )


__all__ = ["MetricRowDTO", "StatementDTO"]
