# src/screener_api/domain/enums/statement.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Statement kind and row value-type enumerations.

Purpose:
    Identify which tabular statement is being built and how each row's raw
    numbers are rendered for display.

Layer:
    domain

Notes:
    - ``StatementKind`` values double as URL path segments.
    - Historical vendor series use a suffix convention: ``_fy_h`` for annual
      arrays and ``_fq_h`` for quarterly arrays.
"""

from __future__ import annotations

from enum import Enum

from screener_api.domain.exceptions.fundamentals import InvalidRequest

ANNUAL_SERIES_SUFFIX = "_fy_h"
QUARTERLY_SERIES_SUFFIX = "_fq_h"


class StatementKind(str, Enum):
    """Tabular statement families served by the API."""

    BALANCE_SHEET = "balance-sheet"
    PROFIT_AND_LOSS = "profit-and-loss"
    CASH_FLOW = "cash-flow"
    RATIOS = "ratios"
    QUARTERLY = "quarterly"

    @property
    def is_quarterly(self) -> bool:
        """Return True when periods are fiscal quarters rather than years."""
        return self is StatementKind.QUARTERLY

    @property
    def series_suffix(self) -> str:
        """Return the vendor field suffix carrying this statement's history."""
        return QUARTERLY_SERIES_SUFFIX if self.is_quarterly else ANNUAL_SERIES_SUFFIX

    @classmethod
    def parse(cls, raw: str | None) -> StatementKind:
        """Parse a statement kind path segment.

        Raises:
            InvalidRequest: If ``raw`` names no supported statement.
        """
        token = (raw or "").strip().lower()
        for member in cls:
            if member.value == token:
                return member
        raise InvalidRequest(
            f"Invalid statement kind. Valid options: {', '.join(m.value for m in cls)}",
            details={"kind": raw, "allowed": [m.value for m in cls]},
        )


class ValueType(str, Enum):
    """Display type of a statement row."""

    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    NUMBER = "number"
    SECTION = "section"


__all__ = [
    "ANNUAL_SERIES_SUFFIX",
    "QUARTERLY_SERIES_SUFFIX",
    "StatementKind",
    "ValueType",
]
