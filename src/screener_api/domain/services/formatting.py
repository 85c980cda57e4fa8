# src/screener_api/domain/services/formatting.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Unit conversion and display formatting.

Purpose:
    Pure helpers that turn raw statement numbers into display strings.

Rules:
    * Currency magnitudes are shown in crores (1 crore = 10,000,000).
    * Currency renders as a sign-prefixed integer with Indian digit grouping
      (``12,34,567``).
    * Percentages render as a rounded integer with a ``%`` suffix.
    * Plain numbers render with two decimals.
    * Missing values (``None``, NaN, infinities) render as ``"N/A"``; zero
      always renders as a zero (``"0"``, ``"0%"``, ``"0.00"``), never as
      ``"N/A"``.
    * Rounding is half away from zero.

Layer:
    domain/services
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Final

from screener_api.domain.enums.statement import ValueType

CRORE: Final[int] = 10_000_000
NOT_AVAILABLE: Final[str] = "N/A"

_WHOLE: Final[Decimal] = Decimal("1")
_CENTS: Final[Decimal] = Decimal("0.01")


def is_missing(value: float | None) -> bool:
    """True for ``None`` and non-finite floats."""
    return value is None or not math.isfinite(value)


def to_crores(value: float | None) -> float | None:
    """Convert a raw currency amount to crores, preserving gaps."""
    if value is None or is_missing(value):
        return None
    return value / CRORE


def _quantize(value: float, step: Decimal) -> Decimal:
    return Decimal(repr(value)).quantize(step, rounding=ROUND_HALF_UP)


def group_indian(digits: int) -> str:
    """Group a non-negative integer in the Indian lakh/crore style.

    The last three digits form one group; remaining digits are grouped in
    pairs, e.g. ``123456789 -> "12,34,56,789"``.
    """
    text = str(abs(digits))
    if len(text) <= 3:
        return text
    head, tail = text[:-3], text[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join([*groups, tail])


def format_currency(value: float | None) -> str:
    """Format an amount (already in display units) as a grouped integer."""
    if value is None or is_missing(value):
        return NOT_AVAILABLE
    whole = int(_quantize(value, _WHOLE))
    if whole == 0:
        return "0"
    sign = "-" if whole < 0 else ""
    return f"{sign}{group_indian(whole)}"


def format_percentage(value: float | None) -> str:
    """Format a percentage as a rounded integer with ``%``."""
    if value is None or is_missing(value):
        return NOT_AVAILABLE
    whole = int(_quantize(value, _WHOLE))
    if whole == 0:
        return "0%"
    return f"{whole}%"


def format_number(value: float | None) -> str:
    """Format a plain ratio or per-share figure with two decimals."""
    if value is None or is_missing(value):
        return NOT_AVAILABLE
    q = _quantize(value, _CENTS)
    if q == 0:
        return "0.00"
    return f"{q:.2f}"


def format_value(value: float | None, value_type: ValueType) -> str:
    """Dispatch to the formatter for ``value_type``.

    Raises:
        ValueError: For :attr:`ValueType.SECTION`, which has no values.
    """
    if value_type is ValueType.CURRENCY:
        return format_currency(value)
    if value_type is ValueType.PERCENTAGE:
        return format_percentage(value)
    if value_type is ValueType.NUMBER:
        return format_number(value)
    raise ValueError("section rows carry no values to format")


__all__ = [
    "CRORE",
    "NOT_AVAILABLE",
    "format_currency",
    "format_number",
    "format_percentage",
    "format_value",
    "group_indian",
    "is_missing",
    "to_crores",
]
