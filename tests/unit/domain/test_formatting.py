# tests/unit/domain/test_formatting.py
from __future__ import annotations

import math

import pytest

from screener_api.domain.enums.statement import ValueType
from screener_api.domain.services.formatting import (
    CRORE,
    NOT_AVAILABLE,
    format_currency,
    format_number,
    format_percentage,
    format_value,
    group_indian,
    to_crores,
)


@pytest.mark.parametrize(
    ("digits", "expected"),
    [
        (0, "0"),
        (999, "999"),
        (1000, "1,000"),
        (100000, "1,00,000"),
        (123456789, "12,34,56,789"),
        (1234567890123, "12,34,56,78,90,123"),
    ],
)
def test_group_indian(digits: int, expected: str) -> None:
    assert group_indian(digits) == expected


def test_format_currency_rounds_half_up_and_groups() -> None:
    assert format_currency(123456.5) == "1,23,457"
    assert format_currency(-1234.5) == "-1,235"
    assert format_currency(0.4) == "0"
    assert format_currency(0) == "0"


def test_missing_values_render_as_not_available() -> None:
    for fmt in (format_currency, format_percentage, format_number):
        assert fmt(None) == NOT_AVAILABLE
        assert fmt(math.nan) == NOT_AVAILABLE
        assert fmt(math.inf) == NOT_AVAILABLE


def test_format_percentage() -> None:
    assert format_percentage(24.5) == "25%"
    assert format_percentage(-3.2) == "-3%"
    assert format_percentage(0.0) == "0%"


def test_format_number_keeps_two_decimals() -> None:
    assert format_number(1.005) == "1.01"
    assert format_number(12) == "12.00"
    assert format_number(0.0) == "0.00"


def test_format_value_dispatch() -> None:
    assert format_value(CRORE, ValueType.CURRENCY) == "1,00,00,000"
    assert format_value(12.3, ValueType.PERCENTAGE) == "12%"
    assert format_value(12.3, ValueType.NUMBER) == "12.30"
    with pytest.raises(ValueError):
        format_value(1.0, ValueType.SECTION)


def test_to_crores() -> None:
    assert to_crores(250_000_000) == 25.0
    assert to_crores(None) is None
    assert to_crores(math.nan) is None
