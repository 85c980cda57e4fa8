# src/screener_api/domain/enums/timeframe.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Chart timeframe enumeration.

Purpose:
    Fixed set of lookback windows accepted by the derived time-series
    endpoints, together with the price-bar resolution each one uses.

Layer:
    domain
"""

from __future__ import annotations

from enum import Enum

from screener_api.domain.exceptions.fundamentals import InvalidRequest

# token -> (bar type, data points, lookback days)
_CONFIG: dict[str, tuple[str, int, int]] = {
    "1M": ("day", 30, 30),
    "6M": ("day", 180, 180),
    "1Y": ("week", 52, 365),
    "3Y": ("month", 36, 3 * 365),
    "5Y": ("month", 60, 5 * 365),
}

_BAR_SPACING_DAYS: dict[str, int] = {"day": 1, "week": 7, "month": 30}

_MARGIN_QUARTERS: dict[str, int] = {"1M": 1, "6M": 2, "1Y": 4, "3Y": 12, "5Y": 20}


class Timeframe(str, Enum):
    """Lookback window for price-derived series."""

    ONE_MONTH = "1M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    THREE_YEARS = "3Y"
    FIVE_YEARS = "5Y"

    @property
    def bar_type(self) -> str:
        """Price-bar resolution requested upstream (``day``/``week``/``month``)."""
        return _CONFIG[self.value][0]

    @property
    def data_points(self) -> int:
        """Nominal number of bars in the window."""
        return _CONFIG[self.value][1]

    @property
    def lookback_days(self) -> int:
        """Window length in calendar days."""
        return _CONFIG[self.value][2]

    @property
    def bar_spacing_days(self) -> int:
        """Approximate calendar days between consecutive bars."""
        return _BAR_SPACING_DAYS[self.bar_type]

    @property
    def margin_quarters(self) -> int:
        """Number of most recent quarters shown on quarterly margin charts."""
        return _MARGIN_QUARTERS[self.value]

    @classmethod
    def parse(cls, raw: str | None) -> Timeframe:
        """Parse a timeframe token.

        Args:
            raw: Token such as ``"1Y"``. Surrounding whitespace and case are
                ignored.

        Returns:
            The matching timeframe.

        Raises:
            InvalidRequest: If the token is missing or not supported.
        """
        token = (raw or "").strip().upper()
        for member in cls:
            if member.value == token:
                return member
        valid = ", ".join(m.value for m in cls)
        raise InvalidRequest(
            f"Invalid timeframe. Valid options: {valid}",
            details={"timeframe": raw, "allowed": [m.value for m in cls]},
        )


__all__ = ["Timeframe"]
