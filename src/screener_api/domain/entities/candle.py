# src/screener_api/domain/entities/candle.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""OHLCV candle entities for the price chart.

Layer:
    domain/entities
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Candle:
    """One OHLCV bar; ``time`` is UTC epoch seconds."""

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: int = 0


@dataclass(frozen=True, slots=True)
class CandleSeries:
    """Chronological candles plus the exchange whose listing they price.

    Attributes:
        exchange: Listing the bars come from (``NSE`` or ``BSE``).
        candles: Bars, oldest first, unique per timestamp.
    """

    exchange: str
    candles: tuple[Candle, ...] = ()

    def __len__(self) -> int:
        return len(self.candles)


def normalize_candles(candles: Iterable[Candle], *, since: int = 0) -> tuple[Candle, ...]:
    """Keep bars at or after ``since``, sorted, last one winning per timestamp."""
    by_time: dict[int, Candle] = {}
    for candle in candles:
        if candle.time >= since:
            by_time[candle.time] = candle
    return tuple(by_time[t] for t in sorted(by_time))


__all__ = ["Candle", "CandleSeries", "normalize_candles"]
