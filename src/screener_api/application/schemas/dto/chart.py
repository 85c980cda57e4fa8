# src/screener_api/application/schemas/dto/chart.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Application DTOs for the OHLCV price chart."""

from __future__ import annotations

from typing import Literal

from screener_api.application.schemas.dto.base import BaseDTO
from screener_api.domain.enums.provenance import Provenance
from screener_api.domain.enums.timeframe import Timeframe


class CandleDTO(BaseDTO):
    """One OHLCV bar; ``date`` is the ISO trading day of ``timestamp``."""

    timestamp: int
    date: str
    open: float
    high: float
    low: float
    close: float
    volume: int


class PriceChartDTO(BaseDTO):
    """Price chart for one listing, oldest bar first."""

    symbol: str
    timeframe: Timeframe
    exchange: str
    currency: Literal["INR"] = "INR"
    timezone: Literal["Asia/Kolkata"] = "Asia/Kolkata"
    data: list[CandleDTO]
    last_update: int
    provenance: Provenance
    cached: bool = False


__all__ = ["CandleDTO", "PriceChartDTO"]
