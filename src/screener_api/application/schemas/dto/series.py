# src/screener_api/application/schemas/dto/series.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Application DTOs for derived valuation series.

Synopsis:
    P/E and market-cap/sales points name their fundamental explicitly
    (``eps`` / ``sales_ttm``) and carry a sparse ``*_bar`` field for the
    quarterly overlay. ``sources`` reports which tier served each
    underlying fetch; ``provenance`` is the least live of them.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from pydantic import Field

from screener_api.application.schemas.dto.base import BaseDTO
from screener_api.domain.enums.provenance import Provenance
from screener_api.domain.enums.timeframe import Timeframe


class PriceEarningsPointDTO(BaseDTO):
    """Daily P/E sample."""

    time: int
    price: float
    eps: float
    ratio: float
    eps_bar: float | None = None


class MarketCapSalesPointDTO(BaseDTO):
    """Daily market-cap/sales sample."""

    time: int
    price: float
    market_cap: float
    sales_ttm: float
    ratio: float
    sales_ttm_bar: float | None = None


class _SeriesEnvelope(BaseDTO):
    symbol: str
    timeframe: Timeframe
    median: float
    provenance: Provenance
    sources: dict[str, Provenance] = Field(default_factory=dict)
    cached: bool = False


class PriceEarningsSeriesDTO(_SeriesEnvelope):
    """P/E series with its median reference line."""

    data: list[PriceEarningsPointDTO]


class MarketCapSalesSeriesDTO(_SeriesEnvelope):
    """Market-cap/sales series with its median reference line."""

    data: list[MarketCapSalesPointDTO]


class SalesMarginPointDTO(BaseDTO):
    """Quarterly margins, in percent of revenue."""

    time: int
    quarter: str
    quarterly_sales: float
    gross_profit_margin: float | None = None
    operating_profit_margin: float | None = None
    net_profit_margin: float | None = None


class SalesMarginSeriesDTO(BaseDTO):
    """Quarterly margin series, oldest first."""

    symbol: str
    timeframe: Timeframe
    data: list[SalesMarginPointDTO]
    provenance: Provenance
    cached: bool = False


__all__ = [
    "MarketCapSalesPointDTO",
    "MarketCapSalesSeriesDTO",
    "PriceEarningsPointDTO",
    "PriceEarningsSeriesDTO",
    "SalesMarginPointDTO",
    "SalesMarginSeriesDTO",
]
