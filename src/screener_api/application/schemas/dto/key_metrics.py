# src/screener_api/application/schemas/dto/key_metrics.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Application DTOs for headline key metrics."""

from __future__ import annotations

from screener_api.application.schemas.dto.base import BaseDTO
from screener_api.domain.enums.company_type import CompanyType
from screener_api.domain.enums.provenance import Provenance
from screener_api.domain.services.key_metrics import KeyMetrics, MetricEstimate


class MetricEstimateDTO(BaseDTO):
    """Estimated value and the method that produced it."""

    value: float | None = None
    method: str | None = None

    @classmethod
    def from_entity(cls, estimate: MetricEstimate) -> MetricEstimateDTO:
        value = None if estimate.value is None else round(estimate.value, 2)
        return cls(value=value, method=estimate.method)


class KeyMetricsDTO(BaseDTO):
    """ROCE, book value, P/B and reported headline figures."""

    symbol: str
    company_type: CompanyType
    roce: MetricEstimateDTO
    book_value: MetricEstimateDTO
    price_to_book: MetricEstimateDTO
    close: float | None = None
    market_cap: float | None = None
    price_earnings: float | None = None
    dividend_yield: float | None = None
    provenance: Provenance
    cached: bool = False

    @classmethod
    def from_entity(
        cls,
        metrics: KeyMetrics,
        *,
        symbol: str,
        company_type: CompanyType,
        provenance: Provenance,
    ) -> KeyMetricsDTO:
        return cls(
            symbol=symbol,
            company_type=company_type,
            roce=MetricEstimateDTO.from_entity(metrics.roce),
            book_value=MetricEstimateDTO.from_entity(metrics.book_value),
            price_to_book=MetricEstimateDTO.from_entity(metrics.price_to_book),
            close=metrics.close,
            market_cap=metrics.market_cap,
            price_earnings=metrics.price_earnings,
            dividend_yield=metrics.dividend_yield,
            provenance=provenance,
        )


__all__ = ["KeyMetricsDTO", "MetricEstimateDTO"]
