# src/screener_api/application/use_cases/key_metrics/get_key_metrics.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Use case: Get headline key metrics (ROCE, book value, P/B)."""

from __future__ import annotations

from screener_api.application.interfaces.cache_port import CachePort
from screener_api.application.interfaces.gateways import FundamentalsSources
from screener_api.application.schemas.dto.key_metrics import KeyMetricsDTO
from screener_api.application.services.data_acquisition import fetch_fundamentals
from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.services.company_classifier import classify_company
from screener_api.domain.services.key_metrics import compute_key_metrics
from screener_api.domain.value_objects.symbol import Symbol
from screener_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


def has_metric_inputs(fields: FieldMap) -> bool:
    """Accept a field map carrying at least one headline scalar."""
    return any(
        fields.scalar(name) is not None
        for name in ("close", "total_equity_fq", "oper_income_ttm", "net_income_ttm")
    )


class GetKeyMetricsUseCase:
    """Serve ROCE, book value and P/B with the method behind each."""

    def __init__(
        self,
        *,
        sources: FundamentalsSources,
        cache: CachePort,
        ttl_s: float,
        tier_timeout_s: float | None = None,
        default_exchange: str = "NSE",
    ) -> None:
        self._sources = sources
        self._cache = cache
        self._ttl_s = ttl_s
        self._tier_timeout_s = tier_timeout_s
        self._default_exchange = default_exchange

    async def execute(self, symbol: str) -> KeyMetricsDTO:
        sym = Symbol.parse(symbol, default_exchange=self._default_exchange)
        cache_key = f"key_metrics:{sym.qualified}"

        cached = await self._cache.get_json(cache_key)
        if cached is not None:
            logger.info("cache_hit", extra={"extra": {"key": cache_key}})
            return KeyMetricsDTO.model_validate({**cached, "cached": True})

        result = await fetch_fundamentals(
            self._sources,
            sym,
            resource="key_metrics",
            is_valid=has_metric_inputs,
            timeout_s=self._tier_timeout_s,
        )
        dto = KeyMetricsDTO.from_entity(
            compute_key_metrics(result.value),
            symbol=sym.qualified,
            company_type=classify_company(result.value),
            provenance=result.provenance,
        )
        await self._cache.set_json(cache_key, dto.model_dump(mode="json"), ttl=self._ttl_s)
        return dto


__all__ = ["GetKeyMetricsUseCase", "has_metric_inputs"]
