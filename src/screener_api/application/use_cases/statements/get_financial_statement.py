# src/screener_api/application/use_cases/statements/get_financial_statement.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Use case: Get a normalized financial statement.

Synopsis:
    Serve balance sheet, profit & loss, cash flow, ratios and quarterly
    results for one company, with the response cache in front of the
    fundamentals cascade.

Responsibilities:
    * Validate the symbol and statement kind.
    * Serve from cache when fresh (``cached=True``).
    * On miss, fetch fundamentals through the cascade, accepting a tier only
      when it carries data for at least one field the statement shows.
    * Classify the company, pick the row schema and build the statement.
    * Cache the built DTO.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from screener_api.application.interfaces.cache_port import CachePort
from screener_api.application.interfaces.gateways import FundamentalsSources
from screener_api.application.schemas.dto.statements import StatementDTO
from screener_api.application.services.data_acquisition import fetch_fundamentals
from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.enums.statement import StatementKind
from screener_api.domain.services.company_classifier import explain_company_type
from screener_api.domain.services.row_schemas import schema_fields, statement_rows
from screener_api.domain.services.statement_builder import build_statement
from screener_api.domain.value_objects.symbol import Symbol
from screener_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def statement_validator(kind: StatementKind) -> Callable[[FieldMap], bool]:
    """Accept a field map only when it feeds at least one row of ``kind``."""
    wanted = schema_fields(kind)

    def is_valid(fields: FieldMap) -> bool:
        return any(fields.has_data(name) for name in wanted)

    return is_valid


class GetFinancialStatementUseCase:
    """Build one statement for one company."""

    def __init__(
        self,
        *,
        sources: FundamentalsSources,
        cache: CachePort,
        ttl_s: float,
        tier_timeout_s: float | None = None,
        default_exchange: str = "NSE",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._sources = sources
        self._cache = cache
        self._ttl_s = ttl_s
        self._tier_timeout_s = tier_timeout_s
        self._default_exchange = default_exchange
        self._clock = clock

    async def execute(self, symbol: str, kind: StatementKind | str) -> StatementDTO:
        """Execute the use case.

        Args:
            symbol: Bare or exchange-prefixed symbol.
            kind: Statement kind or its path segment.

        Returns:
            The statement DTO.

        Raises:
            InvalidRequest: Bad symbol or statement kind.
            NoDataAvailable: Every fallback tier failed.
        """
        sym = Symbol.parse(symbol, default_exchange=self._default_exchange)
        stmt_kind = kind if isinstance(kind, StatementKind) else StatementKind.parse(kind)
        cache_key = f"statement:{stmt_kind.value}:{sym.qualified}"

        cached = await self._cache.get_json(cache_key)
        if cached is not None:
            logger.info("cache_hit", extra={"extra": {"key": cache_key}})
            return StatementDTO.model_validate({**cached, "cached": True})

        result = await fetch_fundamentals(
            self._sources,
            sym,
            resource=f"statement:{stmt_kind.value}",
            is_valid=statement_validator(stmt_kind),
            timeout_s=self._tier_timeout_s,
        )
        fields = result.value
        classification = explain_company_type(fields)
        statement = build_statement(
            fields,
            statement_rows(stmt_kind, classification.company_type),
            symbol=sym.qualified,
            kind=stmt_kind,
            company_type=classification.company_type,
            provenance=result.provenance,
            as_of=self._clock(),
        )
        dto = StatementDTO.from_entity(statement)

        logger.info(
            "statement_built",
            extra={
                "extra": {
                    "symbol": sym.qualified,
                    "kind": stmt_kind.value,
                    "company_type": classification.company_type.value,
                    "classified_by": classification.reason,
                    "provenance": result.provenance.value,
                    "periods": len(statement.periods),
                }
            },
        )
        await self._cache.set_json(cache_key, dto.model_dump(mode="json"), ttl=self._ttl_s)
        return dto


__all__ = ["GetFinancialStatementUseCase", "statement_validator"]
