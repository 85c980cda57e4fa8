# src/screener_api/adapters/routers/statements_router.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Financial Statements Router (v1).

Synopsis:
    HTTP surface for normalized statements:
    ``GET /v1/companies/{symbol}/statements/{kind}`` where ``kind`` is one of
    ``balance-sheet``, ``profit-and-loss``, ``cash-flow``, ``ratios`` or
    ``quarterly``.

Design:
    * Presentation-only: the use case validates the symbol and kind and
      raises ``InvalidRequest`` (400) before any upstream I/O.
    * Strong ETags; ``If-None-Match`` answers 304.
    * Domain errors propagate to the app-level exception handlers.

Layer:
    adapters/routers
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Path, Request, Response, status

from screener_api.adapters.presenters.base_presenter import BasePresenter
from screener_api.adapters.routers.base_router import BaseRouter
from screener_api.application.schemas.dto.statements import StatementDTO
from screener_api.application.use_cases.statements.get_financial_statement import (
    GetFinancialStatementUseCase,
)
from screener_api.dependencies.fundamentals import get_statement_use_case

router = BaseRouter(version="v1", resource="companies", tags=["Statements"])
_presenter: BasePresenter[StatementDTO] = BasePresenter()


@router.get(
    "/{symbol}/statements/{kind}",
    response_model=StatementDTO,
    status_code=status.HTTP_200_OK,
    responses=BaseRouter.std_error_responses(),
    summary="Get a normalized financial statement",
    description=(
        "Returns one statement with display strings and raw numbers per period, "
        "using the banking or non-banking row layout as the company requires. "
        "Currency rows are in crores."
    ),
)
async def get_statement(
    request: Request,
    response: Response,
    uc: Annotated[GetFinancialStatementUseCase, Depends(get_statement_use_case)],
    symbol: Annotated[str, Path(description="Ticker, optionally exchange-prefixed (NSE:TCS)")],
    kind: Annotated[
        str,
        Path(description="balance-sheet, profit-and-loss, cash-flow, ratios or quarterly"),
    ],
) -> Any:
    dto = await uc.execute(symbol, kind)
    return _presenter.respond(dto, request=request, response=response)
