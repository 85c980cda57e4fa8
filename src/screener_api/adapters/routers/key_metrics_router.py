# src/screener_api/adapters/routers/key_metrics_router.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Key Metrics Router (v1): ``GET /v1/companies/{symbol}/key-metrics``."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Path, Request, Response

from screener_api.adapters.presenters.base_presenter import BasePresenter
from screener_api.adapters.routers.base_router import BaseRouter
from screener_api.application.schemas.dto.key_metrics import KeyMetricsDTO
from screener_api.application.use_cases.key_metrics.get_key_metrics import GetKeyMetricsUseCase
from screener_api.dependencies.fundamentals import get_key_metrics_use_case

router = BaseRouter(version="v1", resource="companies", tags=["Key Metrics"])
_presenter: BasePresenter[KeyMetricsDTO] = BasePresenter()


@router.get(
    "/{symbol}/key-metrics",
    response_model=KeyMetricsDTO,
    responses=BaseRouter.std_error_responses(),
    summary="ROCE, book value and price-to-book",
)
async def get_key_metrics(
    request: Request,
    response: Response,
    uc: Annotated[GetKeyMetricsUseCase, Depends(get_key_metrics_use_case)],
    symbol: Annotated[str, Path(description="Ticker, optionally exchange-prefixed")],
) -> Any:
    """Headline metrics, each tagged with the method that produced it."""
    dto = await uc.execute(symbol)
    return _presenter.respond(dto, request=request, response=response)
