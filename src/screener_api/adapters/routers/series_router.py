# src/screener_api/adapters/routers/series_router.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Derived Time-Series Router (v1).

Synopsis:
    Chart endpoints for one company over a timeframe (``1M``, ``6M``, ``1Y``,
    ``3Y``, ``5Y``; default ``1Y``):

    * ``GET /v1/companies/{symbol}/pe``
    * ``GET /v1/companies/{symbol}/market-cap-sales``
    * ``GET /v1/companies/{symbol}/sales-margin``
    * ``GET /v1/companies/{symbol}/chart`` (OHLCV candles)

    Unknown timeframes are rejected with 400 ``INVALID_REQUEST`` by the use
    cases before any computation.

Layer:
    adapters/routers
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Path, Query, Request, Response

from screener_api.adapters.presenters.base_presenter import BasePresenter
from screener_api.adapters.routers.base_router import BaseRouter
from screener_api.application.schemas.dto.chart import PriceChartDTO
from screener_api.application.schemas.dto.series import (
    MarketCapSalesSeriesDTO,
    PriceEarningsSeriesDTO,
    SalesMarginSeriesDTO,
)
from screener_api.application.use_cases.series.get_price_chart import GetPriceChartUseCase
from screener_api.application.use_cases.series.get_sales_margin_series import (
    GetSalesMarginSeriesUseCase,
)
from screener_api.application.use_cases.series.get_valuation_series import (
    GetValuationSeriesUseCase,
)
from screener_api.dependencies.fundamentals import (
    get_price_chart_use_case,
    get_sales_margin_use_case,
    get_valuation_series_use_case,
)

router = BaseRouter(version="v1", resource="companies", tags=["Series"])

SymbolPath = Annotated[str, Path(description="Ticker, optionally exchange-prefixed")]
TimeframeQuery = Annotated[str, Query(description="1M, 6M, 1Y, 3Y or 5Y")]

_pe_presenter: BasePresenter[PriceEarningsSeriesDTO] = BasePresenter()
_mcap_presenter: BasePresenter[MarketCapSalesSeriesDTO] = BasePresenter()
_margin_presenter: BasePresenter[SalesMarginSeriesDTO] = BasePresenter()
_chart_presenter: BasePresenter[PriceChartDTO] = BasePresenter()


@router.get(
    "/{symbol}/pe",
    response_model=PriceEarningsSeriesDTO,
    responses=BaseRouter.std_error_responses(),
    summary="Price-to-earnings series",
)
async def get_pe_series(
    request: Request,
    response: Response,
    uc: Annotated[GetValuationSeriesUseCase, Depends(get_valuation_series_use_case)],
    symbol: SymbolPath,
    timeframe: TimeframeQuery = "1Y",
) -> Any:
    """Price over trailing EPS with quarterly EPS bars and a median line."""
    dto = await uc.price_to_earnings(symbol, timeframe)
    return _pe_presenter.respond(dto, request=request, response=response)


@router.get(
    "/{symbol}/market-cap-sales",
    response_model=MarketCapSalesSeriesDTO,
    responses=BaseRouter.std_error_responses(),
    summary="Market-cap-to-sales series",
)
async def get_market_cap_sales_series(
    request: Request,
    response: Response,
    uc: Annotated[GetValuationSeriesUseCase, Depends(get_valuation_series_use_case)],
    symbol: SymbolPath,
    timeframe: TimeframeQuery = "1Y",
) -> Any:
    """Market capitalisation over TTM sales; monetary fields in crores."""
    dto = await uc.market_cap_to_sales(symbol, timeframe)
    return _mcap_presenter.respond(dto, request=request, response=response)


@router.get(
    "/{symbol}/sales-margin",
    response_model=SalesMarginSeriesDTO,
    responses=BaseRouter.std_error_responses(),
    summary="Quarterly sales and margins",
)
async def get_sales_margin_series(
    request: Request,
    response: Response,
    uc: Annotated[GetSalesMarginSeriesUseCase, Depends(get_sales_margin_use_case)],
    symbol: SymbolPath,
    timeframe: TimeframeQuery = "1Y",
) -> Any:
    """Quarterly sales with gross, operating and net margins, oldest first."""
    dto = await uc.execute(symbol, timeframe)
    return _margin_presenter.respond(dto, request=request, response=response)


@router.get(
    "/{symbol}/chart",
    response_model=PriceChartDTO,
    responses=BaseRouter.std_error_responses(),
    summary="OHLCV price chart",
)
async def get_price_chart(
    request: Request,
    response: Response,
    uc: Annotated[GetPriceChartUseCase, Depends(get_price_chart_use_case)],
    symbol: SymbolPath,
    timeframe: TimeframeQuery = "1Y",
) -> Any:
    """OHLCV candles in INR for the listing, oldest first; cached for 15 minutes."""
    dto = await uc.execute(symbol, timeframe)
    return _chart_presenter.respond(dto, request=request, response=response)
