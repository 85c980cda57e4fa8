# src/screener_api/infrastructure/http/errors.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""HTTP error envelopes and exception handlers.

Every error leaves the API as ``{"error": {code, http_status, message,
details?, trace_id?}}``; ``trace_id`` is the request correlation id.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from screener_api.domain.exceptions.base import DomainError
from screener_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

_STATUS_BY_CODE: dict[str, int] = {
    "INVALID_REQUEST": 400,
    "NO_DATA": 404,
    "UPSTREAM_UNAVAILABLE": 502,
    "UPSTREAM_SCHEMA_ERROR": 502,
}


def _trace_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def error_envelope(
    *,
    code: str,
    http_status: int,
    message: str,
    details: dict[str, Any] | None = None,
    trace_id: str | None = None,
) -> dict[str, Any]:
    err: dict[str, Any] = {
        "code": code,
        "http_status": http_status,
        "message": message,
    }
    if details is not None:
        err["details"] = details
    if trace_id is not None:
        err["trace_id"] = trace_id
    return {"error": err}


def status_for(exc: DomainError) -> int:
    """HTTP status for a domain error, by code first, then by class default."""
    return _STATUS_BY_CODE.get(exc.code, exc.http_status)


async def handle_domain_error(request: Request, exc: DomainError) -> Response:
    status = status_for(exc)
    if status >= 500:
        logger.error("domain_error", extra={"extra": exc.to_dict()})
    payload = error_envelope(
        code=exc.code,
        http_status=status,
        message=exc.message,
        details=jsonable_encoder(exc.details) if exc.details else None,
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=status, content=payload)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> Response:
    payload = error_envelope(
        code="VALIDATION_ERROR",
        http_status=422,
        message="Request validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=422, content=payload)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
    payload = error_envelope(
        code="HTTP_ERROR",
        http_status=exc.status_code,
        message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
        details=None if isinstance(exc.detail, str) else {"detail": exc.detail},
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=exc.status_code, content=payload, headers=exc.headers)


async def handle_unhandled_exception(request: Request, exc: Exception) -> Response:
    logger.exception("unhandled_exception", extra={"extra": {"path": request.url.path}})
    payload = error_envelope(
        code="INTERNAL_ERROR",
        http_status=500,
        message="Internal server error",
        details=None,
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=500, content=payload)


def install_exception_handlers(app: FastAPI) -> None:
    """Register all handlers on ``app``."""
    app.add_exception_handler(DomainError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unhandled_exception)


__all__ = [
    "error_envelope",
    "handle_domain_error",
    "handle_http_exception",
    "handle_unhandled_exception",
    "handle_validation_error",
    "install_exception_handlers",
    "status_for",
]
