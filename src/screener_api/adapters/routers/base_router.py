# src/screener_api/adapters/routers/base_router.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""
Base Router (Adapters Layer)

Purpose:
    Canonical APIRouter wrapper for Screener HTTP endpoints:
      - Versioned routing with stable prefixes (e.g., "/v1/companies").
      - Standard error responses documented with ErrorEnvelope.

Layer:
    adapters/routers
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any

from fastapi import APIRouter

from screener_api.adapters.schemas.http.envelopes import ErrorEnvelope
from screener_api.infrastructure.logging.logger import get_json_logger

_LOGGER = get_json_logger(__name__)

TagType = str | Enum


class BaseRouter(APIRouter):
    """Router with a ``/<version>/<resource>`` prefix.

    Args:
        version: API version segment (e.g., "v1").
        resource: Plural resource segment (e.g., "companies").
        prefix: Optional explicit prefix (overrides version/resource).
        tags: Default tags applied to all routes mounted on this router.
        **kwargs: Additional APIRouter kwargs.
    """

    def __init__(
        self,
        *,
        version: str,
        resource: str,
        prefix: str | None = None,
        tags: Sequence[TagType] | None = None,
        **kwargs: Any,
    ) -> None:
        computed_prefix = prefix or f"/{version}/{resource}"
        super().__init__(
            prefix=computed_prefix,
            tags=list(tags) if tags is not None else None,
            **kwargs,
        )
        _LOGGER.debug(
            "router_initialized",
            extra={"extra": {"prefix": computed_prefix, "tags": [str(t) for t in tags or []]}},
        )

    @staticmethod
    def std_error_responses() -> dict[int | str, dict[str, Any]]:
        """Canonical error responses for ``responses=`` on routes."""
        return {
            400: {"model": ErrorEnvelope, "description": "Invalid symbol, kind or timeframe."},
            404: {"model": ErrorEnvelope, "description": "No data from any source."},
            422: {"model": ErrorEnvelope, "description": "Unprocessable request."},
            500: {"model": ErrorEnvelope, "description": "Internal server error."},
            502: {"model": ErrorEnvelope, "description": "Upstream failure."},
        }


__all__ = ["BaseRouter"]
