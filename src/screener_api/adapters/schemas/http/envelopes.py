# src/screener_api/adapters/schemas/http/envelopes.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""HTTP error envelope schemas (OpenAPI documentation of error bodies)."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from screener_api.application.schemas.dto.base import BaseDTO


class ErrorObject(BaseDTO):
    """Body of the ``error`` key."""

    code: str = Field(..., examples=["INVALID_REQUEST"])
    http_status: int = Field(..., examples=[400])
    message: str
    details: dict[str, Any] | None = None
    trace_id: str | None = None


class ErrorEnvelope(BaseDTO):
    """``{"error": {...}}``"""

    error: ErrorObject


__all__ = ["ErrorEnvelope", "ErrorObject"]
