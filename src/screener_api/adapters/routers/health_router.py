# src/screener_api/adapters/routers/health_router.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Health endpoints (Adapters Layer).

Purpose:
    Liveness signal for orchestrators and load balancers. The service holds
    no database, so liveness is the only check; upstream health is reflected
    in the provenance of responses rather than here.
"""

from __future__ import annotations

import typing as t

from fastapi import APIRouter, status

from screener_api.application.schemas.dto.base import BaseDTO

router = APIRouter()


class LivenessResponse(BaseDTO):
    """Liveness response indicating the process is running."""

    status: t.Literal["ok"] = "ok"


@router.get(
    "/z",
    summary="Liveness",
    operation_id="health_liveness",
    response_model=LivenessResponse,
    status_code=status.HTTP_200_OK,
)
async def liveness() -> LivenessResponse:
    """Return a fast liveness signal (no external I/O)."""
    return LivenessResponse()
