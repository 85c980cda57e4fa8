# src/screener_api/infrastructure/external_apis/insightsentry/client.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""InsightSentry Transport Client (RapidAPI).

Thin, vendor-shaped wrapper over :class:`JsonTransport`. Each method returns
the decoded JSON body after checking its outer shape; mapping into domain
entities happens in the adapter gateway.

Endpoints:
    * ``GET /v3/symbols/{symbol}/fundamentals``
    * ``GET /v3/symbols/{symbol}/fundamentals/series?ids=...``
    * ``GET /v2/symbols/{symbol}/history``
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import quote

import httpx

from screener_api.domain.exceptions.fundamentals import MalformedUpstreamData
from screener_api.infrastructure.external_apis.insightsentry.settings import (
    InsightSentrySettings,
)
from screener_api.infrastructure.external_apis.transport import JsonTransport
from screener_api.infrastructure.resilience.retry import RetryPolicy


def _expect_object(payload: Any, *, endpoint: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise MalformedUpstreamData(
            "insightsentry payload is not an object",
            details={"endpoint": endpoint, "expected": "object"},
        )
    return payload


class InsightSentryClient(JsonTransport):
    """Resilient, instrumented transport client for InsightSentry."""

    vendor = "insightsentry"

    def __init__(
        self,
        settings: InsightSentrySettings,
        *,
        http: httpx.AsyncClient | None = None,
        timeout_s: float | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        key = settings.api_key.get_secret_value() if settings.api_key else ""
        super().__init__(
            base_url=settings.base_url,
            timeout_s=timeout_s if timeout_s is not None else settings.timeout_s,
            max_retries=settings.max_retries,
            headers={"X-RapidAPI-Key": key, "X-RapidAPI-Host": settings.host},
            http=http,
            retry_policy=retry_policy,
        )

    async def fundamentals(self, symbol: str) -> Mapping[str, Any]:
        """Return ``{"data": [{"id", "value"}, ...]}`` for ``symbol``."""
        payload = await self.get_json(
            f"/v3/symbols/{quote(symbol, safe=':')}/fundamentals", endpoint="fundamentals"
        )
        return _expect_object(payload, endpoint="fundamentals")

    async def fundamentals_series(
        self, symbol: str, ids: Sequence[str]
    ) -> Mapping[str, Any]:
        """Return ``{"data": [{"id", "data": [{"time", "close"}]}]}`` for ``ids``."""
        payload = await self.get_json(
            f"/v3/symbols/{quote(symbol, safe=':')}/fundamentals/series",
            endpoint="fundamentals_series",
            params={"ids": ",".join(ids)},
        )
        return _expect_object(payload, endpoint="fundamentals_series")

    async def history(
        self,
        symbol: str,
        *,
        bar_type: str,
        start: int,
        end: int,
    ) -> Mapping[str, Any]:
        """Return price bars between epoch seconds ``start`` and ``end``."""
        payload = await self.get_json(
            f"/v2/symbols/{quote(symbol, safe=':')}/history",
            endpoint="history",
            params={
                "bar_type": bar_type,
                "bar_interval": 1,
                "extended": "false",
                "badj": "true",
                "dadj": "false",
                "from": start,
                "to": end,
            },
        )
        return _expect_object(payload, endpoint="history")


__all__ = ["InsightSentryClient"]
