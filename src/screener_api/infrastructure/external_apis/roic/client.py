# src/screener_api/infrastructure/external_apis/roic/client.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""ROIC.ai Transport Client.

Secondary live source for annual balance-sheet data. The API key travels as
the ``apikey`` query parameter.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from screener_api.domain.exceptions.fundamentals import MalformedUpstreamData
from screener_api.infrastructure.external_apis.roic.settings import RoicSettings
from screener_api.infrastructure.external_apis.transport import JsonTransport
from screener_api.infrastructure.resilience.retry import RetryPolicy


class RoicClient(JsonTransport):
    """Resilient, instrumented transport client for ROIC.ai."""

    vendor = "roic"

    def __init__(
        self,
        settings: RoicSettings,
        *,
        http: httpx.AsyncClient | None = None,
        timeout_s: float | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        super().__init__(
            base_url=settings.base_url,
            timeout_s=timeout_s if timeout_s is not None else settings.timeout_s,
            max_retries=settings.max_retries,
            http=http,
            retry_policy=retry_policy,
        )
        self._api_key = settings.api_key.get_secret_value() if settings.api_key else ""
        self._suffix = settings.listing_suffix

    async def balance_sheet(self, ticker: str) -> list[Mapping[str, Any]]:
        """Return yearly balance-sheet records for a bare ticker.

        Raises:
            MalformedUpstreamData: The body is not a list of objects.
        """
        listing = f"{ticker.upper()}{self._suffix}"
        payload = await self.get_json(
            f"/fundamental/balance-sheet/{quote(listing)}",
            endpoint="balance_sheet",
            params={"apikey": self._api_key},
        )
        if not isinstance(payload, list) or not all(isinstance(r, Mapping) for r in payload):
            raise MalformedUpstreamData(
                "roic payload is not a list of records",
                details={"endpoint": "balance_sheet", "expected": "list[object]"},
            )
        return payload


__all__ = ["RoicClient"]
