# src/screener_api/infrastructure/external_apis/alphavantage/client.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Alpha Vantage Transport Client.

Secondary live source for daily OHLCV bars (``TIME_SERIES_DAILY``). Alpha
Vantage answers throttling and bad symbols with HTTP 200 and an
``Error Message``, ``Note`` or ``Information`` key; those bodies are
surfaced as ``UpstreamUnavailable`` so the cascade falls through.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

import httpx

from screener_api.domain.exceptions.fundamentals import (
    MalformedUpstreamData,
    UpstreamUnavailable,
)
from screener_api.infrastructure.external_apis.alphavantage.settings import (
    AlphaVantageSettings,
)
from screener_api.infrastructure.external_apis.transport import JsonTransport
from screener_api.infrastructure.resilience.retry import RetryPolicy

_REFUSAL_KEYS: Final[tuple[str, ...]] = ("Error Message", "Note", "Information")


class AlphaVantageClient(JsonTransport):
    """Resilient, instrumented transport client for Alpha Vantage."""

    vendor = "alphavantage"

    def __init__(
        self,
        settings: AlphaVantageSettings,
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

    async def daily_series(self, ticker: str, *, full: bool = False) -> Mapping[str, Any]:
        """Return the raw ``TIME_SERIES_DAILY`` body for a bare ticker.

        Args:
            ticker: Exchange-less ticker; the listing suffix is appended.
            full: Request the full history instead of the latest 100 bars.

        Raises:
            UpstreamUnavailable: The vendor refused the request in-band.
            MalformedUpstreamData: The body is not a JSON object.
        """
        payload = await self.get_json(
            "/query",
            endpoint="daily_series",
            params={
                "function": "TIME_SERIES_DAILY",
                "symbol": f"{ticker.upper()}{self._suffix}",
                "outputsize": "full" if full else "compact",
                "apikey": self._api_key,
            },
        )
        if not isinstance(payload, Mapping):
            raise MalformedUpstreamData(
                "alphavantage payload is not an object",
                details={"endpoint": "daily_series", "expected": "object"},
            )
        for key in _REFUSAL_KEYS:
            if key in payload:
                raise UpstreamUnavailable(
                    "alphavantage refused the request",
                    details={"vendor": self.vendor, "endpoint": "daily_series", "reason": key},
                )
        return payload


__all__ = ["AlphaVantageClient"]
