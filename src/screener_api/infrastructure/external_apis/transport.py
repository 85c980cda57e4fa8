# src/screener_api/infrastructure/external_apis/transport.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Shared JSON-over-HTTP transport for vendor clients.

This transport is vendor-agnostic and provides:

* Async HTTP (httpx) with per-request timeout.
* Jittered exponential retries (bounded); honors ``Retry-After`` seconds.
* Deterministic mapping to domain errors: transport failures and non-2xx
  become ``UpstreamUnavailable``, undecodable bodies ``MalformedUpstreamData``.
* Prometheus latency histogram and a structured ``<vendor>_request`` log.

Only 429 and 5xx responses and transport errors are retried; other 4xx are
terminal because repeating them cannot succeed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any, Final

import httpx

from screener_api.domain.exceptions.fundamentals import (
    MalformedUpstreamData,
    UpstreamUnavailable,
)
from screener_api.infrastructure.logging.logger import get_json_logger, get_request_id
from screener_api.infrastructure.observability.metrics import observe_upstream_request
from screener_api.infrastructure.resilience.retry import RetryPolicy, retry_async

logger = get_json_logger(__name__)

_DEFAULT_TIMEOUT: Final[float] = 8.0
_DEFAULT_BASE_BACKOFF: Final[float] = 0.25
_DEFAULT_MAX_BACKOFF: Final[float] = 2.5
_MAX_RETRY_AFTER_S: Final[float] = 5.0

DEFAULT_HEADERS: Final[dict[str, str]] = {
    "Accept": "application/json",
    "User-Agent": "screener-api/0.1 (+https://stacklion.io)",
}


class RetryableUpstreamError(UpstreamUnavailable):
    """Upstream failure worth another attempt (429, 5xx, network)."""


def _parse_retry_after(val: str | None) -> float | None:
    """Parse the HTTP ``Retry-After`` header (seconds form only)."""
    if not val:
        return None
    try:
        return max(0.0, float(val))
    except ValueError:
        return None


def _is_retryable(exc: Exception) -> bool:
    return isinstance(exc, RetryableUpstreamError)


class JsonTransport:
    """GET-only JSON transport owned by one vendor client."""

    vendor: str = "upstream"

    def __init__(
        self,
        *,
        base_url: str,
        timeout_s: float | None = None,
        max_retries: int = 2,
        headers: Mapping[str, str] | None = None,
        http: httpx.AsyncClient | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            base_url: Vendor base URL; a trailing slash is dropped.
            timeout_s: Per-request timeout. Defaults to 8 seconds.
            max_retries: Retries after the first attempt for retryable failures.
            headers: Extra headers sent with every request (auth, host).
            http: Optional shared ``httpx.AsyncClient``. If omitted, a client
                is created and owned by this instance.
            retry_policy: Explicit retry policy; built from ``max_retries``
                when omitted.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout_s) if timeout_s is not None else _DEFAULT_TIMEOUT
        self._headers = dict(headers or {})
        self._owns_client = http is None
        self._client = http or httpx.AsyncClient(
            timeout=self._timeout,
            headers=DEFAULT_HEADERS.copy(),
        )
        self._retry = retry_policy or RetryPolicy(
            total=max(0, int(max_retries)),
            base=_DEFAULT_BASE_BACKOFF,
            cap=_DEFAULT_MAX_BACKOFF,
            jitter=True,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance owns it."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def get_json(
        self,
        path: str,
        *,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """GET ``path`` and return the decoded JSON body.

        Args:
            path: Path below the base URL, starting with ``/``.
            endpoint: Low-cardinality endpoint label for metrics and logs.
            params: Query parameters.

        Returns:
            Decoded JSON (any shape; callers validate it).

        Raises:
            UpstreamUnavailable: Network failure, timeout or non-2xx status.
            MalformedUpstreamData: The body is not JSON.
        """
        url = f"{self._base_url}{path}"
        headers = {**DEFAULT_HEADERS, **self._headers}
        request_id = get_request_id()
        if request_id:
            headers.setdefault("X-Request-ID", request_id)

        async def _call() -> Any:
            try:
                response = await self._client.get(
                    url, params=params, headers=headers, timeout=self._timeout
                )
            except httpx.RequestError as exc:
                raise RetryableUpstreamError(
                    f"{self.vendor} request failed",
                    details={"endpoint": endpoint, "error": type(exc).__name__},
                ) from exc

            status = response.status_code
            if status == 429 or status >= 500:
                retry_after = _parse_retry_after(response.headers.get("Retry-After"))
                if retry_after:
                    await asyncio.sleep(min(retry_after, _MAX_RETRY_AFTER_S))
                raise RetryableUpstreamError(
                    f"{self.vendor} returned HTTP {status}",
                    details={"endpoint": endpoint, "status": status},
                )
            if status >= 400:
                raise UpstreamUnavailable(
                    f"{self.vendor} returned HTTP {status}",
                    details={"endpoint": endpoint, "status": status},
                )

            try:
                return response.json()
            except ValueError as exc:
                raise MalformedUpstreamData(
                    f"{self.vendor} returned a non-JSON body",
                    details={"endpoint": endpoint, "error": str(exc)},
                ) from exc

        with observe_upstream_request(vendor=self.vendor, endpoint=endpoint):
            try:
                payload = await retry_async(_call, policy=self._retry, retry_on=_is_retryable)
            except (UpstreamUnavailable, MalformedUpstreamData) as exc:
                logger.warning(
                    f"{self.vendor}_request",
                    extra={
                        "extra": {
                            "endpoint": endpoint,
                            "outcome": "error",
                            "code": exc.code,
                            **exc.details,
                        }
                    },
                )
                raise

        logger.info(
            f"{self.vendor}_request",
            extra={"extra": {"endpoint": endpoint, "outcome": "success"}},
        )
        return payload


__all__ = ["DEFAULT_HEADERS", "JsonTransport", "RetryableUpstreamError"]
