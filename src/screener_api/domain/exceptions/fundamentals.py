# src/screener_api/domain/exceptions/fundamentals.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""
Fundamentals Domain Exceptions

Purpose:
    Error taxonomy for statement and derived-series requests.

    * ``InvalidRequest`` is the only error surfaced to callers directly.
    * ``UpstreamUnavailable`` and ``MalformedUpstreamData`` are raised by
      gateways and absorbed by the fallback cascade.
    * ``NoDataAvailable`` is raised only when every cascade tier failed,
      which requires the synthetic tier to be disabled.

Layer: domain/exceptions
"""
from __future__ import annotations

from .base import DomainError


class InvalidRequest(DomainError):
    """Malformed or unsupported request parameters."""

    code = "INVALID_REQUEST"
    http_status = 400


class UpstreamUnavailable(DomainError):
    """A data source failed at the transport level (network, timeout, non-2xx)."""

    code = "UPSTREAM_UNAVAILABLE"
    http_status = 502


class MalformedUpstreamData(DomainError):
    """A data source answered with a payload of unexpected shape."""

    code = "UPSTREAM_SCHEMA_ERROR"
    http_status = 502


class NoDataAvailable(DomainError):
    """Every fallback tier was exhausted without a valid result."""

    code = "NO_DATA"
    http_status = 404


__all__ = [
    "InvalidRequest",
    "MalformedUpstreamData",
    "NoDataAvailable",
    "UpstreamUnavailable",
]
