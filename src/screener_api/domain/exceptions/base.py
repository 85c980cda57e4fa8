# src/screener_api/domain/exceptions/base.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""
Base Domain Exceptions.

Summary:
    Root of the domain/application exception hierarchy. Each subclass pins a
    stable ``code`` and the HTTP status adapters should map it to, so the
    boundary translation stays a table lookup.

Layer:
    domain/exceptions
"""
from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for all domain/application exceptions."""

    code: str = "DOMAIN_ERROR"
    http_status: int = 500

    def __init__(self, message: str = "", *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message or self.code)
        self.message: str = message or self.code
        self.details: dict[str, Any] = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly summary used in logs and failure ledgers."""
        return {"code": self.code, "message": self.message, "details": self.details}
