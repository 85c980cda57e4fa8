# src/screener_api/adapters/presenters/base_presenter.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Presenter utilities.

Purpose:
    Thin, framework-aware helpers used by routers to shape HTTP responses
    and headers consistently.

Responsibilities:
    * Compute strong, quoted ETags from canonical JSON of the response DTO.
    * Answer ``If-None-Match`` with 304 when the validator matches.
    * Apply ``X-Request-ID``, ``X-Data-Provenance`` and ``Cache-Control``.

Layer:
    adapters/presenters
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from fastapi import Request, Response
from pydantic import BaseModel

# Excluded from ETag material; a cache hit must validate like the original.
_VOLATILE_FIELDS: frozenset[str] = frozenset({"cached"})


def compute_quoted_etag(payload: Mapping[str, Any]) -> str:
    """Return a quoted strong ETag (SHA-256 of canonical JSON for ``payload``)."""
    material = json.dumps(
        {k: v for k, v in payload.items() if k not in _VOLATILE_FIELDS},
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    ).encode("utf-8")
    return f'"{hashlib.sha256(material).hexdigest()}"'


def _etag_matches(if_none_match: str | None, etag: str) -> bool:
    if not if_none_match:
        return False
    candidates = {c.strip().removeprefix("W/") for c in if_none_match.split(",")}
    return "*" in candidates or etag in candidates


@dataclass(slots=True)
class PresentResult[T]:
    """Presentation result.

    Attributes:
        body: The DTO, or ``None`` for 304.
        headers: Extra HTTP headers to apply.
        status_code: Optional HTTP status override.
    """

    body: T | None
    headers: Mapping[str, str]
    status_code: int | None = None


class BasePresenter[T: BaseModel]:
    """Shape a DTO response with validators and standard headers."""

    def __init__(self, *, max_age_s: float | None = None) -> None:
        self._max_age_s = max_age_s

    def present(self, dto: T, *, request: Request) -> PresentResult[T]:
        payload = dto.model_dump(mode="json")
        etag = compute_quoted_etag(payload)
        headers: dict[str, str] = {"ETag": etag}

        trace_id = getattr(request.state, "request_id", None)
        if trace_id:
            headers["X-Request-ID"] = trace_id
        provenance = payload.get("provenance")
        if isinstance(provenance, str):
            headers["X-Data-Provenance"] = provenance
        if self._max_age_s:
            headers["Cache-Control"] = f"public, max-age={int(self._max_age_s)}"

        if _etag_matches(request.headers.get("If-None-Match"), etag):
            return PresentResult(body=None, headers=headers, status_code=304)
        return PresentResult(body=dto, headers=headers)

    @staticmethod
    def apply_headers(result: PresentResult[Any], response: Response) -> None:
        """Apply headers and optional status code to the outgoing response."""
        response.headers.update(dict(result.headers))
        if result.status_code is not None:
            response.status_code = result.status_code

    def respond(self, dto: T, *, request: Request, response: Response) -> T | Response:
        """Present ``dto`` and return what the route should return.

        A 304 is returned as a bare :class:`Response` carrying the headers.
        """
        result = self.present(dto, request=request)
        if result.status_code == 304:
            return Response(status_code=304, headers=dict(result.headers))
        self.apply_headers(result, response)
        return dto


__all__ = ["BasePresenter", "PresentResult", "compute_quoted_etag"]
