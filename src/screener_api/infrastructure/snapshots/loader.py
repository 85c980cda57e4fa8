# src/screener_api/infrastructure/snapshots/loader.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Local fundamentals snapshot loader.

Synopsis:
    Reads a JSON document of the form
    ``{"RELIANCE": {<flattened fields>}, "NSE:TCS": {...}}`` and serves the
    payload for one symbol. Keys may be bare tickers or exchange-prefixed.

Design:
    * The file is read once, on first lookup, and kept in memory.
    * A missing file yields an empty store; a corrupt file raises
      ``MalformedUpstreamData`` on every lookup so the cascade moves on.
    * Prefixed keys win over bare keys for the same ticker.

Layer:
    infrastructure/snapshots
"""

from __future__ import annotations

import json
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from screener_api.domain.exceptions.fundamentals import MalformedUpstreamData
from screener_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


class SnapshotStore:
    """Lazy, read-only view over a snapshot file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._data: dict[str, Mapping[str, Any]] | None = None
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Mapping[str, Any]]:
        with self._lock:
            if self._data is not None:
                return self._data
            if not self._path.is_file():
                logger.warning(
                    "snapshot_file_missing", extra={"extra": {"path": str(self._path)}}
                )
                self._data = {}
                return self._data
            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                raise MalformedUpstreamData(
                    "snapshot file is unreadable",
                    details={"path": str(self._path), "error": str(exc)},
                ) from exc
            if not isinstance(raw, Mapping):
                raise MalformedUpstreamData(
                    "snapshot file must hold an object keyed by symbol",
                    details={"path": str(self._path), "expected": "object"},
                )
            self._data = {
                str(k).strip().upper(): v for k, v in raw.items() if isinstance(v, Mapping)
            }
            logger.info(
                "snapshot_file_loaded",
                extra={"extra": {"path": str(self._path), "symbols": len(self._data)}},
            )
            return self._data

    def lookup(self, qualified: str, ticker: str) -> Mapping[str, Any] | None:
        """Return the payload for ``EXCHANGE:TICKER`` or the bare ticker."""
        data = self._load()
        return data.get(qualified.upper()) or data.get(ticker.upper())

    def symbols(self) -> list[str]:
        """Keys present in the file, upper-cased."""
        return sorted(self._load())


__all__ = ["SnapshotStore"]
