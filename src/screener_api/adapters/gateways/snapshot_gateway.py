# src/screener_api/adapters/gateways/snapshot_gateway.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Adapter Gateway: local snapshot file → FieldMap."""

from __future__ import annotations

from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.exceptions.fundamentals import UpstreamUnavailable
from screener_api.domain.value_objects.symbol import Symbol
from screener_api.infrastructure.snapshots.loader import SnapshotStore


class SnapshotGateway:
    """``FundamentalsSource`` served from a :class:`SnapshotStore`."""

    def __init__(self, store: SnapshotStore) -> None:
        self._store = store

    async def get_fundamentals(self, symbol: Symbol) -> FieldMap:
        payload = self._store.lookup(symbol.qualified, symbol.ticker)
        if payload is None:
            raise UpstreamUnavailable(
                "no snapshot for symbol",
                details={"symbol": symbol.qualified, "path": str(self._store.path)},
            )
        return FieldMap.from_payload(payload)


__all__ = ["SnapshotGateway"]
