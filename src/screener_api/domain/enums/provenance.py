# src/screener_api/domain/enums/provenance.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Provenance tag enumeration.

Purpose:
    Identify which fallback tier produced a response so callers can tell
    live, secondary, snapshot and synthetic data apart.

Layer:
    domain
"""

from __future__ import annotations

from enum import Enum


class Provenance(str, Enum):
    """Fallback tier that produced a dataset, in cascade order."""

    LIVE = "live"
    SECONDARY_LIVE = "secondary_live"
    SNAPSHOT = "snapshot"
    SYNTHETIC = "synthetic"

    @property
    def rank(self) -> int:
        """Return the zero-based cascade position of this tier."""
        return list(Provenance).index(self)

    @classmethod
    def weakest(cls, *tags: Provenance) -> Provenance:
        """Return the least-live tag among ``tags``.

        A view fused from several fetches is only as live as its weakest
        input.

        Raises:
            ValueError: If no tags are given.
        """
        if not tags:
            raise ValueError("at least one provenance tag is required")
        return max(tags, key=lambda t: t.rank)


__all__ = ["Provenance"]
