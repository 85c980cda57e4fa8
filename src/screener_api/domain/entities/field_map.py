# src/screener_api/domain/entities/field_map.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Field series and field map entities.

Purpose:
    Typed, immutable view over a flattened fundamentals payload. Vendors
    deliver fields as either a single most-recent value (``*_fq``,
    ``*_ttm``, ``*_current``) or a historical array (``*_fy_h``, ``*_fq_h``);
    arrays become :class:`FieldSeries`, numbers become scalars.

Design:
    * Series order is most-recent-first, exactly as delivered.
    * Non-finite numbers, booleans and unparsable strings become ``None`` so
      downstream code only ever sees ``float | None``.
    * Transforms return new objects; nothing is mutated after construction.

Layer:
    domain/entities
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

_METADATA_KEYS: frozenset[str] = frozenset({"sector", "industry", "report_type"})
_PERIOD_LABEL_KEYS: tuple[str, ...] = ("years", "periods")


def coerce_number(raw: Any) -> float | None:
    """Return ``raw`` as a finite float, or ``None`` when it is not one.

    Args:
        raw: Any vendor scalar (number, numeric string, null).

    Returns:
        Finite float or ``None``.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int | float):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip().replace(",", ""))
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


@dataclass(frozen=True, slots=True)
class FieldSeries:
    """One vendor field's history, most-recent-first."""

    name: str
    values: tuple[float | None, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(coerce_number(v) for v in self.values))

    @classmethod
    def from_raw(cls, name: str, raw: Iterable[Any]) -> FieldSeries:
        """Build a series from an arbitrary iterable of vendor values."""
        return cls(name=name, values=tuple(raw))

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[float | None]:
        return iter(self.values)

    @property
    def has_data(self) -> bool:
        """True when at least one sample is populated."""
        return any(v is not None for v in self.values)

    def at(self, index: int) -> float | None:
        """Return the sample at ``index`` or ``None`` when out of range."""
        if 0 <= index < len(self.values):
            return self.values[index]
        return None

    def latest(self) -> float | None:
        """Return the most recent populated sample, if any."""
        for v in self.values:
            if v is not None:
                return v
        return None

    def padded(self, length: int) -> FieldSeries:
        """Return a copy right-padded with ``None`` up to ``length``.

        Longer series are returned unchanged; padding never truncates.
        """
        missing = length - len(self.values)
        if missing <= 0:
            return self
        return FieldSeries(name=self.name, values=self.values + (None,) * missing)

    def scaled(self, divisor: float) -> FieldSeries:
        """Return a copy with every populated sample divided by ``divisor``."""
        return FieldSeries(
            name=self.name,
            values=tuple(None if v is None else v / divisor for v in self.values),
        )


@dataclass(frozen=True, slots=True)
class FieldMap:
    """Immutable mapping of vendor field name to history, plus scalar metadata.

    Attributes:
        series: Historical arrays keyed by vendor field name.
        scalars: Single-period numeric fields keyed by vendor field name.
        sector: Free-text sector as reported by the vendor.
        industry: Free-text industry as reported by the vendor.
        report_type: Explicit reporting-profile hint (e.g. ``"banking"``).
        period_labels: Period labels supplied alongside the arrays, if any.
    """

    series: Mapping[str, FieldSeries] = field(default_factory=dict)
    scalars: Mapping[str, float] = field(default_factory=dict)
    sector: str | None = None
    industry: str | None = None
    report_type: str | None = None
    period_labels: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "series", MappingProxyType(dict(self.series)))
        object.__setattr__(self, "scalars", MappingProxyType(dict(self.scalars)))
        object.__setattr__(self, "period_labels", tuple(self.period_labels))

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #
    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> FieldMap:
        """Flatten a ``{field: value | list}`` payload into a field map.

        Lists become series, numbers become scalars, and ``sector``,
        ``industry`` and ``report_type`` become metadata. A ``years`` or
        ``periods`` list of strings is kept as explicit period labels.
        Anything else is ignored.
        """
        series: dict[str, FieldSeries] = {}
        scalars: dict[str, float] = {}
        meta: dict[str, str | None] = {}
        labels: tuple[str, ...] = ()

        for key, value in payload.items():
            name = str(key)
            if name in _METADATA_KEYS:
                meta[name] = str(value).strip() if value not in (None, "") else None
            elif name in _PERIOD_LABEL_KEYS and isinstance(value, list | tuple):
                labels = tuple(str(v) for v in value)
            elif isinstance(value, list | tuple):
                series[name] = FieldSeries.from_raw(name, value)
            else:
                number = coerce_number(value)
                if number is not None:
                    scalars[name] = number

        return cls(
            series=series,
            scalars=scalars,
            sector=meta.get("sector"),
            industry=meta.get("industry"),
            report_type=meta.get("report_type"),
            period_labels=labels,
        )

    def to_payload(self) -> dict[str, Any]:
        """Inverse of :meth:`from_payload`, used for snapshots and caching."""
        out: dict[str, Any] = {name: list(s.values) for name, s in self.series.items()}
        out.update(self.scalars)
        for key in ("sector", "industry", "report_type"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        if self.period_labels:
            out["years"] = list(self.period_labels)
        return out

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #
    def get(self, name: str) -> FieldSeries | None:
        """Return the series for ``name``, if present."""
        return self.series.get(name)

    def scalar(self, name: str) -> float | None:
        """Return the scalar for ``name``, if present."""
        return self.scalars.get(name)

    def has_data(self, name: str) -> bool:
        """True when ``name`` is a populated series or a present scalar."""
        s = self.series.get(name)
        if s is not None and s.has_data:
            return True
        return name in self.scalars

    def values(self, name: str, length: int) -> list[float | None]:
        """Return ``name`` as a list padded with ``None`` to ``length``.

        An absent field yields an all-``None`` list of ``length``.
        """
        s = self.series.get(name)
        if s is None:
            return [None] * length
        return list(s.padded(length).values)

    def first_series(self, *names: str) -> FieldSeries | None:
        """Return the first populated series among ``names``."""
        for name in names:
            s = self.series.get(name)
            if s is not None and s.has_data:
                return s
        return None

    def first_scalar(self, *names: str) -> float | None:
        """Return the first present, non-zero scalar among ``names``."""
        for name in names:
            value = self.scalars.get(name)
            if value:
                return value
        return None

    def longest(self, suffix: str = "") -> int:
        """Length of the longest populated series whose name ends with ``suffix``."""
        lengths = [
            len(s) for name, s in self.series.items() if name.endswith(suffix) and s.has_data
        ]
        return max(lengths, default=0)

    def has_populated_series(self, suffix: str = "") -> bool:
        """True when at least one series ending with ``suffix`` carries data."""
        return self.longest(suffix) > 0


__all__ = ["FieldMap", "FieldSeries", "coerce_number"]
