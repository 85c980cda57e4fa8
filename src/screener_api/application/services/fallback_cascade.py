# src/screener_api/application/services/fallback_cascade.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Fallback cascade runner.

Synopsis:
    Try an ordered list of data-acquisition tiers until one yields a valid
    result. Used for every upstream fetch (fundamentals, price history,
    fundamental series) so that each view renders even when live vendors are
    down or return partial data.

Design:
    * Tiers run strictly in the given order (normally LIVE, SECONDARY_LIVE,
      SNAPSHOT, SYNTHETIC).
    * A tier fails when it raises, exceeds its timeout, or returns a value
      rejected by its validity predicate. Failures are recorded, logged and
      counted; the cascade then advances.
    * No retries inside the cascade; transport-level retries belong to the
      vendor clients.
    * Cancellation of the surrounding task is never absorbed.
    * When every tier fails, :class:`NoDataAvailable` is raised.

Layer:
    application/services
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Literal

from screener_api.domain.enums.provenance import Provenance
from screener_api.domain.exceptions.fundamentals import NoDataAvailable
from screener_api.infrastructure.logging.logger import get_json_logger
from screener_api.infrastructure.observability.metrics import (
    get_cascade_resolutions_total,
    get_cascade_tier_failures_total,
)

logger = get_json_logger(__name__)

FailureReason = Literal["error", "timeout", "invalid"]


def _always_valid(_: object) -> bool:
    return True


@dataclass(frozen=True)
class CascadeTier[T]:
    """One acquisition attempt.

    Attributes:
        provenance: Tag attached to results produced by this tier.
        attempt: Zero-argument coroutine factory performing the fetch.
        is_valid: Predicate a result must satisfy to be accepted.
        timeout_s: Per-tier timeout; ``None`` uses the cascade default.
    """

    provenance: Provenance
    attempt: Callable[[], Awaitable[T]]
    is_valid: Callable[[T], bool] = _always_valid
    timeout_s: float | None = None


@dataclass(frozen=True)
class TierFailure:
    """Why a tier was skipped."""

    provenance: Provenance
    reason: FailureReason
    detail: str = ""


@dataclass(frozen=True)
class CascadeResult[T]:
    """Accepted value, the tier that produced it and earlier failures."""

    value: T
    provenance: Provenance
    failures: tuple[TierFailure, ...] = field(default_factory=tuple)


class FallbackCascade[T]:
    """Ordered runner over :class:`CascadeTier` values.

    Args:
        tiers: Tiers in priority order.
        resource: Short resource name for logs and metrics (``"statement"``,
            ``"price_history"``...).
        entity: Human-readable subject used in the "no data" message,
            typically the qualified symbol.
        default_timeout_s: Timeout for tiers that do not set their own;
            ``None`` disables the timeout.
    """

    def __init__(
        self,
        tiers: Sequence[CascadeTier[T]],
        *,
        resource: str,
        entity: str,
        default_timeout_s: float | None = None,
    ) -> None:
        self._tiers = tuple(tiers)
        self._resource = resource
        self._entity = entity
        self._default_timeout_s = default_timeout_s

    async def run(self) -> CascadeResult[T]:
        """Run tiers in order and return the first valid result.

        Raises:
            NoDataAvailable: Every tier failed.
        """
        failures: list[TierFailure] = []
        for tier in self._tiers:
            timeout = tier.timeout_s if tier.timeout_s is not None else self._default_timeout_s
            try:
                value = await asyncio.wait_for(tier.attempt(), timeout=timeout)
            except TimeoutError:
                self._record(failures, TierFailure(tier.provenance, "timeout", f"{timeout}s"))
                continue
            except Exception as exc:
                self._record(
                    failures, TierFailure(tier.provenance, "error", f"{type(exc).__name__}: {exc}")
                )
                continue

            try:
                valid = tier.is_valid(value)
            except Exception as exc:
                valid = False
                detail = f"validator raised {type(exc).__name__}"
            else:
                detail = "rejected by validator"
            if not valid:
                self._record(failures, TierFailure(tier.provenance, "invalid", detail))
                continue

            get_cascade_resolutions_total().labels(
                resource=self._resource, provenance=tier.provenance.value
            ).inc()
            logger.info(
                "cascade_resolved",
                extra={
                    "extra": {
                        "resource": self._resource,
                        "entity": self._entity,
                        "provenance": tier.provenance.value,
                        "skipped": len(failures),
                    }
                },
            )
            return CascadeResult(value=value, provenance=tier.provenance, failures=tuple(failures))

        logger.warning(
            "cascade_exhausted",
            extra={
                "extra": {
                    "resource": self._resource,
                    "entity": self._entity,
                    "tiers": [f.provenance.value for f in failures],
                }
            },
        )
        raise NoDataAvailable(
            f"no data for {self._entity}",
            details={
                "resource": self._resource,
                "failures": [
                    {"provenance": f.provenance.value, "reason": f.reason} for f in failures
                ],
            },
        )

    def _record(self, failures: list[TierFailure], failure: TierFailure) -> None:
        failures.append(failure)
        get_cascade_tier_failures_total().labels(
            resource=self._resource,
            provenance=failure.provenance.value,
            reason=failure.reason,
        ).inc()
        logger.warning(
            "cascade_tier_failed",
            extra={
                "extra": {
                    "resource": self._resource,
                    "entity": self._entity,
                    "provenance": failure.provenance.value,
                    "reason": failure.reason,
                    "detail": failure.detail,
                }
            },
        )


__all__ = ["CascadeResult", "CascadeTier", "FailureReason", "FallbackCascade", "TierFailure"]
