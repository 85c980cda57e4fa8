# src/screener_api/domain/services/company_classifier.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Company-type classifier.

Purpose:
    Decide whether a company reports as a bank. Rules, first match wins:

    1. An explicit report-type hint equal to ``"banking"``.
    2. The sector text contains a known banking sector name
       (case-insensitive substring match).
    3. At least one banking-only indicator field carries data.
    4. Otherwise ``non-banking``.

    Classification never fails.

Layer:
    domain/services
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.enums.company_type import CompanyType

BANKING_SECTORS: Final[tuple[str, ...]] = (
    "Banks",
    "Banking",
    "Financial Services",
    "Finance",
    "Private Sector Bank",
    "Public Sector Bank",
    "Cooperative Bank",
    "Regional Rural Bank",
    "Small Finance Bank",
    "Payments Bank",
)

# Interest income/expense are absent on purpose: operating companies report
# them as well.
_INDICATOR_STEMS: Final[tuple[str, ...]] = (
    "total_deposits",
    "loans_net",
    "loans_gross",
    "net_interest_margin",
    "nonperf_loans_loans_gross",
    "loans_net_total_deposits",
)

BANKING_INDICATOR_FIELDS: Final[tuple[str, ...]] = tuple(
    f"{stem}{suffix}" for stem in _INDICATOR_STEMS for suffix in ("_fy_h", "_fq_h")
)


@dataclass(frozen=True, slots=True)
class Classification:
    """Classifier verdict and the rule that produced it."""

    company_type: CompanyType
    reason: str


def explain_company_type(
    fields: FieldMap,
    *,
    sector: str | None = None,
    report_type: str | None = None,
) -> Classification:
    """Classify a company and report which rule fired.

    Args:
        fields: Flattened fundamentals.
        sector: Sector override; defaults to ``fields.sector``.
        report_type: Report-type override; defaults to ``fields.report_type``.

    Returns:
        The classification with a short reason string.
    """
    hint = (report_type if report_type is not None else fields.report_type) or ""
    if hint.strip().lower() == CompanyType.BANKING.value:
        return Classification(CompanyType.BANKING, "report_type")

    sector_text = ((sector if sector is not None else fields.sector) or "").lower()
    if sector_text:
        for name in BANKING_SECTORS:
            if name.lower() in sector_text:
                return Classification(CompanyType.BANKING, f"sector:{name}")

    for name in BANKING_INDICATOR_FIELDS:
        if fields.has_data(name):
            return Classification(CompanyType.BANKING, f"indicator:{name}")

    return Classification(CompanyType.NON_BANKING, "default")


def classify_company(
    fields: FieldMap,
    *,
    sector: str | None = None,
    report_type: str | None = None,
) -> CompanyType:
    """Return ``banking`` or ``non-banking`` for ``fields``."""
    return explain_company_type(fields, sector=sector, report_type=report_type).company_type


__all__ = [
    "BANKING_INDICATOR_FIELDS",
    "BANKING_SECTORS",
    "Classification",
    "classify_company",
    "explain_company_type",
]
