# src/screener_api/domain/enums/company_type.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Company type enumeration.

Purpose:
    Coarse reporting profile of a listed company. Banks report a different
    set of line items (deposits, advances, NPAs) than operating companies, so
    every statement schema is selected per company type.

Layer:
    domain
"""

from __future__ import annotations

from enum import Enum


class CompanyType(str, Enum):
    """Reporting profile used to select row schemas."""

    BANKING = "banking"
    NON_BANKING = "non-banking"


__all__ = ["CompanyType"]
