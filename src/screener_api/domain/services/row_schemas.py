# src/screener_api/domain/services/row_schemas.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Statement row schemas.

Purpose:
    Static row configuration for every statement kind and company type,
    plus the derivations used by computed rows. Schemas are plain tuples of
    :data:`RowSpec` values so they can be inspected and tested without a
    builder.

Layer:
    domain/services
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Final

from screener_api.domain.entities.field_map import FieldMap
from screener_api.domain.entities.row_spec import (
    ComputedRow,
    Derivation,
    FieldRow,
    RowSpec,
    SectionRow,
)
from screener_api.domain.enums.company_type import CompanyType
from screener_api.domain.enums.statement import StatementKind, ValueType
from screener_api.domain.services.key_metrics import roce_series

_PCT = ValueType.PERCENTAGE
_NUM = ValueType.NUMBER

Rows = Mapping[str, Sequence[float | None]]


# --------------------------------------------------------------------------- #
# Derivations
# --------------------------------------------------------------------------- #
def first_available(*names: str) -> Derivation:
    """Values of the first populated field among ``names``."""

    def derive(fields: FieldMap, rows: Rows, periods: int) -> list[float | None]:
        series = fields.first_series(*names)
        if series is None:
            return [None] * periods
        return list(series.padded(periods).values)[:periods]

    return derive


def sum_of_fields(*names: str) -> Derivation:
    """Per-period sum of ``names``; gaps count as zero unless all are gaps."""

    def derive(fields: FieldMap, rows: Rows, periods: int) -> list[float | None]:
        columns = [fields.values(name, periods) for name in names]
        out: list[float | None] = []
        for i in range(periods):
            present = [col[i] for col in columns if col[i] is not None]
            out.append(sum(present) if present else None)
        return out

    return derive


def sum_of_rows(*keys: str) -> Derivation:
    """Per-period sum of earlier rows; ``None`` when every addend is missing."""

    def derive(fields: FieldMap, rows: Rows, periods: int) -> list[float | None]:
        out: list[float | None] = []
        for i in range(periods):
            present = [
                rows[k][i] for k in keys if k in rows and i < len(rows[k]) and rows[k][i] is not None
            ]
            out.append(sum(present) if present else None)
        return out

    return derive


def total_debt_or_components(fields: FieldMap, rows: Rows, periods: int) -> list[float | None]:
    """``total_debt_fy_h`` when populated, else short-term plus long-term debt."""
    if fields.has_data("total_debt_fy_h"):
        return fields.values("total_debt_fy_h", periods)[:periods]
    return sum_of_fields("short_term_debt_fy_h", "long_term_debt_fy_h")(fields, rows, periods)


def tax_rate_from(pretax_key: str, tax_field: str) -> Derivation:
    """Effective tax rate ``|tax| / pretax * 100`` against an earlier row."""

    def derive(fields: FieldMap, rows: Rows, periods: int) -> list[float | None]:
        pretax = list(rows.get(pretax_key, ())) + [None] * periods
        tax = fields.values(tax_field, periods)
        out: list[float | None] = []
        for i in range(periods):
            p, t = pretax[i], tax[i]
            if p is None or t is None:
                out.append(None)
            elif p == 0:
                out.append(0.0)
            else:
                out.append(abs(t) / p * 100)
        return out

    return derive


def net_npa_pct(fields: FieldMap, rows: Rows, periods: int) -> list[float | None]:
    """Net NPA ``max(0, (npl - allowances) / loans_net * 100)`` per quarter."""
    npl = fields.values("nonperf_loans_fq_h", periods)
    allowances = fields.values("loan_loss_allowances_fq_h", periods)
    loans = fields.values("loans_net_fq_h", periods)
    out: list[float | None] = []
    for i in range(periods):
        n, a, ln = npl[i], allowances[i], loans[i]
        if n is None or a is None or not ln:
            out.append(None)
        else:
            out.append(max(0.0, (n - a) / ln * 100))
    return out


# --------------------------------------------------------------------------- #
# Balance sheet
# --------------------------------------------------------------------------- #
def _balance_sheet(company_type: CompanyType) -> tuple[RowSpec, ...]:
    banking = company_type is CompanyType.BANKING
    liabilities: list[RowSpec] = [
        SectionRow("liabilities", "Liabilities"),
        FieldRow("equity_capital", "Equity Capital", "common_stock_par_fy_h", level=1),
        FieldRow("reserves", "Reserves", "retained_earnings_fy_h", level=1),
    ]
    if banking:
        liabilities.append(FieldRow("deposits", "Deposits", "total_deposits_fy_h", level=1))
    liabilities += [
        ComputedRow("borrowings", "Borrowings", total_debt_or_components, level=1),
        FieldRow(
            "other_liabilities",
            "Other Liabilities",
            "other_liabilities_total_fy_h" if banking else "total_current_liabilities_fy_h",
            level=1,
        ),
        FieldRow("total_liabilities", "Total Liabilities", "total_liabilities_fy_h", is_total=True),
    ]
    assets: list[RowSpec] = [
        SectionRow("assets", "Assets"),
        FieldRow("fixed_assets", "Fixed Assets", "ppe_total_net_fy_h", level=1),
        FieldRow("cwip", "CWIP", "cwip_fy_h", level=1),
        FieldRow("investments", "Investments", "long_term_investments_fy_h", level=1),
        FieldRow("other_assets", "Other Assets", "long_term_other_assets_total_fy_h", level=1),
        FieldRow("total_assets", "Total Assets", "total_assets_fy_h", is_total=True),
    ]
    return (*liabilities, *assets)


# --------------------------------------------------------------------------- #
# Profit & loss
# --------------------------------------------------------------------------- #
_PL_TAIL: Final[tuple[RowSpec, ...]] = (
    ComputedRow("tax_pct", "Tax %", tax_rate_from("profit_before_tax", "income_tax_fy_h"), _PCT),
    FieldRow("net_profit", "Net Profit", "net_income_fy_h", is_total=True),
    FieldRow("eps", "EPS in Rs", "earnings_per_share_basic_fy_h", _NUM),
    FieldRow("dividend_payout", "Dividend Payout %", "dividend_payout_ratio_fy_h", _PCT),
)

BANKING_PROFIT_AND_LOSS: Final[tuple[RowSpec, ...]] = (
    FieldRow("revenue", "Revenue", "total_revenue_fy_h"),
    FieldRow("interest", "Interest", "interest_income_fy_h"),
    ComputedRow(
        "expenses",
        "Expenses",
        sum_of_fields(
            "minority_interest_exp_fy_h",
            "other_oper_expense_total_fy_h",
            "interest_expense_on_debt_fy_h",
        ),
    ),
    FieldRow("financing_profit", "Financing Profit", "interest_income_net_fy_h", is_subtotal=True),
    FieldRow("financing_margin", "Financing Margin %", "net_interest_margin_fy_h", _PCT),
    FieldRow("other_income", "Other Income", "non_interest_income_fy_h"),
    FieldRow("depreciation", "Depreciation", "depreciation_depletion_fy_h"),
    FieldRow("profit_before_tax", "Profit before tax", "pretax_income_fy_h", is_subtotal=True),
    *_PL_TAIL,
)

NON_BANKING_PROFIT_AND_LOSS: Final[tuple[RowSpec, ...]] = (
    ComputedRow("sales", "Sales", first_available("revenue_fy_h", "total_revenue_fy_h")),
    FieldRow("expenses", "Expenses", "cost_of_goods_fy_h"),
    FieldRow("operating_profit", "Operating Profit", "gross_profit_fy_h", is_subtotal=True),
    FieldRow("opm", "OPM %", "gross_margin_fy_h", _PCT),
    FieldRow("other_income", "Other Income", "other_income_fy_h"),
    FieldRow("interest", "Interest", "interest_expense_fy_h"),
    FieldRow("depreciation", "Depreciation", "depreciation_fy_h"),
    FieldRow("profit_before_tax", "Profit before tax", "pretax_income_fy_h", is_subtotal=True),
    *_PL_TAIL,
)


# --------------------------------------------------------------------------- #
# Cash flow
# --------------------------------------------------------------------------- #
CASH_FLOW: Final[tuple[RowSpec, ...]] = (
    FieldRow("operating", "Cash from Operating Activity", "cash_f_operating_activities_fy_h"),
    FieldRow("investing", "Cash from Investing Activity", "cash_f_investing_activities_fy_h"),
    FieldRow("financing", "Cash from Financing Activity", "cash_f_financing_activities_fy_h"),
    ComputedRow(
        "net_cash_flow",
        "Net Cash Flow",
        sum_of_rows("operating", "investing", "financing"),
        is_total=True,
    ),
    FieldRow("free_cash_flow", "Free Cash Flow", "free_cash_flow_fy_h"),
)


# --------------------------------------------------------------------------- #
# Ratios
# --------------------------------------------------------------------------- #
_RETURNS: Final[tuple[RowSpec, ...]] = (
    SectionRow("returns", "Returns"),
    FieldRow("roe", "ROE %", "return_on_equity_fy_h", _PCT, level=1),
    FieldRow("roa", "ROA %", "return_on_assets_fy_h", _PCT, level=1),
    ComputedRow("roce", "ROCE %", roce_series, _PCT, level=1),
)

_VALUATION: Final[tuple[RowSpec, ...]] = (
    SectionRow("valuation", "Valuation"),
    FieldRow("debt_to_equity", "Debt to Equity", "debt_to_equity_fy_h", _NUM, level=1),
    FieldRow("price_earnings", "Price to Earnings", "price_earnings_fy_h", _NUM, level=1),
    FieldRow("price_book", "Price to Book", "price_book_fy_h", _NUM, level=1),
    FieldRow("dividend_payout", "Dividend Payout %", "dividend_payout_ratio_fy_h", _PCT, level=1),
)

BANKING_RATIOS: Final[tuple[RowSpec, ...]] = (
    *_RETURNS,
    *_VALUATION,
    SectionRow("banking", "Banking"),
    FieldRow("nim", "Net Interest Margin %", "net_interest_margin_fy_h", _PCT, level=1),
    FieldRow("efficiency", "Efficiency Ratio %", "efficiency_ratio_fy_h", _PCT, level=1),
    FieldRow("loans_to_deposits", "Loans to Deposits", "loans_net_total_deposits_fy_h", _NUM, level=1),
    FieldRow("casa", "CASA %", "demand_deposits_total_deposits_fy_h", _PCT, level=1),
    FieldRow("gross_npa", "Gross NPA %", "nonperf_loans_loans_gross_fy_h", _PCT, level=1),
    FieldRow("provision_coverage", "Provision Coverage %", "loan_loss_coverage_fy_h", _PCT, level=1),
)

NON_BANKING_RATIOS: Final[tuple[RowSpec, ...]] = (
    *_RETURNS,
    *_VALUATION,
    SectionRow("margins", "Margins"),
    FieldRow("operating_margin", "Operating Margin %", "operating_margin_fy_h", _PCT, level=1),
    FieldRow("net_margin", "Net Margin %", "net_margin_fy_h", _PCT, level=1),
    FieldRow("gross_margin", "Gross Margin %", "gross_margin_fy_h", _PCT, level=1),
    SectionRow("efficiency", "Efficiency"),
    FieldRow("current_ratio", "Current Ratio", "current_ratio_fy_h", _NUM, level=1),
    FieldRow("quick_ratio", "Quick Ratio", "quick_ratio_fy_h", _NUM, level=1),
    FieldRow("asset_turnover", "Asset Turnover", "asset_turnover_fy_h", _NUM, level=1),
    FieldRow("inventory_turnover", "Inventory Turnover", "invent_turnover_fy_h", _NUM, level=1),
    FieldRow("price_sales", "Price to Sales", "price_sales_fy_h", _NUM, level=1),
)


# --------------------------------------------------------------------------- #
# Quarterly results
# --------------------------------------------------------------------------- #
BANKING_QUARTERLY: Final[tuple[RowSpec, ...]] = (
    FieldRow("revenue", "Revenue", "total_revenue_fq_h"),
    FieldRow("interest", "Interest", "interest_income_fq_h"),
    FieldRow("expenses", "Expenses", "total_oper_expense_fq_h"),
    FieldRow("financing_profit", "Financing Profit", "interest_income_net_fq_h", is_subtotal=True),
    FieldRow("financing_margin", "Financing Margin %", "net_interest_margin_fq_h", _PCT),
    FieldRow("other_income", "Other Income", "non_interest_income_fq_h"),
    FieldRow("depreciation", "Depreciation", "depreciation_fq_h"),
    FieldRow("profit_before_tax", "Profit before tax", "pretax_income_fq_h", is_subtotal=True),
    FieldRow("tax_pct", "Tax %", "tax_rate_fq_h", _PCT),
    FieldRow("net_profit", "Net Profit", "net_income_fq_h", is_total=True),
    FieldRow("eps", "EPS in Rs", "earnings_per_share_basic_fq_h", _NUM),
    FieldRow("gross_npa", "Gross NPA %", "nonperf_loans_loans_gross_fq_h", _PCT),
    ComputedRow("net_npa", "Net NPA %", net_npa_pct, _PCT),
)

NON_BANKING_QUARTERLY: Final[tuple[RowSpec, ...]] = (
    ComputedRow("sales", "Sales", first_available("revenue_fq_h", "total_revenue_fq_h")),
    FieldRow("expenses", "Expenses", "total_oper_expense_fq_h"),
    FieldRow("operating_profit", "Operating Profit", "oper_income_fq_h", is_subtotal=True),
    FieldRow("opm", "OPM %", "operating_margin_fq_h", _PCT),
    FieldRow("other_income", "Other Income", "non_oper_income_fq_h"),
    FieldRow("interest", "Interest", "non_oper_interest_income_fq_h"),
    FieldRow("depreciation", "Depreciation", "depreciation_fq_h"),
    FieldRow("profit_before_tax", "Profit before tax", "pretax_income_fq_h", is_subtotal=True),
    FieldRow("tax_pct", "Tax %", "tax_rate_fq_h", _PCT),
    FieldRow("net_profit", "Net Profit", "net_income_fq_h", is_total=True),
    FieldRow("eps", "EPS in Rs", "earnings_per_share_basic_fq_h", _NUM),
)


_REGISTRY: Final[dict[tuple[StatementKind, CompanyType], tuple[RowSpec, ...]]] = {
    (StatementKind.BALANCE_SHEET, CompanyType.BANKING): _balance_sheet(CompanyType.BANKING),
    (StatementKind.BALANCE_SHEET, CompanyType.NON_BANKING): _balance_sheet(CompanyType.NON_BANKING),
    (StatementKind.PROFIT_AND_LOSS, CompanyType.BANKING): BANKING_PROFIT_AND_LOSS,
    (StatementKind.PROFIT_AND_LOSS, CompanyType.NON_BANKING): NON_BANKING_PROFIT_AND_LOSS,
    (StatementKind.CASH_FLOW, CompanyType.BANKING): CASH_FLOW,
    (StatementKind.CASH_FLOW, CompanyType.NON_BANKING): CASH_FLOW,
    (StatementKind.RATIOS, CompanyType.BANKING): BANKING_RATIOS,
    (StatementKind.RATIOS, CompanyType.NON_BANKING): NON_BANKING_RATIOS,
    (StatementKind.QUARTERLY, CompanyType.BANKING): BANKING_QUARTERLY,
    (StatementKind.QUARTERLY, CompanyType.NON_BANKING): NON_BANKING_QUARTERLY,
}


def statement_rows(kind: StatementKind, company_type: CompanyType) -> tuple[RowSpec, ...]:
    """Row schema for ``kind`` and ``company_type``."""
    return _REGISTRY[(kind, company_type)]


def schema_fields(kind: StatementKind) -> tuple[str, ...]:
    """Every vendor field read directly by either variant of ``kind``."""
    seen: dict[str, None] = {}
    for company_type in CompanyType:
        for spec in statement_rows(kind, company_type):
            if isinstance(spec, FieldRow):
                seen.setdefault(spec.field, None)
    return tuple(seen)


__all__ = [
    "BANKING_PROFIT_AND_LOSS",
    "BANKING_QUARTERLY",
    "BANKING_RATIOS",
    "CASH_FLOW",
    "NON_BANKING_PROFIT_AND_LOSS",
    "NON_BANKING_QUARTERLY",
    "NON_BANKING_RATIOS",
    "first_available",
    "net_npa_pct",
    "schema_fields",
    "statement_rows",
    "sum_of_fields",
    "sum_of_rows",
    "tax_rate_from",
    "total_debt_or_components",
]
