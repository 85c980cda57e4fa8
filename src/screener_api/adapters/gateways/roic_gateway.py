# src/screener_api/adapters/gateways/roic_gateway.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Adapter Gateway: ROIC.ai balance sheets → FieldMap.

Maps yearly ROIC records onto the ``*_fy_h`` fields used by the statement
schemas. Records are ordered by fiscal year, most recent first, so the
resulting series line up with the rest of the fundamentals model. Values
stay in raw rupees; crore conversion happens in the statement builder.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Final, Protocol

from screener_api.domain.entities.field_map import FieldMap, FieldSeries, coerce_number
from screener_api.domain.value_objects.symbol import Symbol

FIELD_MAPPING: Final[dict[str, str]] = {
    "bs_net_fix_asset": "ppe_total_net_fy_h",
    "bs_goodwill": "goodwill_fy_h",
    "bs_other_intangible_assets_detailed": "intangibles_net_fy_h",
    "bs_other_noncurrent_assets_detailed": "other_noncurrent_assets_fy_h",
    "bs_tot_non_cur_asset": "total_noncurrent_assets_fy_h",
    "bs_inventories": "total_inventory_fy_h",
    "bs_accts_rec_excl_notes_rec": "accounts_receivable_fy_h",
    "bs_cash_near_cash_item": "cash_fy_h",
    "bs_mkt_sec_other_st_invest": "short_term_investments_fy_h",
    "bs_other_current_assets_detailed": "other_current_assets_fy_h",
    "bs_cur_asset_report": "total_current_assets_fy_h",
    "bs_tot_asset": "total_assets_fy_h",
    "bs_acct_payable": "accounts_payable_fy_h",
    "bs_st_borrow": "short_term_debt_fy_h",
    "bs_other_current_liabs_detailed": "other_current_liabilities_fy_h",
    "bs_cur_liab": "total_current_liabilities_fy_h",
    "bs_lt_borrow": "long_term_debt_fy_h",
    "bs_other_noncurrent_liabs_detailed": "other_noncurrent_liabilities_fy_h",
    "bs_non_cur_liab": "total_noncurrent_liabilities_fy_h",
    "bs_tot_liab": "total_liabilities_fy_h",
    "bs_common_stock": "common_stock_par_fy_h",
    "bs_pure_retained_earnings": "retained_earnings_fy_h",
    "bs_minority_noncontrolling_interest": "minority_interest_fy_h",
    "bs_total_equity": "total_equity_fy_h",
    "bs_sh_cap_and_apic": "total_share_capital_fy_h",
}


class RoicTransport(Protocol):
    async def balance_sheet(self, ticker: str) -> list[Mapping[str, Any]]: ...


def _fiscal_year(record: Mapping[str, Any]) -> int:
    value = coerce_number(record.get("fiscal_year"))
    return int(value) if value is not None else 0


def _debt_total(short: float | None, long: float | None) -> float | None:
    if short is None and long is None:
        return None
    return (short or 0.0) + (long or 0.0)


def map_balance_sheet(records: Sequence[Mapping[str, Any]]) -> FieldMap:
    """Map ROIC yearly records onto a :class:`FieldMap`.

    ``total_debt_fy_h`` is the sum of short- and long-term borrowings.
    Period labels are ``"Mar <fiscal year>"`` when every record carries one.
    """
    ordered = sorted(records, key=_fiscal_year, reverse=True)
    series: dict[str, FieldSeries] = {}
    for roic_field, field_name in FIELD_MAPPING.items():
        values = [coerce_number(r.get(roic_field)) for r in ordered]
        if any(v is not None for v in values):
            series[field_name] = FieldSeries(name=field_name, values=tuple(values))

    short = series.get("short_term_debt_fy_h")
    long = series.get("long_term_debt_fy_h")
    if short is not None or long is not None:
        debt = [
            _debt_total(
                short.at(i) if short is not None else None,
                long.at(i) if long is not None else None,
            )
            for i in range(len(ordered))
        ]
        series["total_debt_fy_h"] = FieldSeries(name="total_debt_fy_h", values=tuple(debt))

    years = [_fiscal_year(r) for r in ordered]
    labels = tuple(f"Mar {y}" for y in years) if all(years) else ()
    return FieldMap(series=series, period_labels=labels)


class RoicGateway:
    """ROIC.ai adapter implementing ``FundamentalsSource`` for balance sheets."""

    def __init__(self, client: RoicTransport) -> None:
        self._client = client

    async def get_fundamentals(self, symbol: Symbol) -> FieldMap:
        records = await self._client.balance_sheet(symbol.ticker)
        return map_balance_sheet(records)


__all__ = ["FIELD_MAPPING", "RoicGateway", "map_balance_sheet"]
