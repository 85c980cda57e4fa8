# src/screener_api/domain/value_objects/symbol.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Exchange-qualified ticker symbol.

Purpose:
    Normalize user-supplied tickers such as ``"reliance"`` or
    ``"BSE:500325"`` into an ``EXCHANGE:TICKER`` pair. Bare tickers receive
    the configured default exchange.

Layer:
    domain/value_objects
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from screener_api.domain.exceptions.fundamentals import InvalidRequest

_TICKER_RE = re.compile(r"^[A-Z0-9][A-Z0-9&._\-]{0,31}$")
_EXCHANGE_RE = re.compile(r"^[A-Z]{2,10}$")


@dataclass(frozen=True, slots=True)
class Symbol:
    """Ticker qualified with its listing exchange."""

    exchange: str
    ticker: str

    @property
    def qualified(self) -> str:
        """Return the ``EXCHANGE:TICKER`` form used by upstream vendors."""
        return f"{self.exchange}:{self.ticker}"

    def __str__(self) -> str:
        return self.qualified

    @classmethod
    def parse(cls, raw: str | None, *, default_exchange: str = "NSE") -> Symbol:
        """Parse a raw symbol.

        Args:
            raw: User input, optionally exchange-prefixed.
            default_exchange: Exchange applied when ``raw`` has no prefix.

        Returns:
            Normalized symbol (upper-cased).

        Raises:
            InvalidRequest: If the input is empty or contains unsupported
                characters.
        """
        text = (raw or "").strip().upper()
        if not text:
            raise InvalidRequest("symbol is required", details={"symbol": raw})

        if ":" in text:
            exchange, _, ticker = text.partition(":")
        else:
            exchange, ticker = default_exchange.strip().upper(), text

        if not _EXCHANGE_RE.match(exchange) or not _TICKER_RE.match(ticker):
            raise InvalidRequest("unsupported symbol format", details={"symbol": raw})
        return cls(exchange=exchange, ticker=ticker)


__all__ = ["Symbol"]
