# tests/unit/domain/test_candle.py
from __future__ import annotations

from screener_api.domain.entities.candle import Candle, CandleSeries, normalize_candles


def _bar(t: int, close: float) -> Candle:
    return Candle(time=t, open=close, high=close, low=close, close=close)


def test_normalize_candles_sorts_filters_and_keeps_last_duplicate() -> None:
    bars = [_bar(300, 3.0), _bar(100, 1.0), _bar(300, 4.0), _bar(50, 9.0)]

    out = normalize_candles(bars, since=100)

    assert [c.time for c in out] == [100, 300]
    assert out[-1].close == 4.0


def test_candle_series_length() -> None:
    assert len(CandleSeries(exchange="NSE")) == 0
    assert len(CandleSeries(exchange="NSE", candles=(_bar(1, 1.0),))) == 1
    assert _bar(1, 1.0).volume == 0
