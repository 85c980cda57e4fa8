# tests/unit/infrastructure/test_snapshot_store.py
from __future__ import annotations

import json
from pathlib import Path

import pytest

from screener_api.domain.exceptions.fundamentals import MalformedUpstreamData
from screener_api.infrastructure.snapshots.loader import SnapshotStore


def _write(tmp_path: Path, content: object) -> Path:
    path = tmp_path / "snapshots.json"
    path.write_text(json.dumps(content), encoding="utf-8")
    return path


def test_lookup_prefers_the_qualified_key(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        {
            "nse:tcs": {"close": 1.0},
            "TCS": {"close": 2.0},
            "INFY": {"close": 3.0},
            "BROKEN": [1, 2],
        },
    )
    store = SnapshotStore(path)

    assert store.lookup("NSE:TCS", "TCS") == {"close": 1.0}
    assert store.lookup("NSE:INFY", "INFY") == {"close": 3.0}
    assert store.lookup("NSE:WIPRO", "WIPRO") is None
    assert store.symbols() == ["INFY", "NSE:TCS", "TCS"]
    assert store.path == path


def test_missing_file_is_an_empty_store(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path / "absent.json")
    assert store.lookup("NSE:TCS", "TCS") is None
    assert store.symbols() == []


def test_invalid_json_is_malformed(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(MalformedUpstreamData):
        SnapshotStore(path).symbols()


def test_top_level_must_be_an_object(tmp_path: Path) -> None:
    with pytest.raises(MalformedUpstreamData) as ei:
        SnapshotStore(_write(tmp_path, [{"close": 1}])).symbols()
    assert ei.value.details["expected"] == "object"
