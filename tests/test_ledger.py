from __future__ import annotations

import json
from pathlib import Path

import pytest

from ffa import ledger
from ffa.archive_paths import ledger_path_for
from ffa.core.records import Entry
from ffa.errors import LedgerError, MissingLedger


def test_capture_keeps_every_name_in_index_order() -> None:
    entries = [
        Entry(name="b.so4", offset=5, size=12, order=1),
        Entry(name="a.txt", offset=0, size=5, order=0),
        Entry(name="bad", offset=0xFFFFFFF0, size=99, order=2),
    ]
    led = ledger.capture(entries, archive="game.dat")
    assert led.names == ("a.txt", "b.so4", "bad")
    assert led.archive == "game.dat"
    assert len(led) == 3


def test_persist_and_load_roundtrip(tmp_path: Path) -> None:
    p = tmp_path / "game.order.json"
    led = ledger.OrderLedger(names=("a.txt", "sub\\c.so5", "a.txt"), archive="game.dat")
    ledger.persist(led, p)
    assert ledger.load(p) == led

    raw = json.loads(p.read_text(encoding="utf-8"))
    assert raw["spec"] == "ffa.order_ledger.v1"
    assert raw["count"] == 3


def test_ledger_path_is_derived_from_archive(tmp_path: Path) -> None:
    assert ledger_path_for(tmp_path / "game.dat") == tmp_path / "game.order.json"
    assert ledger_path_for(Path("x.y.dat")) == Path("x.y.order.json")


def test_missing_ledger(tmp_path: Path) -> None:
    with pytest.raises(MissingLedger):
        ledger.load(tmp_path / "nope.order.json")


@pytest.mark.parametrize(
    "payload",
    [
        {"spec": "ffa.order_ledger.v1", "names": []},
        {"spec": "ffa.order_ledger.v1", "names": "a.txt"},
        {"spec": "ffa.order_ledger.v1", "names": ["a", 3]},
        {"spec": "ffa.order_ledger.v1", "names": ["a"], "count": 2},
        {"spec": "other", "names": ["a"]},
        ["a.txt"],
    ],
    ids=["empty", "not-list", "non-str", "count", "spec", "not-object"],
)
def test_invalid_ledger_rejected(tmp_path: Path, payload) -> None:
    p = tmp_path / "game.order.json"
    p.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(LedgerError):
        ledger.load(p)


def test_ledger_not_json(tmp_path: Path) -> None:
    p = tmp_path / "game.order.json"
    p.write_bytes(b"\xff\xfe garbage")
    with pytest.raises(LedgerError):
        ledger.load(p)
