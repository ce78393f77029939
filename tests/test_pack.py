from __future__ import annotations

import json
import struct
from pathlib import Path

import pytest

from ffa import pack as pack_mod
from ffa.errors import LedgerError, MissingLedger, MissingResource, TooManyEntries, UsageError
from ffa.pack import pack_archive
from ffa.pack_config import PackConfig
from ffa.report import RecordingReporter


class _FailingCodec:
    codec_id = "boom"

    def compress(self, data: bytes) -> bytes:
        raise RuntimeError("encoder exploded")

    def decompress(self, data: bytes, out_size: int | None = None) -> bytes:
        raise RuntimeError("decoder exploded")


def _write_ledger(data_path: Path, names: list[str]) -> None:
    payload = {"spec": "ffa.order_ledger.v1", "archive": data_path.name, "count": len(names), "names": names}
    data_path.with_name(data_path.stem + ".order.json").write_text(json.dumps(payload), encoding="utf-8")


def _read_index(lst: Path) -> list[tuple[str, int, int]]:
    raw = lst.read_bytes()
    assert len(raw) % 22 == 0
    out = []
    for i in range(0, len(raw), 22):
        off, size = struct.unpack("<II", raw[i + 14 : i + 22])
        out.append((raw[i : i + 14].rstrip(b"\x00").decode("ascii"), off, size))
    return out


def test_missing_input_dir_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(MissingResource):
        pack_archive(tmp_path / "nope", tmp_path / "out.dat")


def test_missing_ledger_is_fatal_and_writes_nothing(tmp_path: Path) -> None:
    (tmp_path / "in").mkdir()
    (tmp_path / "in" / "a.txt").write_bytes(b"hello")
    with pytest.raises(MissingLedger):
        pack_archive(tmp_path / "in", tmp_path / "game.dat")
    assert not (tmp_path / "game.dat").exists()
    assert not (tmp_path / "game.lst").exists()


def test_empty_ledger_is_fatal(tmp_path: Path) -> None:
    (tmp_path / "in").mkdir()
    _write_ledger(tmp_path / "game.dat", [])
    with pytest.raises(LedgerError):
        pack_archive(tmp_path / "in", tmp_path / "game.dat")


def test_ledger_drives_layout(tmp_path: Path) -> None:
    inp = tmp_path / "in"
    inp.mkdir()
    (inp / "a.txt").write_bytes(b"AAAAA")
    (inp / "b.txt").write_bytes(b"BB")
    (inp / "unlisted.txt").write_bytes(b"not in ledger")
    data = tmp_path / "game.dat"
    _write_ledger(data, ["b.txt", "a.txt"])

    res = pack_archive(inp, data)

    assert data.read_bytes() == b"BBAAAAA"
    assert _read_index(tmp_path / "game.lst") == [("b.txt", 0, 2), ("a.txt", 2, 5)]
    assert res.packed == 2
    assert [e.order for e in res.entries] == [0, 1]


def test_missing_source_is_skipped(tmp_path: Path) -> None:
    inp = tmp_path / "in"
    inp.mkdir()
    (inp / "a.txt").write_bytes(b"hello")
    data = tmp_path / "game.dat"
    _write_ledger(data, ["gone.txt", "a.txt", "..\\up.txt"])

    rep = RecordingReporter()
    res = pack_archive(inp, data, reporter=rep)

    assert rep.names("missing_source") == ["gone.txt", "..\\up.txt"]
    assert _read_index(tmp_path / "game.lst") == [("a.txt", 0, 5)]
    assert res.skipped == [("gone.txt", "missing_source"), ("..\\up.txt", "missing_source")]


def test_eligible_entries_are_framed(tmp_path: Path) -> None:
    inp = tmp_path / "in"
    inp.mkdir()
    payload = b"compress me " * 50
    (inp / "m.SO4").write_bytes(payload)
    data = tmp_path / "game.dat"
    _write_ledger(data, ["m.SO4"])

    res = pack_archive(inp, data, config=PackConfig(codec="zlib"))

    blob = data.read_bytes()
    packed, unpacked = struct.unpack("<ii", blob[:8])
    assert unpacked == len(payload)
    assert packed + 8 == len(blob)
    assert _read_index(tmp_path / "game.lst") == [("m.SO4", 0, len(blob))]
    assert res.compressed == 1


def test_encoder_fault_skips_entry(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    inp = tmp_path / "in"
    inp.mkdir()
    (inp / "a.txt").write_bytes(b"plain")
    (inp / "b.so5").write_bytes(b"will fail")
    data = tmp_path / "game.dat"
    _write_ledger(data, ["b.so5", "a.txt"])
    monkeypatch.setattr(pack_mod, "get_codec", lambda codec_id: _FailingCodec())

    rep = RecordingReporter()
    res = pack_archive(inp, data, reporter=rep)

    assert rep.names("encode_failed") == ["b.so5"]
    assert _read_index(tmp_path / "game.lst") == [("a.txt", 0, 5)]
    assert res.packed == 1


def test_count_ceiling_aborts_before_writing(tmp_path: Path) -> None:
    inp = tmp_path / "in"
    inp.mkdir()
    data = tmp_path / "game.dat"
    _write_ledger(data, [f"f{i}" for i in range(65536)])
    with pytest.raises(TooManyEntries):
        pack_archive(inp, data)
    assert not data.exists()
    assert not (tmp_path / "game.lst").exists()


def test_sorted_order_without_ledger(tmp_path: Path) -> None:
    inp = tmp_path / "in"
    (inp / "sub").mkdir(parents=True)
    (inp / "b.txt").write_bytes(b"b")
    (inp / "a.txt").write_bytes(b"a")
    (inp / "sub" / "c.txt").write_bytes(b"c")
    data = tmp_path / "game.dat"

    pack_archive(inp, data, config=PackConfig(order="sorted"))

    assert [r[0] for r in _read_index(tmp_path / "game.lst")] == ["a.txt", "b.txt", "sub\\c.txt"]
    assert data.read_bytes() == b"abc"


def test_sorted_mode_truncates_long_names(tmp_path: Path) -> None:
    inp = tmp_path / "in"
    inp.mkdir()
    (inp / "a_really_long_name.txt").write_bytes(b"x")

    rep = RecordingReporter()
    pack_archive(inp, tmp_path / "game.dat", config=PackConfig(order="sorted"), reporter=rep)

    assert rep.names("name_truncated") == ["a_really_long_name.txt"]
    assert _read_index(tmp_path / "game.lst") == [("a_really_long_", 0, 1)]


def test_sorted_mode_needs_files(tmp_path: Path) -> None:
    (tmp_path / "in").mkdir()
    with pytest.raises(UsageError):
        pack_archive(tmp_path / "in", tmp_path / "game.dat", config=PackConfig(order="sorted"))


def test_data_path_cannot_be_the_index(tmp_path: Path) -> None:
    (tmp_path / "in").mkdir()
    with pytest.raises(UsageError):
        pack_archive(tmp_path / "in", tmp_path / "game.lst", config=PackConfig(order="sorted"))


def test_sorted_mode_skips_own_output_inside_input(tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "a.txt").write_bytes(b"hello")
    out = src / "g.dat"
    cfg = PackConfig(order="sorted")

    pack_archive(src, out, config=cfg)
    (src / "g.order.json").write_text("{}", encoding="utf-8")
    res = pack_archive(src, out, config=cfg)

    assert [e.name for e in res.entries] == ["a.txt"]
    assert out.read_bytes() == b"hello"
    assert _read_index(src / "g.lst") == [("a.txt", 0, 5)]


def test_ledger_naming_the_archive_itself_is_skipped(tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "a.txt").write_bytes(b"hello")
    out = src / "g.dat"
    out.write_bytes(b"stale")
    _write_ledger(out, ["a.txt", "g.dat"])

    rep = RecordingReporter()
    res = pack_archive(src, out, reporter=rep)

    assert rep.names("archive_file") == ["g.dat"]
    assert res.skipped == [("g.dat", "archive_file")]
    assert out.read_bytes() == b"hello"


def test_truncated_so4_name_is_stored_and_read_back_raw(tmp_path: Path) -> None:
    from ffa.unpack import unpack_archive

    src = tmp_path / "src"
    src.mkdir()
    payload = b"level data " * 100
    (src / "long_level_01.so4").write_bytes(payload)
    data = tmp_path / "game.dat"

    rep = RecordingReporter()
    res = pack_archive(src, data, config=PackConfig(order="sorted"), reporter=rep)

    assert rep.names("name_truncated") == ["long_level_01.so4"]
    assert res.compressed == 0
    assert data.read_bytes() == payload
    assert _read_index(tmp_path / "game.lst") == [("long_level_01.", 0, len(payload))]

    back = unpack_archive(data, tmp_path / "out")
    assert back.decompressed == 0
    assert (tmp_path / "out" / "long_level_01.").read_bytes() == payload
