from __future__ import annotations

import struct

import pytest

from ffa.core.placement import entry_fits, is_valid_placement
from ffa.core.records import (
    MAX_ENTRIES,
    RECORD_SIZE,
    Entry,
    check_index_length,
    decode_index,
    decode_record,
    encode_index,
    encode_record,
    fit_name,
)
from ffa.errors import CorruptIndex


def _rec(name: bytes, offset: int, size: int) -> bytes:
    return name.ljust(14, b"\x00") + struct.pack("<II", offset, size)


def test_decode_record_trims_trailing_nuls_and_reads_le() -> None:
    e = decode_record(_rec(b"a.txt", 0x01020304, 5), order=3)
    assert e == Entry(name="a.txt", offset=0x01020304, size=5, order=3)


def test_encode_record_layout() -> None:
    raw = encode_record(Entry(name="b.so4", offset=5, size=12))
    assert len(raw) == RECORD_SIZE
    assert raw == b"b.so4" + b"\x00" * 9 + b"\x05\x00\x00\x00\x0c\x00\x00\x00"


def test_full_width_name_has_no_padding() -> None:
    raw = encode_record(Entry(name="abcdefghij.so5", offset=0, size=0))
    assert raw[:14] == b"abcdefghij.so5"
    assert decode_record(raw).name == "abcdefghij.so5"


def test_decode_keeps_literal_numbers_for_garbage() -> None:
    e = decode_record(b"\xff" * RECORD_SIZE)
    assert e.offset == 0xFFFFFFFF
    assert e.size == 0xFFFFFFFF
    assert e.name == "\ufffd" * 14


def test_encode_rejects_overlong_name() -> None:
    with pytest.raises(ValueError):
        encode_record(Entry(name="x" * 15, offset=0, size=0))


def test_fit_name_truncates_to_field_width() -> None:
    assert fit_name("short.txt") == ("short.txt", False)
    assert fit_name("a_really_long_name.so4") == ("a_really_long_", True)


def test_decode_index_assigns_order() -> None:
    data = _rec(b"a.txt", 0, 5) + _rec(b"b.so4", 5, 12)
    entries = decode_index(data)
    assert [(e.name, e.order) for e in entries] == [("a.txt", 0), ("b.so4", 1)]
    assert encode_index(entries) == data


def test_empty_index_is_valid() -> None:
    assert decode_index(b"") == []


@pytest.mark.parametrize("length", [1, 21, 23, 44 + 5])
def test_index_length_not_multiple_of_record_is_fatal(length: int) -> None:
    with pytest.raises(CorruptIndex, match="not sane"):
        check_index_length(length)


def test_index_record_count_ceiling() -> None:
    assert check_index_length(MAX_ENTRIES * RECORD_SIZE) == MAX_ENTRIES
    with pytest.raises(CorruptIndex):
        check_index_length((MAX_ENTRIES + 1) * RECORD_SIZE)


def test_placement_bounds() -> None:
    assert is_valid_placement(0, 5, 5)
    assert is_valid_placement(5, 0, 5)
    assert not is_valid_placement(5, 1, 5)
    assert not is_valid_placement(-1, 1, 5)
    assert not is_valid_placement(0, -1, 5)
    assert not entry_fits(Entry(name="x", offset=0xFFFFFFFF, size=0xFFFFFFFF), 100)
