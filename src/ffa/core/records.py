"""FFA index records.

The index (``.lst``) is a headerless run of fixed 22-byte records:

  name    14B  ASCII, NUL padded
  offset   4B  uint32 little endian (position in the data blob)
  size     4B  uint32 little endian (stored size, frame header included)

The record count is implied by the file length. Decoding never judges the
numbers it reads: placement is checked separately (see ``placement``).
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Final

from ffa.errors import CorruptIndex

NAME_LEN: Final[int] = 14
RECORD_SIZE: Final[int] = 22
MAX_ENTRIES: Final[int] = 0xFFFF
MAX_U32: Final[int] = 0xFFFFFFFF

_NUMS = struct.Struct("<II")


@dataclass(frozen=True)
class Entry:
    name: str
    offset: int
    size: int
    order: int = 0

    @property
    def end(self) -> int:
        return self.offset + self.size


def decode_name(raw: bytes) -> str:
    return raw.rstrip(b"\x00").decode("ascii", errors="replace")


def encode_name(name: str) -> bytes:
    return name.encode("ascii", errors="replace")


def fit_name(name: str) -> tuple[str, bool]:
    """Apply the truncation policy: return (stored_name, truncated)."""
    raw = encode_name(name)
    if len(raw) <= NAME_LEN:
        return name, False
    return raw[:NAME_LEN].decode("ascii"), True


def decode_record(raw: bytes, order: int = 0) -> Entry:
    if len(raw) != RECORD_SIZE:
        raise ValueError(f"record must be {RECORD_SIZE} bytes, got {len(raw)}")
    offset, size = _NUMS.unpack_from(raw, NAME_LEN)
    return Entry(name=decode_name(raw[:NAME_LEN]), offset=offset, size=size, order=int(order))


def encode_record(entry: Entry) -> bytes:
    raw_name = encode_name(entry.name)
    if len(raw_name) > NAME_LEN:
        raise ValueError(f"name longer than {NAME_LEN} bytes (truncate first): {entry.name!r}")
    if not (0 <= entry.offset <= MAX_U32) or not (0 <= entry.size <= MAX_U32):
        raise ValueError(f"offset/size out of uint32 range: {entry}")
    return raw_name.ljust(NAME_LEN, b"\x00") + _NUMS.pack(entry.offset, entry.size)


def check_index_length(length: int) -> int:
    """Return the record count implied by an index length, or raise CorruptIndex."""
    count, rem = divmod(int(length), RECORD_SIZE)
    if rem != 0 or count > MAX_ENTRIES:
        raise CorruptIndex(
            f"record count is not sane: index length {length} "
            f"(record size {RECORD_SIZE}, max {MAX_ENTRIES} records)"
        )
    return count


def decode_index(data: bytes) -> list[Entry]:
    count = check_index_length(len(data))
    return [
        decode_record(data[i * RECORD_SIZE : (i + 1) * RECORD_SIZE], order=i)
        for i in range(count)
    ]


def encode_index(entries: list[Entry]) -> bytes:
    if len(entries) > MAX_ENTRIES:
        raise ValueError(f"too many entries: {len(entries)} > {MAX_ENTRIES}")
    return b"".join(encode_record(e) for e in entries)
