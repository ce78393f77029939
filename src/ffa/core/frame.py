"""Compressed-entry framing.

Entries whose name ends with a compression suffix (``.so4``/``.so5`` by
default, case-insensitive) are stored as:

  packed_size    4B  int32 little endian
  unpacked_size  4B  int32 little endian
  payload        packed_size bytes (codec output)

and the index size of the entry is ``packed_size + 8``. A header that does not
satisfy ``packed_size + 8 == size`` with both values positive is not a frame:
the entry is read back verbatim. Everything else passes through raw.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, Final, Iterable

from ffa.core.codec_registry import ByteCodec
from ffa.core.records import Entry
from ffa.errors import CodecError, CorruptPayload

FRAME_HEADER_LEN: Final[int] = 8
DEFAULT_COMPRESS_SUFFIXES: Final[tuple[str, ...]] = (".so4", ".so5")
MAX_I32: Final[int] = 0x7FFFFFFF

_HEADER = struct.Struct("<ii")


@dataclass(frozen=True)
class FrameHeader:
    packed_size: int
    unpacked_size: int


@dataclass(frozen=True)
class ReadResult:
    data: bytes
    decompressed: bool
    header: FrameHeader | None = None


@dataclass(frozen=True)
class FramedPayload:
    blob: bytes
    raw_size: int
    compressed: bool

    @property
    def stored_size(self) -> int:
        return len(self.blob)


def _norm_suffixes(suffixes: Iterable[str]) -> tuple[str, ...]:
    return tuple(s.lower() for s in suffixes)


def is_eligible_name(name: str, suffixes: Iterable[str] = DEFAULT_COMPRESS_SUFFIXES) -> bool:
    return name.lower().endswith(_norm_suffixes(suffixes))


def is_frame_candidate(
    name: str, size: int, suffixes: Iterable[str] = DEFAULT_COMPRESS_SUFFIXES
) -> bool:
    return size > FRAME_HEADER_LEN and is_eligible_name(name, suffixes)


def pack_frame_header(packed_size: int, unpacked_size: int) -> bytes:
    return _HEADER.pack(packed_size, unpacked_size)


def parse_frame_header(header: bytes, size: int) -> FrameHeader | None:
    """Return the header if it describes a frame of exactly `size` stored bytes."""
    if len(header) != FRAME_HEADER_LEN:
        return None
    packed, unpacked = _HEADER.unpack(header)
    if packed > 0 and unpacked > 0 and packed + FRAME_HEADER_LEN == size:
        return FrameHeader(packed_size=packed, unpacked_size=unpacked)
    return None


def _read_exact(fp: BinaryIO, n: int, name: str) -> bytes:
    b = fp.read(n)
    if len(b) != n:
        raise CorruptPayload(f"short read for {name}: expected {n} bytes, got {len(b)}")
    return b


def _decode(codec: ByteCodec, packed: bytes, hdr: FrameHeader, name: str) -> bytes:
    # the archive does not record its codec: a wrong one shows up as a length mismatch
    try:
        data = codec.decompress(packed, out_size=hdr.unpacked_size)
    except Exception as e:
        raise CodecError(f"{codec.codec_id} decode failed for {name}: {e}") from e
    if len(data) != hdr.unpacked_size:
        raise CodecError(
            f"{codec.codec_id} decode failed for {name}: got {len(data)} bytes, "
            f"frame says {hdr.unpacked_size} (packed with another codec?)"
        )
    return data


def read_payload(
    fp: BinaryIO,
    entry: Entry,
    codec: ByteCodec,
    suffixes: Iterable[str] = DEFAULT_COMPRESS_SUFFIXES,
) -> ReadResult:
    """Read one entry's payload from the data blob, unframing it when it is a frame.

    Raises CodecError if the codec rejects a well-formed frame or decodes it to
    a length other than the header's unpacked size, CorruptPayload on a short
    read. Both are per-entry failures.
    """
    fp.seek(entry.offset)
    if is_frame_candidate(entry.name, entry.size, suffixes):
        hdr = parse_frame_header(fp.read(FRAME_HEADER_LEN), entry.size)
        if hdr is not None:
            packed = _read_exact(fp, hdr.packed_size, entry.name)
            data = _decode(codec, packed, hdr, entry.name)
            return ReadResult(data=data, decompressed=True, header=hdr)
        fp.seek(entry.offset)

    return ReadResult(data=_read_exact(fp, entry.size, entry.name), decompressed=False)


def unframe(
    blob: bytes,
    name: str,
    codec: ByteCodec,
    suffixes: Iterable[str] = DEFAULT_COMPRESS_SUFFIXES,
) -> bytes:
    """In-memory counterpart of read_payload for a stored blob."""
    size = len(blob)
    if is_frame_candidate(name, size, suffixes):
        hdr = parse_frame_header(blob[:FRAME_HEADER_LEN], size)
        if hdr is not None:
            return _decode(codec, blob[FRAME_HEADER_LEN:], hdr, name)
    return bytes(blob)


def frame_payload(
    name: str,
    data: bytes,
    codec: ByteCodec,
    suffixes: Iterable[str] = DEFAULT_COMPRESS_SUFFIXES,
) -> FramedPayload:
    """Encode a source file into the bytes stored in the data blob.

    Empty eligible files are stored raw: a frame needs strictly positive sizes,
    and a 0-byte entry reads back as 0 bytes anyway.
    """
    raw = bytes(data)
    if not raw or not is_eligible_name(name, suffixes):
        return FramedPayload(blob=raw, raw_size=len(raw), compressed=False)

    try:
        comp = codec.compress(raw)
    except Exception as e:
        raise CodecError(f"{codec.codec_id} encode failed for {name}: {e}") from e

    if not comp:
        raise CodecError(f"{codec.codec_id} produced an empty stream for {name}")
    if len(comp) > MAX_I32 - FRAME_HEADER_LEN or len(raw) > MAX_I32:
        raise CodecError(f"{name}: too large for a compressed frame ({len(raw)} bytes)")

    blob = pack_frame_header(len(comp), len(raw)) + comp
    return FramedPayload(blob=blob, raw_size=len(raw), compressed=True)
