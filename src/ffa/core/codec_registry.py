"""Byte codec registry.

A codec is anything with ``codec_id``, ``compress(bytes) -> bytes`` and
``decompress(bytes, out_size=None) -> bytes`` such that
``decompress(compress(x)) == x``. The archive code never looks inside the
compressed bytes.
"""

from __future__ import annotations

from typing import Protocol

from ffa.core.codec_lzss import CodecLzss
from ffa.core.codec_raw import CodecRaw
from ffa.core.codec_zlib import CodecZlib
from ffa.core.codec_zstd import CodecZstd, have_zstd
from ffa.errors import UsageError

DEFAULT_CODEC_ID = "lzss"
CODEC_IDS: tuple[str, ...] = ("lzss", "zlib", "zstd", "raw")


class ByteCodec(Protocol):
    codec_id: str

    def compress(self, data: bytes) -> bytes: ...

    def decompress(self, data: bytes, out_size: int | None = None) -> bytes: ...


def resolve_codec_id(codec_id: str, *, have_zstd: bool) -> str:
    cid = str(codec_id).strip().lower()
    if cid == "zstd" and not have_zstd:
        return "zlib"
    return cid


def get_codec(codec_id: str = DEFAULT_CODEC_ID) -> ByteCodec:
    cid = resolve_codec_id(codec_id, have_zstd=have_zstd())
    if cid == "lzss":
        return CodecLzss()
    if cid == "zlib":
        return CodecZlib()
    if cid == "zstd":
        return CodecZstd()
    if cid == "raw":
        return CodecRaw()
    raise UsageError(f"unknown codec: {codec_id!r} (known: {', '.join(CODEC_IDS)})")
