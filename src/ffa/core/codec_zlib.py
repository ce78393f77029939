from __future__ import annotations

import zlib
from dataclasses import dataclass


@dataclass
class CodecZlib:
    """DEFLATE (zlib container) for compressed entries, stdlib only.

    With out_size (the frame's unpacked size) the inflater stops at that many
    bytes and a stream that ends early is an error.
    """

    level: int = 9
    codec_id: str = "zlib"

    def __post_init__(self) -> None:
        if not (0 <= int(self.level) <= 9):
            raise ValueError(f"zlib level must be 0..9, got {self.level}")

    def compress(self, data: bytes) -> bytes:
        return zlib.compress(bytes(data), int(self.level))

    def decompress(self, comp: bytes, out_size: int | None = None) -> bytes:
        if out_size is None:
            return zlib.decompress(bytes(comp))
        d = zlib.decompressobj()
        out = d.decompress(bytes(comp), int(out_size))
        if len(out) != int(out_size):
            raise ValueError(f"zlib: stream gave {len(out)} bytes, frame says {out_size}")
        return out
