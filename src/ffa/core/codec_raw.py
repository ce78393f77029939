from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CodecRaw:
    """Stored codec: frames keep the payload as is (frame layout tests, debugging)."""

    codec_id: str = "raw"

    def compress(self, data: bytes) -> bytes:
        return bytes(data)

    def decompress(self, data: bytes, out_size: int | None = None) -> bytes:
        if out_size is not None and len(data) != out_size:
            raise ValueError(f"raw: payload is {len(data)} bytes, frame says {out_size}")
        return bytes(data)
