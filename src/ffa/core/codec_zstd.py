from __future__ import annotations

from dataclasses import dataclass

try:
    import zstandard as zstd  # type: ignore
except Exception:  # pragma: no cover
    zstd = None


def have_zstd() -> bool:
    return zstd is not None


@dataclass
class CodecZstd:
    """
    zstd byte codec (``zstandard`` package).

    The frame keeps its content size so ``decompress`` works without out_size;
    when out_size is known (from the FFA frame header) it caps the output.
    """

    level: int = 19
    codec_id: str = "zstd"

    def _require(self) -> None:
        if zstd is None:
            raise RuntimeError(
                "Module 'zstandard' not available. Install with: python3 -m pip install zstandard"
            )

    def compress(self, data: bytes) -> bytes:
        self._require()
        c = zstd.ZstdCompressor(level=int(self.level))
        return c.compress(bytes(data))

    def decompress(self, data: bytes, out_size: int | None = None) -> bytes:
        self._require()
        d = zstd.ZstdDecompressor()
        if out_size is None:
            return d.decompress(bytes(data))
        return d.decompress(bytes(data), max_output_size=int(out_size))
