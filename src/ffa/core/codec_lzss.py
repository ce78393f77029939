"""Classic LZSS (4 KiB ring, 18-byte matches).

Bitstream, compatible with the common "Okumura" LZSS:
  - a flag byte precedes each group of 8 items, LSB first
  - flag bit 1: one literal byte
  - flag bit 0: two bytes, ring position (12 bits) + match length - 3 (4 bits)
      b0 = pos & 0xFF
      b1 = ((pos >> 4) & 0xF0) | (length - 3)
  - the ring starts filled with spaces, write position N - F

There is no end marker: the decoder stops when input runs out, or at out_size
when the caller knows it (a match crossing out_size is a corrupt stream).
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

RING_SIZE = 4096
MAX_MATCH = 18
MIN_MATCH = 3
_MASK = RING_SIZE - 1
_FILL = 0x20


@dataclass
class CodecLzss:
    max_chain: int = 64
    codec_id: str = "lzss"

    def compress(self, data: bytes) -> bytes:
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError("data must be bytes")
        src = bytes(data)
        if not src:
            return b""

        start = RING_SIZE - MAX_MATCH
        # virtual stream: initial ring contents followed by the input
        v = bytes([_FILL]) * start + src
        end = len(v)

        # 3-byte prefix -> most recent positions; only the last max_chain of a
        # chain are ever probed, and positions older than the window never match
        table: dict[bytes, deque[int]] = {}
        chain = max(0, int(self.max_chain))

        def insert(q: int) -> None:
            if q + MIN_MATCH <= end:
                key = v[q : q + MIN_MATCH]
                d = table.get(key)
                if d is None:
                    d = table[key] = deque(maxlen=chain)
                d.append(q)

        for q in range(start):
            insert(q)

        out = bytearray()
        flag_idx = 0
        bit = 0x100
        p = start
        next_sweep = p + RING_SIZE
        while p < end:
            lo = p - RING_SIZE + MAX_MATCH
            if p >= next_sweep:
                for key in [k for k, d in table.items() if not d or d[-1] < lo]:
                    del table[key]
                next_sweep = p + RING_SIZE

            best_len = 0
            best_pos = 0
            max_len = min(MAX_MATCH, end - p)
            if max_len >= MIN_MATCH:
                cands = table.get(v[p : p + MIN_MATCH])
                if cands:
                    for q in reversed(cands):
                        if q < lo:
                            break
                        n = MIN_MATCH
                        while n < max_len and v[q + n] == v[p + n]:
                            n += 1
                        if n > best_len:
                            best_len, best_pos = n, q
                            if n == max_len:
                                break

            if bit == 0x100:
                flag_idx = len(out)
                out.append(0)
                bit = 1

            if best_len >= MIN_MATCH:
                pos = best_pos & _MASK
                out.append(pos & 0xFF)
                out.append(((pos >> 4) & 0xF0) | (best_len - MIN_MATCH))
                step = best_len
            else:
                out[flag_idx] |= bit
                out.append(v[p])
                step = 1

            bit <<= 1
            for q in range(p, p + step):
                insert(q)
            p += step

        return bytes(out)

    def decompress(self, comp: bytes, out_size: int | None = None) -> bytes:
        if not isinstance(comp, (bytes, bytearray)):
            raise TypeError("comp must be bytes")
        limit = None if out_size is None else int(out_size)

        ring = bytearray([_FILL]) * RING_SIZE
        r = RING_SIZE - MAX_MATCH
        out = bytearray()
        n = len(comp)
        i = 0
        flags = 0
        while limit is None or len(out) < limit:
            flags >>= 1
            if not flags & 0x100:
                if i >= n:
                    break
                flags = comp[i] | 0xFF00
                i += 1
            if flags & 1:
                if i >= n:
                    break
                c = comp[i]
                i += 1
                out.append(c)
                ring[r] = c
                r = (r + 1) & _MASK
            else:
                if i + 1 >= n:
                    break
                lo, hi = comp[i], comp[i + 1]
                i += 2
                pos = lo | ((hi & 0xF0) << 4)
                for k in range((hi & 0x0F) + MIN_MATCH):
                    c = ring[(pos + k) & _MASK]
                    out.append(c)
                    ring[r] = c
                    r = (r + 1) & _MASK

        if limit is not None and len(out) > limit:
            raise ValueError(f"lzss: match runs past the expected {limit} bytes")
        return bytes(out)
