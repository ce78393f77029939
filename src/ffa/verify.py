"""Archive inspection helpers.

We implement:
  - list: every index record with its placement validity and frame status
  - verify: structural checks (light) or structural checks + decode of every
    compressed frame (full)

Policy: light by default, --full runs the codec. Unlike unpack, verify turns
per-entry problems into a failure so scripts can rely on the exit code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ffa.archive_paths import entry_rel_path
from ffa.core.codec_registry import get_codec
from ffa.core.frame import FRAME_HEADER_LEN, is_frame_candidate, parse_frame_header, read_payload
from ffa.core.placement import entry_fits
from ffa.core.records import Entry
from ffa.errors import CodecError, CorruptPayload
from ffa.pack_config import PackConfig
from ffa.unpack import load_entries


@dataclass(frozen=True)
class EntryStatus:
    entry: Entry
    placement_ok: bool
    framed: bool
    unpacked_size: int | None = None

    def render(self) -> str:
        e = self.entry
        flag = "ok " if self.placement_ok else "BAD"
        kind = f"frame->{self.unpacked_size}" if self.framed else "raw"
        return f"{e.order:5d} {flag} {e.offset:10d} {e.size:10d}  {kind:<14} {e.name}"


@dataclass
class VerifyReport:
    entries_total: int = 0
    valid: int = 0
    framed: int = 0
    decoded: int = 0
    problems: list[str] = field(default_factory=list)


def list_archive(data_path: Path, *, config: PackConfig | None = None) -> list[EntryStatus]:
    cfg = config or PackConfig.default()
    entries, data_len = load_entries(Path(data_path), config=cfg)
    out: list[EntryStatus] = []
    with Path(data_path).open("rb") as fp:
        for e in entries:
            ok = entry_fits(e, data_len)
            hdr = None
            if ok and is_frame_candidate(e.name, e.size, cfg.compress_suffixes):
                fp.seek(e.offset)
                hdr = parse_frame_header(fp.read(FRAME_HEADER_LEN), e.size)
            out.append(
                EntryStatus(
                    entry=e,
                    placement_ok=ok,
                    framed=hdr is not None,
                    unpacked_size=hdr.unpacked_size if hdr else None,
                )
            )
    return out


def verify_archive(
    data_path: Path, *, full: bool = False, config: PackConfig | None = None
) -> VerifyReport:
    cfg = config or PackConfig.default()
    rep = VerifyReport()
    statuses = list_archive(data_path, config=cfg)
    rep.entries_total = len(statuses)

    for st in statuses:
        e = st.entry
        if not st.placement_ok:
            rep.problems.append(f"#{e.order} {e.name}: placement outside data blob")
            continue
        if entry_rel_path(e.name) is None:
            rep.problems.append(f"#{e.order} {e.name!r}: unsafe name")
            continue
        rep.valid += 1
        if st.framed:
            rep.framed += 1

    if full and rep.framed:
        codec = get_codec(cfg.codec)
        with Path(data_path).open("rb") as fp:
            for st in statuses:
                if not (st.placement_ok and st.framed):
                    continue
                try:
                    read_payload(fp, st.entry, codec, cfg.compress_suffixes)
                except (CodecError, CorruptPayload) as err:
                    rep.problems.append(f"#{st.entry.order} {st.entry.name}: {err}")
                    continue
                rep.decoded += 1

    if rep.problems:
        head = "; ".join(rep.problems[:5])
        more = f" (+{len(rep.problems) - 5} more)" if len(rep.problems) > 5 else ""
        raise CorruptPayload(f"archive verify failed: {head}{more}")
    return rep
