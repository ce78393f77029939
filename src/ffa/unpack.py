"""Unpack an FFA archive (data blob + ``.lst`` index) into a directory.

Flow:
  1. the data file and its sibling index must exist (hard errors)
  2. the index length must be a whole number of records, at most 65535 (hard)
  3. decode every record, in file order
  4. write the order ledger from *all* names, before any filtering
  5. drop entries whose placement falls outside the data blob (warning)
  6. extract the rest in index order; per-entry failures are reported and skipped

Nothing is rolled back: a failed entry leaves the previously extracted ones in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ffa import ledger as order_ledger
from ffa.archive_paths import entry_rel_path, index_path_for, ledger_path_for
from ffa.core.codec_registry import get_codec
from ffa.core.frame import read_payload
from ffa.core.placement import entry_fits
from ffa.core.records import Entry, decode_index
from ffa.errors import CodecError, CorruptPayload, MissingResource, UsageError
from ffa.pack_config import PackConfig
from ffa.report import Reporter, ensure_reporter


@dataclass
class UnpackResult:
    data_path: Path
    output_dir: Path
    ledger_path: Path
    entries_total: int = 0
    extracted: int = 0
    decompressed: int = 0
    skipped: list[tuple[str, str]] = field(default_factory=list)

    def skip(self, name: str, reason: str) -> None:
        self.skipped.append((name, reason))


def load_entries(data_path: Path, *, config: PackConfig | None = None) -> tuple[list[Entry], int]:
    """Read and decode the index of an archive. Returns (entries, data_length)."""
    cfg = config or PackConfig.default()
    data_p = Path(data_path)
    if not data_p.is_file():
        raise MissingResource(f"data file not found: {data_p}")
    index_p = index_path_for(data_p, cfg.index_suffix)
    if not index_p.is_file():
        raise MissingResource(f"associated index file not found: {index_p}")

    with index_p.open("rb") as fp:
        raw = fp.read()
    return decode_index(raw), data_p.stat().st_size


def unpack_archive(
    data_path: Path,
    output_dir: Path,
    *,
    config: PackConfig | None = None,
    reporter: Reporter | None = None,
) -> UnpackResult:
    cfg = config or PackConfig.default()
    rep = ensure_reporter(reporter)
    data_p = Path(data_path)
    out = Path(output_dir)

    entries, data_len = load_entries(data_p, config=cfg)
    if out.exists() and not out.is_dir():
        raise UsageError(f"output path exists and is not a directory: {out}")

    ledger_p = ledger_path_for(data_p, cfg.ledger_suffix)
    order_ledger.persist(order_ledger.capture(entries, archive=data_p.name), ledger_p)

    result = UnpackResult(
        data_path=data_p, output_dir=out, ledger_path=ledger_p, entries_total=len(entries)
    )

    valid: list[Entry] = []
    for e in entries:
        if entry_fits(e, data_len):
            valid.append(e)
            continue
        rep.warning(
            "invalid_placement",
            e.name,
            f"invalid entry placement: {e.name} (#{e.order}, offset={e.offset}, "
            f"size={e.size}, data={data_len})",
        )
        result.skip(e.name, "invalid_placement")

    codec = get_codec(cfg.codec)
    out.mkdir(parents=True, exist_ok=True)

    with data_p.open("rb") as fp:
        for e in valid:
            rel = entry_rel_path(e.name)
            if rel is None:
                rep.warning("unsafe_name", e.name, f"unsafe entry name skipped: {e.name!r}")
                result.skip(e.name, "unsafe_name")
                continue

            try:
                got = read_payload(fp, e, codec, cfg.compress_suffixes)
            except CodecError as err:
                rep.error("decode_failed", e.name, f"failed to decompress {e.name}: {err}")
                result.skip(e.name, "decode_failed")
                continue
            except CorruptPayload as err:
                rep.error("read_failed", e.name, f"failed to read {e.name}: {err}")
                result.skip(e.name, "read_failed")
                continue

            if got.decompressed:
                result.decompressed += 1
                rep.info("decompressed", e.name, f"decompressed: {e.name}")

            outp = out.joinpath(*rel.parts)
            try:
                outp.parent.mkdir(parents=True, exist_ok=True)
                outp.write_bytes(got.data)
            except (OSError, ValueError) as err:
                rep.error("write_failed", e.name, f"failed to write {e.name}: {err}")
                result.skip(e.name, "write_failed")
                continue
            result.extracted += 1

    return result
