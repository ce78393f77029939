"""Pack a directory into an FFA archive (data blob + ``.lst`` index).

Order of entries
----------------
By default the physical order comes from the order ledger written by a previous
unpack of the same archive name (``<stem>.order.json``): packing after an unpack
reproduces the original layout, and a missing ledger is a hard error.

``order="sorted"`` is the explicit opt-in for building an archive from scratch:
every file under the input directory, sorted by relative POSIX path.

Layout
------
Payloads are appended back to back starting at offset 0; the index is written
after the last payload, one 22-byte record per packed entry, in the same order.
Per-entry problems (missing source, codec fault) skip that entry only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Iterable

from ffa import ledger as order_ledger
from ffa.archive_paths import entry_name_for, entry_rel_path, index_path_for, ledger_path_for
from ffa.core.codec_registry import get_codec
from ffa.core.frame import FRAME_HEADER_LEN, frame_payload
from ffa.core.records import MAX_ENTRIES, MAX_U32, Entry, encode_record, fit_name
from ffa.errors import ArchiveTooLarge, CodecError, MissingResource, TooManyEntries, UsageError
from ffa.pack_config import ORDER_SORTED, PackConfig
from ffa.report import Reporter, ensure_reporter


@dataclass
class PackResult:
    data_path: Path
    index_path: Path
    packed: int = 0
    compressed: int = 0
    total_in: int = 0
    total_out: int = 0
    entries: list[Entry] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)

    def skip(self, name: str, reason: str) -> None:
        self.skipped.append((name, reason))


def _iter_files_deterministic(root: Path, exclude: Iterable[Path] = ()) -> list[Path]:
    skip = {p.resolve() for p in exclude}
    files = [p for p in root.rglob("*") if p.is_file() and p.resolve() not in skip]
    files.sort(key=lambda p: p.relative_to(root).as_posix())
    return files


def _archive_files(data_path: Path, config: PackConfig) -> tuple[Path, ...]:
    return (
        data_path,
        index_path_for(data_path, config.index_suffix),
        ledger_path_for(data_path, config.ledger_suffix),
    )


def _sorted_names(input_dir: Path, exclude: Iterable[Path] = ()) -> list[str]:
    names = [
        entry_name_for(PurePosixPath(p.relative_to(input_dir).as_posix()))
        for p in _iter_files_deterministic(input_dir, exclude)
    ]
    if not names:
        raise UsageError(f"no files found in input directory: {input_dir}")
    return names


def plan_names(input_dir: Path, data_path: Path, config: PackConfig) -> list[str]:
    """Return the entry names to pack, in archive order.

    Sorted mode never picks up the archive's own files when the output sits
    inside the input directory.
    """
    if config.order == ORDER_SORTED:
        return _sorted_names(input_dir, exclude=_archive_files(data_path, config))
    return list(order_ledger.load(ledger_path_for(data_path, config.ledger_suffix)))


def pack_archive(
    input_dir: Path,
    data_path: Path,
    *,
    config: PackConfig | None = None,
    reporter: Reporter | None = None,
) -> PackResult:
    cfg = config or PackConfig.default()
    rep = ensure_reporter(reporter)
    inp = Path(input_dir)
    data_p = Path(data_path)

    if not inp.is_dir():
        raise MissingResource(f"input folder not found: {inp}")
    index_p = index_path_for(data_p, cfg.index_suffix)
    if data_p.suffix.lower() == cfg.index_suffix.lower():
        raise UsageError(f"data file would overwrite its own index: {data_p}")

    names = plan_names(inp, data_p, cfg)
    if len(names) > MAX_ENTRIES:
        raise TooManyEntries(f"too many files: {len(names)} (maximum is {MAX_ENTRIES})")

    codec = get_codec(cfg.codec)
    result = PackResult(data_path=data_p, index_path=index_p)
    offset = 0
    own_files = {p.resolve() for p in _archive_files(data_p, cfg)}

    data_p.parent.mkdir(parents=True, exist_ok=True)
    with data_p.open("wb") as data_fp, index_p.open("wb") as index_fp:
        for name in names:
            rel = entry_rel_path(name)
            src = inp.joinpath(*rel.parts) if rel is not None else None
            if src is None or not src.is_file():
                rep.warning("missing_source", name, f"source file not found, skipped: {name}")
                result.skip(name, "missing_source")
                continue
            if src.resolve() in own_files:
                rep.warning("archive_file", name, f"archive output file, skipped: {name}")
                result.skip(name, "archive_file")
                continue

            # the stored name decides how unpack reads the entry back
            stored_name, truncated = fit_name(name)
            try:
                raw = src.read_bytes()
                framed = frame_payload(stored_name, raw, codec, cfg.compress_suffixes)
            except OSError as err:
                rep.error("read_failed", name, f"failed to read {name}: {err}")
                result.skip(name, "read_failed")
                continue
            except CodecError as err:
                rep.error("encode_failed", name, f"failed to compress {name}: {err}")
                result.skip(name, "encode_failed")
                continue

            if offset + framed.stored_size > MAX_U32:
                raise ArchiveTooLarge(
                    f"data blob would exceed {MAX_U32} bytes at entry {name} (offset {offset})"
                )
            if truncated:
                rep.warning(
                    "name_truncated", name, f"filename too long, truncating: {name} -> {stored_name}"
                )

            data_fp.write(framed.blob)
            entry = Entry(
                name=stored_name, offset=offset, size=framed.stored_size, order=len(result.entries)
            )
            result.entries.append(entry)
            offset += framed.stored_size

            result.packed += 1
            result.total_in += framed.raw_size
            result.total_out += framed.stored_size
            if framed.compressed:
                result.compressed += 1
                rep.info(
                    "compressed",
                    name,
                    f"compressed: {name} ({framed.raw_size} -> "
                    f"{framed.stored_size - FRAME_HEADER_LEN} bytes)",
                )

        for entry in result.entries:
            index_fp.write(encode_record(entry))

    return result
