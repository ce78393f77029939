"""Archive triple naming.

An archive is three sibling files sharing a stem:

  <stem><data ext>   data blob (caller's choice, ``.dat`` by default)
  <stem>.lst         index records
  <stem>.order.json  order ledger

Entry names inside the index are relative paths; both ``\\`` (what the Windows
tools write) and ``/`` are accepted as separators.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Final

DEFAULT_DATA_SUFFIX: Final[str] = ".dat"
DEFAULT_INDEX_SUFFIX: Final[str] = ".lst"
DEFAULT_LEDGER_SUFFIX: Final[str] = ".order.json"
NAME_SEP: Final[str] = "\\"


def index_path_for(data_path: Path, suffix: str = DEFAULT_INDEX_SUFFIX) -> Path:
    return Path(data_path).with_suffix(suffix)


def ledger_path_for(data_path: Path, suffix: str = DEFAULT_LEDGER_SUFFIX) -> Path:
    p = Path(data_path)
    return p.with_name(p.stem + suffix)


def default_pack_output(input_dir: Path) -> Path:
    """``ffa pack game/`` writes ``game.dat`` in the current directory."""
    name = Path(input_dir).resolve().name
    return Path(name + DEFAULT_DATA_SUFFIX)


def default_unpack_output(data_path: Path) -> Path:
    """``ffa unpack game.dat`` extracts into ``game/`` in the current directory."""
    return Path(Path(data_path).stem)


def entry_rel_path(name: str) -> PurePosixPath | None:
    """Map an index name to a safe relative path, or None if it escapes the root."""
    norm = name.replace(NAME_SEP, "/")
    if not norm or "\x00" in norm or norm.startswith("/") or (len(norm) > 1 and norm[1] == ":"):
        return None
    parts = [p for p in norm.split("/") if p not in ("", ".")]
    if not parts or any(p == ".." for p in parts):
        return None
    return PurePosixPath(*parts)


def entry_name_for(rel: PurePosixPath) -> str:
    return NAME_SEP.join(rel.parts)
