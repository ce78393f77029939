from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Iterable

from ffa.core.records import Entry
from ffa.errors import LedgerError, MissingLedger

SPEC_LEDGER_V1: Final[str] = "ffa.order_ledger.v1"


@dataclass(frozen=True)
class OrderLedger:
    """
    Original entry order of an archive, captured at unpack time.

    Every index record contributes its name, including records whose placement
    was invalid, so a later pack reproduces the original physical layout.

    Stable JSON schema:
      {
        "spec": "ffa.order_ledger.v1",
        "archive": "<data file name>",
        "count": <int>,
        "names": ["<name>", ...]
      }
    """

    names: tuple[str, ...]
    archive: str = ""

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self):
        return iter(self.names)

    # --- Serialization ---

    def to_dict(self) -> dict[str, Any]:
        return {
            "spec": SPEC_LEDGER_V1,
            "archive": self.archive,
            "count": len(self.names),
            "names": list(self.names),
        }

    def serialize(self, *, indent: int = 2) -> bytes:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent).encode("utf-8")

    @classmethod
    def deserialize(cls, data: bytes) -> "OrderLedger":
        try:
            raw = json.loads(data.decode("utf-8"))
        except Exception as e:
            raise LedgerError(f"order ledger: invalid JSON: {e}") from e
        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: Any) -> "OrderLedger":
        if not isinstance(raw, dict):
            raise LedgerError("order ledger: not a JSON object")
        if raw.get("spec") != SPEC_LEDGER_V1:
            raise LedgerError(f"order ledger: unsupported spec {raw.get('spec')!r}")

        names = raw.get("names")
        if not isinstance(names, list):
            raise LedgerError("order ledger: 'names' must be a list")
        if not all(isinstance(n, str) for n in names):
            raise LedgerError("order ledger: every name must be a string")
        if not names:
            raise LedgerError("order ledger: empty (nothing to pack)")

        if "count" in raw:
            cnt = raw.get("count")
            if not isinstance(cnt, int) or isinstance(cnt, bool):
                raise LedgerError("order ledger: 'count' must be an int")
            if cnt != len(names):
                raise LedgerError(f"order ledger: count mismatch ({cnt} != {len(names)})")

        archive = raw.get("archive", "")
        if not isinstance(archive, str):
            raise LedgerError("order ledger: 'archive' must be a string")

        return cls(names=tuple(names), archive=archive)

    # --- File helpers ---

    @classmethod
    def read(cls, path: Path) -> "OrderLedger":
        p = Path(path)
        if not p.is_file():
            raise MissingLedger(f"order ledger not found: {p} (unpack the original archive first)")
        return cls.deserialize(p.read_bytes())

    def write(self, path: Path, *, indent: int = 2) -> None:
        Path(path).write_bytes(self.serialize(indent=indent))


def capture(entries: Iterable[Entry], archive: str = "") -> OrderLedger:
    ordered = sorted(entries, key=lambda e: e.order)
    return OrderLedger(names=tuple(e.name for e in ordered), archive=archive)


def persist(ledger: OrderLedger, path: Path) -> None:
    ledger.write(path)


def load(path: Path) -> OrderLedger:
    return OrderLedger.read(path)
