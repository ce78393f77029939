"""Pack/unpack configuration (v1) for the FFA tool.

Goal: make archive builds reproducible (CLI, scripts, CI) from one JSON object.

This module intentionally stays *small* and strict:
  - JSON only (``@file.json`` or inline)
  - explicit schema id
  - unknown keys are rejected

Example::

  {
    "spec": "ffa.pack_config.v1",
    "codec": "lzss",
    "compress_suffixes": [".so4", ".so5"],
    "order": "ledger"
  }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from ffa.archive_paths import DEFAULT_INDEX_SUFFIX, DEFAULT_LEDGER_SUFFIX
from ffa.core.codec_registry import CODEC_IDS, DEFAULT_CODEC_ID
from ffa.core.frame import DEFAULT_COMPRESS_SUFFIXES

SPEC_ID_V1 = "ffa.pack_config.v1"
ORDER_LEDGER = "ledger"
ORDER_SORTED = "sorted"
ORDER_MODES: tuple[str, ...] = (ORDER_LEDGER, ORDER_SORTED)


class PackConfigError(ValueError):
    pass


def _load_json_arg(config_arg: str) -> dict[str, Any]:
    s = config_arg.strip()
    if not s:
        raise PackConfigError("config: empty argument")

    if s.startswith("@"):
        p = Path(s[1:]).expanduser()
        if not p.is_file():
            raise PackConfigError(f"config: file not found: {p}")
        try:
            obj = json.loads(p.read_text(encoding="utf-8"))
        except Exception as e:
            raise PackConfigError(f"config: invalid JSON in {p}: {e}") from e
        if not isinstance(obj, dict):
            raise PackConfigError(f"config: JSON in {p} must be an object")
        return obj

    try:
        obj = json.loads(s)
    except Exception as e:
        raise PackConfigError(f"config: invalid inline JSON: {e}") from e
    if not isinstance(obj, dict):
        raise PackConfigError("config: inline JSON must be an object")
    return obj


def _optional_str(obj: dict[str, Any], key: str, default: str) -> str:
    if key not in obj:
        return default
    v = obj.get(key)
    if not isinstance(v, str) or not v.strip():
        raise PackConfigError(f"config: field '{key}' must be a non-empty string")
    return v.strip()


def _suffix(obj: dict[str, Any], key: str, default: str) -> str:
    v = _optional_str(obj, key, default)
    if not v.startswith(".") or "/" in v or "\\" in v:
        raise PackConfigError(f"config: field '{key}' must look like '.ext', got {v!r}")
    return v


def _optional_suffixes(obj: dict[str, Any]) -> tuple[str, ...]:
    if "compress_suffixes" not in obj:
        return DEFAULT_COMPRESS_SUFFIXES
    v = obj.get("compress_suffixes")
    if not isinstance(v, list):
        raise PackConfigError("config: 'compress_suffixes' must be a list of strings")
    out: list[str] = []
    for s in v:
        if not isinstance(s, str) or not s.strip().startswith("."):
            raise PackConfigError(f"config: bad compress suffix {s!r} (expected '.ext')")
        out.append(s.strip().lower())
    return tuple(out)


@dataclass(frozen=True)
class PackConfig:
    codec: str = DEFAULT_CODEC_ID
    compress_suffixes: tuple[str, ...] = DEFAULT_COMPRESS_SUFFIXES
    index_suffix: str = DEFAULT_INDEX_SUFFIX
    ledger_suffix: str = DEFAULT_LEDGER_SUFFIX
    order: str = ORDER_LEDGER

    @classmethod
    def default(cls) -> "PackConfig":
        return cls()

    def with_overrides(self, *, codec: str | None = None, order: str | None = None) -> "PackConfig":
        """CLI flags win over the config file."""
        cfg = self
        if codec is not None:
            cfg = replace(cfg, codec=_check_codec(codec))
        if order is not None:
            cfg = replace(cfg, order=_check_order(order))
        return cfg

    def to_dict(self) -> dict[str, Any]:
        return {
            "spec": SPEC_ID_V1,
            "codec": self.codec,
            "compress_suffixes": list(self.compress_suffixes),
            "index_suffix": self.index_suffix,
            "ledger_suffix": self.ledger_suffix,
            "order": self.order,
        }


def _check_codec(codec: str) -> str:
    c = codec.strip().lower()
    if c not in CODEC_IDS:
        raise PackConfigError(f"config: unknown codec {codec!r} (known: {', '.join(CODEC_IDS)})")
    return c


def _check_order(order: str) -> str:
    o = order.strip().lower()
    if o not in ORDER_MODES:
        raise PackConfigError(f"config: 'order' must be one of {', '.join(ORDER_MODES)}")
    return o


def load_pack_config(config_arg: str) -> PackConfig:
    """Load and validate a pack config.

    config_arg:
      - '@file.json'
      - inline JSON object
    """
    obj = _load_json_arg(config_arg)

    allowed = {"spec", "codec", "compress_suffixes", "index_suffix", "ledger_suffix", "order"}
    extra = sorted(set(obj.keys()) - allowed)
    if extra:
        raise PackConfigError(f"config: unsupported keys: {', '.join(extra)}")

    if obj.get("spec") != SPEC_ID_V1:
        raise PackConfigError(f"config: 'spec' must be '{SPEC_ID_V1}'")

    index_suffix = _suffix(obj, "index_suffix", DEFAULT_INDEX_SUFFIX)
    ledger_suffix = _suffix(obj, "ledger_suffix", DEFAULT_LEDGER_SUFFIX)
    if index_suffix.lower() == ledger_suffix.lower():
        raise PackConfigError("config: index_suffix and ledger_suffix must differ")

    return PackConfig(
        codec=_check_codec(_optional_str(obj, "codec", DEFAULT_CODEC_ID)),
        compress_suffixes=_optional_suffixes(obj),
        index_suffix=index_suffix,
        ledger_suffix=ledger_suffix,
        order=_check_order(_optional_str(obj, "order", ORDER_LEDGER)),
    )
