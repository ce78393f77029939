"""FFA archive tool CLI.

This is the stable CLI entrypoint (console-script: ``ffa``).

UX policy:
  - ``pack`` / ``unpack`` take one input path, an optional
    output path with a default derived from the input.
  - Per-entry warnings go to stderr with the ``[ffa]`` prefix; the final summary
    goes to stdout.
  - Hard errors exit non-zero (see ``ffa.errors`` for the code table).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ffa.archive_paths import default_pack_output, default_unpack_output
from ffa.errors import FFAError
from ffa.pack_config import ORDER_SORTED, PackConfig, PackConfigError, load_pack_config
from ffa.report import ConsoleReporter


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")


def _add_config_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--config",
        default=None,
        help="Pack config JSON (ffa.pack_config.v1). Use '@file.json' or pass JSON inline.",
    )
    p.add_argument(
        "--codec",
        default=None,
        help="Codec for compressed entries (lzss, zlib, zstd, raw). Overrides --config.",
    )
    p.add_argument("-q", "--quiet", action="store_true", help="Only report warnings and errors")


def _config_from_args(ns: argparse.Namespace) -> PackConfig:
    cfg = load_pack_config(ns.config) if ns.config else PackConfig.default()
    order = ORDER_SORTED if getattr(ns, "sorted", False) else None
    return cfg.with_overrides(codec=ns.codec, order=order)


def _cmd_pack(ns: argparse.Namespace) -> int:
    from ffa.pack import pack_archive

    cfg = _config_from_args(ns)
    output = ns.output if ns.output is not None else default_pack_output(ns.input_dir)
    print(f"Packing {ns.input_dir} -> {output}")

    res = pack_archive(
        ns.input_dir, output, config=cfg, reporter=ConsoleReporter(verbose=not ns.quiet)
    )

    print(f"Created: {res.data_path}")
    print(f"Created: {res.index_path}")
    print(f"Total files packed: {res.packed} ({res.compressed} compressed, {len(res.skipped)} skipped)")
    return 0


def _cmd_unpack(ns: argparse.Namespace) -> int:
    from ffa.unpack import unpack_archive

    cfg = _config_from_args(ns)
    output = ns.output if ns.output is not None else default_unpack_output(ns.input)
    print(f"Unpacking {ns.input} -> {output}")

    res = unpack_archive(
        ns.input, output, config=cfg, reporter=ConsoleReporter(verbose=not ns.quiet)
    )

    print(f"Order ledger: {res.ledger_path}")
    print(
        f"Total files extracted: {res.extracted}/{res.entries_total} "
        f"({res.decompressed} decompressed, {len(res.skipped)} skipped)"
    )
    return 0


def _cmd_list(ns: argparse.Namespace) -> int:
    from ffa.verify import list_archive

    cfg = _config_from_args(ns)
    rows = list_archive(ns.input, config=cfg)
    print(f"{'#':>5} {'pl.':<3} {'offset':>10} {'size':>10}  {'kind':<14} name")
    for st in rows:
        print(st.render())
    print(f"{len(rows)} entries")
    return 0


def _cmd_verify(ns: argparse.Namespace) -> int:
    from ffa.verify import verify_archive

    cfg = _config_from_args(ns)
    rep = verify_archive(ns.input, full=bool(ns.full), config=cfg)
    decoded = f", {rep.decoded} decoded" if ns.full else ""
    print(f"OK ({rep.entries_total} entries, {rep.framed} compressed{decoded})")
    return 0


def _cmd_config_validate(ns: argparse.Namespace) -> int:
    # load is the validation
    load_pack_config(str(ns.config_arg))
    print("OK")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ffa", description="FFA file packer/unpacker (.dat + .lst)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_pack = sub.add_parser("pack", help="Pack a folder into <name>.dat + <name>.lst")
    p_pack.add_argument("input_dir", type=Path)
    p_pack.add_argument(
        "output", type=Path, nargs="?", default=None, help="Output data file (default: <folder>.dat)"
    )
    p_pack.add_argument(
        "--sorted",
        action="store_true",
        help="Ignore the order ledger and pack every file sorted by relative path",
    )
    _add_config_args(p_pack)
    _add_common_args(p_pack)

    p_unpack = sub.add_parser("unpack", help="Unpack <name>.dat (+ <name>.lst) into a folder")
    p_unpack.add_argument("input", type=Path)
    p_unpack.add_argument(
        "output", type=Path, nargs="?", default=None, help="Output folder (default: <name>)"
    )
    _add_config_args(p_unpack)
    _add_common_args(p_unpack)

    p_list = sub.add_parser("list", help="List index records with placement/frame status")
    p_list.add_argument("input", type=Path)
    _add_config_args(p_list)
    _add_common_args(p_list)

    p_verify = sub.add_parser("verify", help="Verify an archive without extracting it")
    p_verify.add_argument("input", type=Path)
    p_verify.add_argument("--full", action="store_true", help="Also decode every compressed entry")
    _add_config_args(p_verify)
    _add_common_args(p_verify)

    p_cv = sub.add_parser("config-validate", help="Validate a pack config (ffa.pack_config.v1)")
    p_cv.add_argument("config_arg", help="Config JSON (@file.json or inline JSON)")
    _add_common_args(p_cv)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    try:
        if ns.cmd == "pack":
            return _cmd_pack(ns)
        if ns.cmd == "unpack":
            return _cmd_unpack(ns)
        if ns.cmd == "list":
            return _cmd_list(ns)
        if ns.cmd == "verify":
            return _cmd_verify(ns)
        if ns.cmd == "config-validate":
            return _cmd_config_validate(ns)
        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except PackConfigError as e:
        # Treat as usage/config error.
        if getattr(ns, "debug", False):
            raise
        print(f"[ffa] {e}", file=sys.stderr)
        return 2
    except FFAError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[ffa] {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", 10) or 10)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[ffa] error: {e}", file=sys.stderr)
        return 10


if __name__ == "__main__":
    raise SystemExit(main())
