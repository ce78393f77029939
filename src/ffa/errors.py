"""Typed errors for the FFA archive tool.

Single source of truth for exit codes lives here.

Policy:
- Hard errors (missing sibling files, insane index, count ceiling) are raised
  and abort the whole pack/unpack invocation.
- Per-entry problems are never raised out of the pipelines: they are reported
  through a reporter (see ``ffa.report``) and the batch continues.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_MISSING_RESOURCE = 12
EXIT_LIMIT_EXCEEDED = 14


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success (per-entry warnings may still have been reported)"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid args, invalid pack config, unknown codec)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (insane index, corrupt ledger, unexpected error)"),
    ExitCodeInfo(
        EXIT_MISSING_RESOURCE,
        "MISSING_RESOURCE",
        "Missing required resource (data file, .lst index, order ledger, input directory)",
    ),
    ExitCodeInfo(
        EXIT_LIMIT_EXCEEDED,
        "LIMIT_EXCEEDED",
        "Format limit exceeded (more than 65535 entries, data blob beyond 4 GiB)",
    ),
)

_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE - do not edit manually.\n")
    lines.append("> Source of truth: `src/ffa/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Most internal errors extend `FFAError` and carry an `exit_code`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    lines.append(
        "- Skipped entries (bad placement, codec failure, missing source file) do not change the exit code.\n"
    )
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class FFAError(Exception):
    """Base error for the FFA archive tool."""

    exit_code: int = EXIT_GENERIC


class UsageError(FFAError):
    exit_code = EXIT_USAGE


class CorruptPayload(FFAError):
    exit_code = EXIT_GENERIC


class CorruptIndex(CorruptPayload):
    """Index length is not a whole number of records, or implies too many records."""


class LedgerError(CorruptPayload):
    pass


class MissingResource(FFAError):
    exit_code = EXIT_MISSING_RESOURCE


class MissingLedger(MissingResource):
    pass


class LimitExceeded(FFAError):
    exit_code = EXIT_LIMIT_EXCEEDED


class TooManyEntries(LimitExceeded):
    pass


class ArchiveTooLarge(LimitExceeded):
    pass


class CodecError(FFAError):
    """A byte codec failed to encode or decode a payload (per-entry, soft)."""

    exit_code = EXIT_GENERIC
