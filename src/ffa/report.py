"""Per-entry event reporting.

Pipelines never print. They hand events to a reporter:
  - ConsoleReporter: the CLI sink (``[ffa] ...`` lines on stderr)
  - RecordingReporter: keeps events in memory (tests, library callers)
  - NullReporter: drops everything (library default)

Levels: info (progress), warning (entry skipped or altered by policy),
error (entry failed: codec fault, I/O fault).
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Final, TextIO

INFO: Final[str] = "info"
WARNING: Final[str] = "warning"
ERROR: Final[str] = "error"


@dataclass(frozen=True)
class ReportEvent:
    level: str
    kind: str
    name: str
    message: str

    def render(self) -> str:
        tag = "" if self.level == INFO else f"{self.level}: "
        return f"[ffa] {tag}{self.message}"


class Reporter:
    def emit(self, event: ReportEvent) -> None:
        raise NotImplementedError

    def info(self, kind: str, name: str, message: str) -> None:
        self.emit(ReportEvent(INFO, kind, name, message))

    def warning(self, kind: str, name: str, message: str) -> None:
        self.emit(ReportEvent(WARNING, kind, name, message))

    def error(self, kind: str, name: str, message: str) -> None:
        self.emit(ReportEvent(ERROR, kind, name, message))


class NullReporter(Reporter):
    def emit(self, event: ReportEvent) -> None:
        return None


@dataclass
class RecordingReporter(Reporter):
    events: list[ReportEvent] = field(default_factory=list)

    def emit(self, event: ReportEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [e.kind for e in self.events]

    def names(self, kind: str) -> list[str]:
        return [e.name for e in self.events if e.kind == kind]


class ConsoleReporter(Reporter):
    def __init__(self, stream: TextIO | None = None, *, verbose: bool = True):
        self.stream = stream
        self.verbose = verbose

    def emit(self, event: ReportEvent) -> None:
        if event.level == INFO and not self.verbose:
            return
        print(event.render(), file=self.stream or sys.stderr)


def ensure_reporter(reporter: Reporter | None) -> Reporter:
    return reporter if reporter is not None else NullReporter()
