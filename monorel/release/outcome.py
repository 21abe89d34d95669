"""Per-file outcomes of a best-effort update pass.

Propagation touches many files, each independently. Instead of stopping at
the first problem or swallowing it, every file yields exactly one outcome
and the caller decides what is fatal.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from monorel.release.jsonfile import JsonFileError, describe_error


@dataclass(frozen=True, slots=True)
class Updated:
    target: str
    path: Path
    changed: bool


@dataclass(frozen=True, slots=True)
class Skipped:
    target: str
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class Failed:
    target: str
    path: Path
    error: JsonFileError

    @property
    def message(self) -> str:
        return describe_error(self.error)


FileOutcome = Updated | Skipped | Failed


@dataclass(frozen=True, slots=True)
class UpdateReport:
    outcomes: tuple[FileOutcome, ...] = ()

    @classmethod
    def of(cls, outcomes: Iterable[FileOutcome]) -> UpdateReport:
        return cls(tuple(outcomes))

    def merge(self, other: UpdateReport) -> UpdateReport:
        return UpdateReport(self.outcomes + other.outcomes)

    @property
    def updated(self) -> list[Updated]:
        return [o for o in self.outcomes if isinstance(o, Updated)]

    @property
    def skipped(self) -> list[Skipped]:
        return [o for o in self.outcomes if isinstance(o, Skipped)]

    @property
    def failed(self) -> list[Failed]:
        return [o for o in self.outcomes if isinstance(o, Failed)]

    @property
    def changed_paths(self) -> list[Path]:
        return [o.path for o in self.updated if o.changed]

    @property
    def ok(self) -> bool:
        return not self.failed
