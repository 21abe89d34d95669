"""Error types for the release flow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "invalid_version",
    "dirty_worktree",
    "missing_version",
    "tag_exists",
    "git_failed",
    "propagation_failed",
    "build_missing",
    "order_violation",
    "publish_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical release error payload.

    ``hint`` carries remediation advice or the external tool's diagnostic
    output verbatim.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
