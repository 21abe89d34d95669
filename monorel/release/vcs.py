"""Version-control and registry collaborators the release flow depends on.

``monorel.git.Repository`` and ``monorel.release.npm.NpmRegistry`` are the
production implementations. Tests substitute in-memory fakes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from monorel.core.result import Result
from monorel.git.repository import GitError, GitStatus
from monorel.platform.process import ProcessError


class VersionControl(Protocol):
    def status(self) -> Result[GitStatus, GitError]: ...

    def commit_all(self, message: str) -> Result[str, GitError]: ...

    def create_annotated_tag(self, name: str, message: str) -> Result[None, GitError]: ...

    def tag_exists(self, name: str) -> Result[bool, GitError]: ...

    def tags_at_head(self) -> Result[list[str], GitError]: ...


class RegistryClient(Protocol):
    def publish(self, directory: Path, tag: str) -> Result[None, ProcessError]:
        """Publish ``directory`` under distribution tag ``tag``; blocks until done."""
        ...
