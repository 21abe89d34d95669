"""Git repository abstraction.

``Repository`` covers the version-control capabilities a release needs:
working tree status, commit of all tracked changes, annotated tag creation,
and lookup of the tags pointing at HEAD. All operations return Result
types.

Usage:
    repo = Repository(workspace.root)

    match repo.status():
        case Ok(status) if status.tracked_changes:
            print("dirty:", [e.path for e in status.tracked_changes])
        case Ok(_):
            print("clean")
        case Err(e):
            print(f"git failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from monorel.core.result import Err, Ok, Result
from monorel.platform.process import ProcessError
from monorel.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "tag -a")
        message: git's own diagnostic output, or a fallback description
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry of ``git status --porcelain``.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_staged(self) -> bool:
        return self.xy != "??" and self.xy[0] != " "

    @property
    def is_unstaged(self) -> bool:
        return self.xy != "??" and self.xy[1] != " "

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"

    def pretty_xy(self) -> str:
        """Format XY with dots for spaces (". M" instead of " M")."""
        return self.xy.replace(" ", ".")


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed ``git status --porcelain=v1 -b``."""

    branch: str
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        """True if there are no entries at all, untracked files included."""
        return len(self.entries) == 0

    @property
    def tracked_changes(self) -> list[StatusEntry]:
        """Modified, staged, deleted or renamed tracked files."""
        return [e for e in self.entries if not e.is_untracked]

    @property
    def untracked(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_untracked]


class Repository:
    """Git repository rooted at ``path``."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this is a git checkout (``.git`` dir or worktree file)."""
        return (self.path / ".git").exists()

    def status(self) -> Result[GitStatus, GitError]:
        """Get repository status.

        Returns:
            Ok(GitStatus) on success
            Err(GitError) on failure
        """
        result = self._run(["status", "--porcelain=v1", "-b"])
        match result:
            case Err(e):
                return Err(_git_error("status", e, fallback="git status failed"))
            case Ok(stdout):
                return Ok(self._parse_status(stdout))

    def commit_all(self, message: str) -> Result[str, GitError]:
        """Commit every modified tracked file (``git commit --all``).

        Returns:
            Ok(sha of the new HEAD) on success
        """
        result = self._run(["commit", "--all", f"--message={message}"])
        if isinstance(result, Err):
            return Err(
                _git_error(
                    "commit",
                    result.error,
                    fallback="git commit failed (is user.name/user.email configured?)",
                )
            )

        head = self._run(["rev-parse", "HEAD"])
        if isinstance(head, Err):
            return Err(_git_error("rev-parse", head.error, fallback="failed to read HEAD"))
        return Ok(head.value.strip())

    def create_annotated_tag(self, name: str, message: str) -> Result[None, GitError]:
        """Create an annotated tag at HEAD (``git tag -a -m <message> <name>``)."""
        result = self._run(["tag", "-a", "-m", message, name])
        if isinstance(result, Err):
            return Err(_git_error("tag -a", result.error, fallback=f"failed to create tag {name}"))
        return Ok(None)

    def tag_exists(self, name: str) -> Result[bool, GitError]:
        result = self._run(["tag", "--list", name])
        if isinstance(result, Err):
            return Err(_git_error("tag --list", result.error, fallback="git tag failed"))
        return Ok(result.value.strip() == name)

    def tags_at_head(self) -> Result[list[str], GitError]:
        """List tags pointing at HEAD, in git's (lexicographic) order."""
        result = self._run(["tag", "--list", "--points-at", "HEAD"])
        if isinstance(result, Err):
            return Err(_git_error("tag --points-at", result.error, fallback="git tag failed"))
        return Ok([line.strip() for line in result.value.splitlines() if line.strip()])

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run_process(
            ["git", "-C", str(self.path), *args],
            cwd=self.path,
            timeout=_GIT_TIMEOUT_SECONDS,
        )

    def _parse_status(self, output: str) -> GitStatus:
        lines = [ln for ln in output.splitlines() if ln.strip()]
        if not lines:
            return GitStatus(branch="")

        branch = ""
        if lines[0].startswith("##"):
            # ## branch...upstream [ahead N]
            branch = lines[0][2:].strip().split(" [", 1)[0].split("...", 1)[0]
            lines = lines[1:]

        entries: list[StatusEntry] = []
        for line in lines:
            entry = self._parse_entry(line)
            if entry:
                entries.append(entry)

        return GitStatus(branch=branch, entries=tuple(entries))

    def _parse_entry(self, line: str) -> StatusEntry | None:
        # Format: XY path, or "XY old -> new" for renames
        if len(line) < 4:
            return None
        return StatusEntry(xy=line[:2], path=line[3:])


def _git_error(command: str, error: ProcessError, *, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=error.diagnostic or fallback,
        returncode=error.returncode,
    )
