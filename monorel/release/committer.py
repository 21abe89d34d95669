"""Release committer: clean-tree precondition, commit and annotated tag."""

from __future__ import annotations

from dataclasses import dataclass

from monorel.core.result import Err, Ok, Result
from monorel.git.repository import GitError
from monorel.release.errors import ReleaseError
from monorel.release.semver import tag_name
from monorel.release.vcs import VersionControl

__all__ = [
    "ReleaseCommit",
    "commit_and_tag",
    "ensure_clean_worktree",
    "ensure_tag_available",
    "release_message",
]

_MAX_LISTED_PATHS = 10


@dataclass(frozen=True, slots=True)
class ReleaseCommit:
    sha: str
    tag: str
    message: str


def release_message(version: str) -> str:
    return f"Version {version}"


def ensure_clean_worktree(vcs: VersionControl) -> Result[None, ReleaseError]:
    """Fail unless every status entry is an untracked file."""
    status = vcs.status()
    if isinstance(status, Err):
        return Err(_git_failed("failed to check git status", status.error))

    dirty = status.value.tracked_changes
    if dirty:
        listed = ", ".join(f"{e.pretty_xy()} {e.path}" for e in dirty[:_MAX_LISTED_PATHS])
        if len(dirty) > _MAX_LISTED_PATHS:
            listed += f", ... ({len(dirty) - _MAX_LISTED_PATHS} more)"
        return Err(
            ReleaseError(
                kind="dirty_worktree",
                message="Working directory is not clean. Please commit or stash your changes.",
                hint=listed,
            )
        )
    return Ok(None)


def ensure_tag_available(vcs: VersionControl, version: str) -> Result[None, ReleaseError]:
    tag = tag_name(version)
    exists = vcs.tag_exists(tag)
    if isinstance(exists, Err):
        return Err(_git_failed("failed to list tags", exists.error))
    if exists.value:
        return Err(
            ReleaseError(
                kind="tag_exists",
                message=f"tag {tag} already exists",
                hint="Pick a new version, or delete the tag if it was never published.",
            )
        )
    return Ok(None)


def commit_and_tag(vcs: VersionControl, version: str) -> Result[ReleaseCommit, ReleaseError]:
    """Commit all tracked changes and tag the commit ``v<version>``.

    No rollback: if tagging fails after the commit, the commit stays and
    the error says so.
    """
    message = release_message(version)
    tag = tag_name(version)

    commit = vcs.commit_all(message)
    if isinstance(commit, Err):
        return Err(_git_failed(f"git commit failed for {message!r}", commit.error))

    tagged = vcs.create_annotated_tag(tag, message)
    if isinstance(tagged, Err):
        return Err(
            _git_failed(
                f"committed {commit.value[:12]} but failed to create tag {tag}; "
                "tag it manually or reset the commit",
                tagged.error,
            )
        )

    return Ok(ReleaseCommit(sha=commit.value, tag=tag, message=message))


def _git_failed(message: str, error: GitError) -> ReleaseError:
    return ReleaseError(kind="git_failed", message=message, hint=error.message or None)
