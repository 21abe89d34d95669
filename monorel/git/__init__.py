"""Git operations used by the release flow.

Usage:
    from monorel.git import Repository

    repo = Repository(Path("/path/to/monorepo"))
    tags = repo.tags_at_head()
"""

from monorel.git.repository import (
    GitError,
    GitStatus,
    Repository,
    StatusEntry,
)

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
]
