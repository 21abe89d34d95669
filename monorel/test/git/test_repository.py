"""Tests for git/repository.py."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from monorel.core.result import Err, Ok
from monorel.git.repository import GitStatus, Repository, StatusEntry


def make_completed_process(
    stdout: str = "",
    stderr: str = "",
    returncode: int = 0,
) -> subprocess.CompletedProcess[str]:
    """Create a mock CompletedProcess."""
    return subprocess.CompletedProcess(
        args=["git"],
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )


# =============================================================================
# StatusEntry / GitStatus
# =============================================================================


class TestStatusEntry:
    def test_staged_entry(self) -> None:
        entry = StatusEntry(xy="M ", path="packages/remix-node/package.json")
        assert entry.is_staged is True
        assert entry.is_unstaged is False
        assert entry.is_untracked is False

    def test_untracked_entry(self) -> None:
        entry = StatusEntry(xy="??", path="notes.txt")
        assert entry.is_staged is False
        assert entry.is_untracked is True

    def test_pretty_xy(self) -> None:
        assert StatusEntry(xy=" M", path="a").pretty_xy() == ".M"


class TestGitStatus:
    def test_untracked_files_are_not_tracked_changes(self) -> None:
        status = GitStatus(
            branch="main",
            entries=(StatusEntry(xy="??", path="scratch.js"),),
        )
        assert status.is_clean is False
        assert status.tracked_changes == []
        assert len(status.untracked) == 1


# =============================================================================
# Repository - mocked subprocess
# =============================================================================


class TestRepository:
    def test_exists(self, tmp_path: Path) -> None:
        assert Repository(tmp_path).exists() is False
        (tmp_path / ".git").mkdir()
        assert Repository(tmp_path).exists() is True

    @patch("subprocess.run")
    def test_status_clean(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="## main...origin/main\n")

        result = Repository(tmp_path).status()

        assert isinstance(result, Ok)
        assert result.value.branch == "main"
        assert result.value.is_clean is True

    @patch("subprocess.run")
    def test_status_with_changes(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            stdout="## main [ahead 1]\nM  staged.js\n M packages/remix-node/package.json\n?? new.js\n"
        )

        status = Repository(tmp_path).status().unwrap()

        assert status.branch == "main"
        assert [e.path for e in status.tracked_changes] == [
            "staged.js",
            "packages/remix-node/package.json",
        ]
        assert [e.path for e in status.untracked] == ["new.js"]
        args = mock_run.call_args[0][0]
        assert args[:3] == ["git", "-C", str(tmp_path)]
        assert args[3:] == ["status", "--porcelain=v1", "-b"]

    @patch("subprocess.run")
    def test_status_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            stderr="fatal: not a git repository\n", returncode=128
        )

        result = Repository(tmp_path).status()

        assert isinstance(result, Err)
        assert result.error.command == "status"
        assert result.error.message == "fatal: not a git repository"
        assert result.error.returncode == 128

    @patch("subprocess.run")
    def test_commit_all_returns_head_sha(self, mock_run: MagicMock, tmp_path: Path) -> None:
        sha = "a" * 40
        mock_run.side_effect = [
            make_completed_process(stdout="[main abc1234] Version 1.2.0\n"),
            make_completed_process(stdout=f"{sha}\n"),
        ]

        result = Repository(tmp_path).commit_all("Version 1.2.0")

        assert result == Ok(sha)
        commit_args = mock_run.call_args_list[0][0][0]
        assert commit_args[3:] == ["commit", "--all", "--message=Version 1.2.0"]

    @patch("subprocess.run")
    def test_commit_failure_uses_fallback(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(returncode=1)

        result = Repository(tmp_path).commit_all("Version 1.2.0")

        assert isinstance(result, Err)
        assert "user.name" in result.error.message
        assert mock_run.call_count == 1

    @patch("subprocess.run")
    def test_create_annotated_tag(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        result = Repository(tmp_path).create_annotated_tag("v1.2.0", "Version 1.2.0")

        assert result == Ok(None)
        assert mock_run.call_args[0][0][3:] == ["tag", "-a", "-m", "Version 1.2.0", "v1.2.0"]

    @patch("subprocess.run")
    def test_create_tag_failure(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            stderr="fatal: tag 'v1.2.0' already exists\n", returncode=128
        )

        result = Repository(tmp_path).create_annotated_tag("v1.2.0", "Version 1.2.0")

        assert isinstance(result, Err)
        assert result.error.command == "tag -a"
        assert "already exists" in result.error.message

    @patch("subprocess.run")
    def test_tag_exists(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="v1.2.0\n")
        assert Repository(tmp_path).tag_exists("v1.2.0") == Ok(True)

        mock_run.return_value = make_completed_process(stdout="")
        assert Repository(tmp_path).tag_exists("v1.3.0") == Ok(False)

    @patch("subprocess.run")
    def test_tags_at_head(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="v1.2.0\nv1.2.0-nightly.1\n\n")

        result = Repository(tmp_path).tags_at_head()

        assert result == Ok(["v1.2.0", "v1.2.0-nightly.1"])
        assert mock_run.call_args[0][0][3:] == ["tag", "--list", "--points-at", "HEAD"]
