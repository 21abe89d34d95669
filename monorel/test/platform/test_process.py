"""Tests for monorel.platform.process module."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from monorel.core.result import Err, Ok
from monorel.platform.process import ProcessError, run, run_streaming


@patch("subprocess.run")
def test_run_returns_stdout(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.return_value = subprocess.CompletedProcess(
        args=["git"], returncode=0, stdout="out\n", stderr=""
    )

    assert run(["git", "status"], cwd=tmp_path) == Ok("out\n")
    assert mock_run.call_args.kwargs["capture_output"] is True


@patch("subprocess.run")
def test_run_failure_keeps_diagnostics(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.return_value = subprocess.CompletedProcess(
        args=["git"], returncode=128, stdout="", stderr="fatal: bad\n"
    )

    result = run(["git", "tag", "-a", "-m", "x", "v1"], cwd=tmp_path)

    assert isinstance(result, Err)
    assert result.error.returncode == 128
    assert result.error.diagnostic == "fatal: bad"
    assert str(result.error) == "git tag -a ... failed (exit 128)"


@patch("subprocess.run", side_effect=FileNotFoundError("npm"))
def test_missing_executable(mock_run: MagicMock, tmp_path: Path) -> None:
    result = run_streaming(["npm", "publish"], cwd=tmp_path)
    assert isinstance(result, Err)
    assert result.error.returncode == -1


@patch("subprocess.run")
def test_run_streaming_does_not_capture(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.return_value = subprocess.CompletedProcess(args=["npm"], returncode=1)

    result = run_streaming(["npm", "publish"], cwd=tmp_path)

    assert result == Err(ProcessError(command=("npm", "publish"), returncode=1, stdout="", stderr=""))
    assert "capture_output" not in mock_run.call_args.kwargs
