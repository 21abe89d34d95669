from __future__ import annotations

from typing import NoReturn

import typer

from monorel.core.errors import ErrorCode
from monorel.output.console import ConsoleProtocol, Style
from monorel.release.errors import ReleaseError, ReleaseErrorKind

_EXIT_CODES: dict[ReleaseErrorKind, ErrorCode] = {
    "invalid_version": ErrorCode.USER_ERROR,
    "dirty_worktree": ErrorCode.PRECONDITION_ERROR,
    "missing_version": ErrorCode.PRECONDITION_ERROR,
    "tag_exists": ErrorCode.PRECONDITION_ERROR,
    "build_missing": ErrorCode.PRECONDITION_ERROR,
    "order_violation": ErrorCode.PRECONDITION_ERROR,
    "git_failed": ErrorCode.TOOL_ERROR,
    "publish_failed": ErrorCode.TOOL_ERROR,
    "propagation_failed": ErrorCode.IO_ERROR,
}


def release_error_code(kind: ReleaseErrorKind) -> ErrorCode:
    return _EXIT_CODES.get(kind, ErrorCode.USER_ERROR)


def exit_with_release_error(error: ReleaseError, *, console: ConsoleProtocol) -> NoReturn:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(release_error_code(error.kind)))
