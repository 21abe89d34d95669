from __future__ import annotations

import typer

from monorel.cli.commands._helpers import exit_with_release_error
from monorel.cli.context import build_context, options_from
from monorel.core.errors import ErrorCode
from monorel.core.result import Err
from monorel.git.repository import Repository
from monorel.release.service import cut_release


def release(
    ctx: typer.Context,
    version: str | None = typer.Argument(
        None,
        help="Version to release, e.g. 1.2.0 or 1.2.0-nightly.3",
        show_default=False,
    ),
) -> None:
    """Set every package to VERSION, then commit and tag v<VERSION>."""
    if version is None or not version.strip():
        typer.echo("error: missing version argument (usage: monorel release <version>)", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    cli = build_context(options_from(ctx))
    result = cut_release(
        workspace=cli.workspace,
        version=version.strip(),
        vcs=Repository(cli.workspace.root),
        console=cli.console,
    )
    if isinstance(result, Err):
        exit_with_release_error(result.error, console=cli.console)
