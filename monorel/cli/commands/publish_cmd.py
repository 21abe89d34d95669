from __future__ import annotations

import typer

from monorel.cli.commands._helpers import exit_with_release_error
from monorel.cli.context import build_context, options_from
from monorel.core.result import Err
from monorel.git.repository import Repository
from monorel.output.console import Style
from monorel.release.npm import NpmRegistry
from monorel.release.service import publish_release


def publish(
    ctx: typer.Context,
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print the npm publish commands without running them."
    ),
) -> None:
    """Publish every package for the release tag at HEAD."""
    cli = build_context(options_from(ctx))
    result = publish_release(
        workspace=cli.workspace,
        vcs=Repository(cli.workspace.root),
        client=NpmRegistry(cli.workspace.root),
        console=cli.console,
        dry_run=dry_run,
    )
    if isinstance(result, Err):
        exit_with_release_error(result.error, console=cli.console)

    summary = result.value
    verb = "Would publish" if summary.dry_run else "Published"
    cli.console.print(
        f"{verb} {len(summary.published)} package(s) from {summary.tag} as {summary.channel!r}",
        Style.BOLD,
    )
