from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from monorel.cli.context import build_context, options_from
from monorel.core.errors import ErrorCode
from monorel.release.service import workspace_versions

_console = Console()


def status(ctx: typer.Context) -> None:
    """Show the version of every workspace package and flag drift."""
    cli = build_context(options_from(ctx))
    versions = workspace_versions(cli.workspace)

    table = Table(show_header=True, header_style="bold")
    table.add_column("package")
    table.add_column("version")
    for pv in versions:
        table.add_row(pv.name, pv.version or "[dim]missing[/dim]")
    _console.print(table)

    distinct = {pv.version for pv in versions if pv.version is not None}
    if len(distinct) > 1:
        cli.console.warning(f"versions are out of sync: {', '.join(sorted(distinct))}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
