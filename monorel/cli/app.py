from __future__ import annotations

from pathlib import Path

import typer

from monorel import __version__
from monorel.cli.commands.publish_cmd import publish
from monorel.cli.commands.release_cmd import release
from monorel.cli.commands.status import status
from monorel.cli.context import CLIOptions

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command()(release)
app.command()(publish)
app.command()(status)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    workspace: Path | None = typer.Option(
        None,
        "--workspace",
        help="Monorepo root (overrides auto detection)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)

    ctx.obj = CLIOptions(workspace=workspace)


def main() -> None:
    app()
