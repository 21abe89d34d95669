from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from monorel.core.config import load_config_or_default
from monorel.core.errors import ErrorCode
from monorel.core.result import Err
from monorel.core.workspace import Workspace, detect_workspace_root
from monorel.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIOptions:
    """Global options collected by the root callback."""

    workspace: Path | None = None


@dataclass(frozen=True, slots=True)
class CLIContext:
    workspace: Workspace
    console: ConsoleProtocol


def options_from(ctx: typer.Context) -> CLIOptions:
    obj = ctx.obj
    if isinstance(obj, CLIOptions):
        return obj
    return CLIOptions()


def build_context(options: CLIOptions) -> CLIContext:
    """Resolve the workspace root and load its configuration once."""
    root = detect_workspace_root(explicit=options.workspace)
    if isinstance(root, Err):
        typer.echo(f"error: {root.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config = load_config_or_default(Workspace(root=root.value).config_path)
    if isinstance(config, Err):
        typer.echo(f"error: {config.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    return CLIContext(
        workspace=Workspace(root=root.value, config=config.value),
        console=RichConsole(),
    )
