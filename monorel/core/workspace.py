"""Workspace detection and paths.

The workspace is the monorepo root: the directory holding ``monorel.toml``
or, when there is none, the git checkout root. All manifest, import-map and
build paths are resolved against it through ``Workspace`` so components
never consult the current directory themselves.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .config import CONFIG_FILE_NAME, ReleaseConfig
from .result import Err, Ok, Result

__all__ = [
    "WORKSPACE_ENV_VAR",
    "Workspace",
    "WorkspaceError",
    "detect_workspace_root",
    "find_workspace_upward",
    "is_workspace_root",
]

WORKSPACE_ENV_VAR = "MONOREL_WORKSPACE"


@dataclass(frozen=True)
class WorkspaceError:
    """Error when workspace cannot be detected."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Workspace:
    """A monorepo checkout plus the configuration that describes it."""

    root: Path
    config: ReleaseConfig = field(default_factory=ReleaseConfig)

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILE_NAME

    @property
    def packages_dir(self) -> Path:
        return self.root / self.config.layout.packages_dir

    @property
    def build_dir(self) -> Path:
        """Directory holding built packages, laid out like node_modules."""
        return self.root / self.config.layout.build_dir

    def manifest_path(self, directory_name: str) -> Path:
        """Path to the source manifest of a package directory under packages/."""
        return self.packages_dir / directory_name / "package.json"

    def built_package_dir(self, published_name: str) -> Path:
        """Directory of a built package, e.g. build/node_modules/@remix-run/node."""
        return self.build_dir.joinpath(*published_name.split("/"))

    def import_map_paths(self) -> list[Path]:
        return [self.root / p for p in self.config.import_maps.paths]

    def resolve(self, relative: str) -> Path:
        return self.root / relative

    def __str__(self) -> str:
        return str(self.root)


def is_workspace_root(path: Path) -> bool:
    """A workspace root carries monorel.toml or is a git checkout root."""
    return (path / CONFIG_FILE_NAME).is_file() or (path / ".git").exists()


def find_workspace_upward(start: Path) -> Path | None:
    """Search upward from start for a workspace root; None if not found."""
    for parent in (start, *start.parents):
        if is_workspace_root(parent):
            return parent
    return None


def detect_workspace_root(
    *,
    explicit: Path | None = None,
    start_dir: Path | None = None,
    env_var: str = WORKSPACE_ENV_VAR,
) -> Result[Path, WorkspaceError]:
    """Detect the workspace root directory.

    Detection order:
    1. Explicit path (``--workspace``), which must be a directory
    2. ``MONOREL_WORKSPACE`` environment variable
    3. Search upward from start_dir (or cwd)
    """
    if explicit is not None:
        path = explicit.expanduser().resolve()
        if not path.is_dir():
            return Err(WorkspaceError(f"workspace is not a directory: {path}", searched_from=path))
        return Ok(path)

    env_value = os.environ.get(env_var)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if env_path.is_dir():
            return Ok(env_path)
        return Err(
            WorkspaceError(
                message=f"${env_var} is set to '{env_value}' but it is not a directory",
            )
        )

    search_start = (start_dir or Path.cwd()).resolve()
    found = find_workspace_upward(search_start)
    if found is None:
        return Err(
            WorkspaceError(
                message=f"Could not find workspace ({CONFIG_FILE_NAME} or .git not found)",
                searched_from=search_start,
            )
        )
    return Ok(found)
