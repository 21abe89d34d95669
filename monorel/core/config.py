"""Typed configuration loading and access.

A single ``ReleaseConfig`` is built at process start from the optional
``monorel.toml`` at the workspace root and handed to every component. Every
field has a default matching the Remix monorepo layout, so a workspace with
no config file behaves like the original release scripts.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_str,
    get_str_list,
    get_table,
    get_table_list,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "ImportMapsConfig",
    "LayoutConfig",
    "PackageGroupsConfig",
    "PinConfig",
    "PublishConfig",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "monorel.toml"

DEFAULT_SCOPE = "@remix-run"
DEFAULT_CDN_URL = "https://esm.sh"
DEFAULT_REPOSITORY = "https://github.com/remix-run/packages"

# Publish order is significant inside each group and across groups:
# core < runtimes < adapters < trailing.
DEFAULT_CORE = ("dev", "server-runtime", "react", "eslint-config")
DEFAULT_RUNTIMES = ("cloudflare", "deno", "node")
DEFAULT_ADAPTERS = (
    "cloudflare-pages",
    "cloudflare-workers",
    "architect",
    "express",
    "vercel",
    "netlify",
)
DEFAULT_TRAILING = ("serve",)
DEFAULT_UMBRELLA = ("remix", "create-remix")

DEFAULT_IMPORT_MAPS = (
    ".vscode/deno_resolve_npm_imports.json",
    "templates/deno/.vscode/resolve_npm_imports.json",
)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    """Where packages live, relative to the workspace root."""

    scope: str = DEFAULT_SCOPE
    packages_dir: str = "packages"
    dir_prefix: str = "remix-"
    build_dir: str = "build/node_modules"


@dataclass(frozen=True, slots=True)
class PackageGroupsConfig:
    """Short package ids per category, in publish order."""

    core: tuple[str, ...] = DEFAULT_CORE
    runtimes: tuple[str, ...] = DEFAULT_RUNTIMES
    adapters: tuple[str, ...] = DEFAULT_ADAPTERS
    trailing: tuple[str, ...] = DEFAULT_TRAILING
    umbrella: tuple[str, ...] = DEFAULT_UMBRELLA


@dataclass(frozen=True, slots=True)
class ImportMapsConfig:
    paths: tuple[str, ...] = DEFAULT_IMPORT_MAPS
    cdn_url: str = DEFAULT_CDN_URL


@dataclass(frozen=True, slots=True)
class PinConfig:
    """A non-workspace manifest whose dependencies track the release version.

    The manifest is required: a missing file fails the release.
    """

    manifest: str
    dependencies: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class PublishConfig:
    repository: str = DEFAULT_REPOSITORY
    include_umbrella: bool = False


def _default_pins() -> tuple[PinConfig, ...]:
    return (
        PinConfig(
            manifest="scripts/deployment-test/package.json",
            dependencies=(f"{DEFAULT_SCOPE}/dev",),
        ),
    )


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container."""

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    packages: PackageGroupsConfig = field(default_factory=PackageGroupsConfig)
    import_maps: ImportMapsConfig = field(default_factory=ImportMapsConfig)
    pins: tuple[PinConfig, ...] = field(default_factory=_default_pins)
    publish: PublishConfig = field(default_factory=PublishConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create ReleaseConfig from a mapping (parsed TOML).

        Raises:
            ValueError: A present key has the wrong type.
        """
        workspace: StrDict = get_table(data, "workspace") or {}
        packages: StrDict = get_table(data, "packages") or {}
        import_maps: StrDict = get_table(data, "import_maps") or {}
        publish: StrDict = get_table(data, "publish") or {}

        pins = _default_pins()
        if "pins" in data:
            raw_pins = get_table_list(data, "pins")
            if raw_pins is None:
                raise ValueError("pins must be an array of tables")
            pins = tuple(_parse_pin(p) for p in raw_pins)

        include_umbrella = get_bool(publish, "include_umbrella")
        if "include_umbrella" in publish and include_umbrella is None:
            raise ValueError("publish.include_umbrella must be a boolean")

        return cls(
            layout=LayoutConfig(
                scope=get_str(workspace, "scope") or DEFAULT_SCOPE,
                packages_dir=get_str(workspace, "packages_dir") or "packages",
                dir_prefix=_str_or_empty(workspace, "dir_prefix", "remix-"),
                build_dir=get_str(workspace, "build_dir") or "build/node_modules",
            ),
            packages=PackageGroupsConfig(
                core=_str_tuple(packages, "core", DEFAULT_CORE),
                runtimes=_str_tuple(packages, "runtimes", DEFAULT_RUNTIMES),
                adapters=_str_tuple(packages, "adapters", DEFAULT_ADAPTERS),
                trailing=_str_tuple(packages, "trailing", DEFAULT_TRAILING),
                umbrella=_str_tuple(packages, "umbrella", DEFAULT_UMBRELLA),
            ),
            import_maps=ImportMapsConfig(
                paths=_str_tuple(import_maps, "paths", DEFAULT_IMPORT_MAPS),
                cdn_url=(get_str(import_maps, "cdn_url") or DEFAULT_CDN_URL).rstrip("/"),
            ),
            pins=pins,
            publish=PublishConfig(
                repository=get_str(publish, "repository") or DEFAULT_REPOSITORY,
                include_umbrella=bool(include_umbrella),
            ),
        )


def _str_tuple(table: Mapping[str, object], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    if key not in table:
        return default
    items = get_str_list(table, key)
    if items is None:
        raise ValueError(f"{key} must be a list of strings")
    return tuple(items)


def _str_or_empty(table: Mapping[str, object], key: str, default: str) -> str:
    # dir_prefix may legitimately be "" (packages/<id>/package.json)
    value = table.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value.strip()


def _parse_pin(table: StrDict) -> PinConfig:
    manifest = get_str(table, "manifest")
    deps = get_str_list(table, "dependencies")
    if manifest is None or deps is None:
        raise ValueError("each [[pins]] entry needs manifest and dependencies")
    return PinConfig(manifest=manifest, dependencies=tuple(deps))


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to monorel.toml

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Like load_config, but a missing file yields the defaults.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)
