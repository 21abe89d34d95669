"""Import-map synchronization.

Deno import maps in the repo resolve ``@remix-run/*`` specifiers to CDN
URLs that embed the package version. On release every such entry is pointed
at ``<cdn>/<package>@<version>[/<subpath>]``; entries for other packages are
left exactly as they were, in the same position.
"""

from __future__ import annotations

from pathlib import Path

from monorel.core.result import Err
from monorel.core.structured import StrDict, as_str_dict
from monorel.release.jsonfile import NotFoundError, ParseError, read_json_object, write_json_object
from monorel.release.outcome import Failed, FileOutcome, Skipped, UpdateReport, Updated
from monorel.release.registry import WorkspaceRegistry

__all__ = [
    "apply_version",
    "cdn_url",
    "rewrite_imports",
    "split_specifier",
    "sync_import_maps",
]


def split_specifier(specifier: str) -> tuple[str, str]:
    """Split an import specifier into (package name, sub-path).

    >>> split_specifier("@remix-run/node/globals")
    ('@remix-run/node', 'globals')
    >>> split_specifier("react-dom/server")
    ('react-dom', 'server')
    """
    parts = specifier.split("/")
    if specifier.startswith("@"):
        return ("/".join(parts[:2]), "/".join(parts[2:]))
    return (parts[0], "/".join(parts[1:]))


def cdn_url(base: str, package_name: str, version: str, sub_path: str) -> str:
    url = f"{base.rstrip('/')}/{package_name}@{version}"
    if sub_path:
        url += f"/{sub_path}"
    return url


def rewrite_imports(
    imports: StrDict,
    target_version: str,
    workspace_packages: frozenset[str],
    base_url: str,
) -> StrDict:
    """Return a new imports table with workspace entries re-pointed."""
    out: StrDict = {}
    for specifier, url in imports.items():
        package_name, sub_path = split_specifier(specifier)
        if package_name in workspace_packages:
            out[specifier] = cdn_url(base_url, package_name, target_version, sub_path)
        else:
            out[specifier] = url
    return out


def apply_version(
    import_map_path: Path,
    target_version: str,
    registry: WorkspaceRegistry,
    base_url: str,
) -> FileOutcome:
    label = import_map_path.name
    read = read_json_object(import_map_path)
    if isinstance(read, Err):
        if isinstance(read.error, NotFoundError):
            return Skipped(label, import_map_path, f"no import map at {import_map_path}")
        return Failed(label, import_map_path, read.error)

    document = read.value
    if "imports" not in document:
        return Updated(label, import_map_path, changed=False)
    imports = as_str_dict(document["imports"])
    if imports is None:
        return Failed(label, import_map_path, ParseError(import_map_path, "imports must be an object"))

    # Assigning an existing key keeps its position among the top-level fields.
    document["imports"] = rewrite_imports(
        imports, target_version, registry.published_names(), base_url
    )
    written = write_json_object(import_map_path, document)
    if isinstance(written, Err):
        return Failed(label, import_map_path, written.error)
    return Updated(label, import_map_path, changed=written.value)


def sync_import_maps(
    paths: list[Path],
    target_version: str,
    registry: WorkspaceRegistry,
    base_url: str,
) -> UpdateReport:
    """Process every import-map location independently."""
    return UpdateReport.of(
        apply_version(path, target_version, registry, base_url) for path in paths
    )
