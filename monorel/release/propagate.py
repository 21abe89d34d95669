"""Version propagation across workspace manifests.

``apply_version`` sets the version of the umbrella packages and of every
registry package to the target, and pins every sibling reference in their
dependency tables to exactly that version (no ``^``/``~``). Configured pin
manifests (e.g. the deployment-test script) get their listed dependencies
pinned the same way.

Each manifest is its own read-modify-write cycle. A missing package
manifest is skipped and a broken one fails alone; neither stops the rest.
Running twice with the same target changes nothing the second time.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from monorel.core.config import PinConfig
from monorel.core.result import Err
from monorel.core.workspace import Workspace
from monorel.release.jsonfile import NotFoundError
from monorel.release.manifest import PackageDescriptor, read_manifest, write_manifest
from monorel.release.outcome import Failed, FileOutcome, Skipped, UpdateReport, Updated
from monorel.release.registry import WorkspaceRegistry

__all__ = [
    "apply_version",
    "pin_manifest",
    "set_package_version",
]


def apply_version(
    target_version: str,
    registry: WorkspaceRegistry,
    workspace: Workspace,
) -> UpdateReport:
    return UpdateReport.of(_iter_updates(target_version, registry, workspace))


def _iter_updates(
    target_version: str,
    registry: WorkspaceRegistry,
    workspace: Workspace,
) -> Iterator[FileOutcome]:
    siblings = registry.published_names()
    for package_id in (*registry.umbrella(), *registry.all()):
        yield set_package_version(
            workspace.manifest_path(registry.directory_name(package_id)),
            target_version,
            siblings=siblings,
            label=registry.published_name(package_id),
        )
    for pin in workspace.config.pins:
        yield pin_manifest(workspace.resolve(pin.manifest), pin, target_version)


def set_package_version(
    path: Path,
    target_version: str,
    *,
    siblings: frozenset[str],
    label: str,
) -> FileOutcome:
    """Update one package manifest; a missing file is Skipped."""
    read = read_manifest(path)
    if isinstance(read, Err):
        if isinstance(read.error, NotFoundError):
            return Skipped(label, path, f"no package.json found for {label}")
        return Failed(label, path, read.error)

    descriptor = read.value
    descriptor.version = target_version
    descriptor.pin_dependencies(siblings, target_version)
    return _persist(label, descriptor)


def pin_manifest(path: Path, pin: PinConfig, target_version: str) -> FileOutcome:
    """Pin the configured dependencies of a required, non-workspace manifest.

    A dependency not declared anywhere is added to ``dependencies``.
    """
    label = pin.manifest
    read = read_manifest(path)
    if isinstance(read, Err):
        return Failed(label, path, read.error)

    descriptor = read.value
    wanted = frozenset(pin.dependencies)
    descriptor.pin_dependencies(wanted, target_version)
    declared = descriptor.dependency_names()
    missing = [dep for dep in pin.dependencies if dep not in declared]
    if missing:
        deps = descriptor.dependency_table("dependencies")
        if deps is None:
            deps = {}
            descriptor.data["dependencies"] = deps
        for dep in missing:
            deps[dep] = target_version
    return _persist(label, descriptor)


def _persist(label: str, descriptor: PackageDescriptor) -> FileOutcome:
    written = write_manifest(descriptor)
    if isinstance(written, Err):
        return Failed(label, descriptor.path, written.error)
    return Updated(label, descriptor.path, changed=written.value)
