"""Manifest store: read and write ``package.json`` descriptors.

A ``PackageDescriptor`` wraps the parsed document. The recognized fields
(name, version, the three dependency tables, repository) are exposed as
properties; every other field stays in ``data`` untouched and in place, so
a read-modify-write cycle only changes what the caller changed.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

from monorel.core.result import Err, Ok, Result
from monorel.core.structured import StrDict, as_str_dict, get_str
from monorel.release.jsonfile import JsonFileError, read_json_object, write_json_object

__all__ = [
    "DEPENDENCY_FIELDS",
    "INSTALLED_DEPENDENCY_FIELDS",
    "PackageDescriptor",
    "read_manifest",
    "update_manifest",
    "write_manifest",
]

DEPENDENCY_FIELDS = ("dependencies", "devDependencies", "peerDependencies")
# Tables a consumer install resolves against the registry (npm 7+ installs peers).
INSTALLED_DEPENDENCY_FIELDS = ("dependencies", "peerDependencies")


@dataclass(slots=True)
class PackageDescriptor:
    """A package manifest borrowed from disk for one edit cycle."""

    path: Path
    data: StrDict

    @property
    def name(self) -> str | None:
        return get_str(self.data, "name")

    @property
    def version(self) -> str | None:
        return get_str(self.data, "version")

    @version.setter
    def version(self, value: str) -> None:
        self.data["version"] = value

    @property
    def repository(self) -> object:
        """Either a URL string or a ``{type, url}`` object."""
        return self.data.get("repository")

    @repository.setter
    def repository(self, value: str) -> None:
        self.data["repository"] = value

    def dependency_table(self, kind: str) -> StrDict | None:
        """One of DEPENDENCY_FIELDS, or None when absent or not an object."""
        return as_str_dict(self.data.get(kind))

    def dependency_ranges(
        self, kinds: tuple[str, ...] = DEPENDENCY_FIELDS
    ) -> Iterator[tuple[str, str, str]]:
        """Yield (kind, dependency name, range) across the given dependency tables."""
        for kind in kinds:
            table = self.dependency_table(kind)
            if table is None:
                continue
            for dep, version_range in table.items():
                if isinstance(version_range, str):
                    yield (kind, dep, version_range)

    def dependency_names(self, kinds: tuple[str, ...] = DEPENDENCY_FIELDS) -> set[str]:
        return {dep for _, dep, _ in self.dependency_ranges(kinds)}

    def pin_dependencies(self, names: set[str] | frozenset[str], version: str) -> list[str]:
        """Set every listed dependency that is present to exactly ``version``.

        Returns the "kind:name" keys whose value actually changed.
        """
        changed: list[str] = []
        for kind in DEPENDENCY_FIELDS:
            table = self.dependency_table(kind)
            if table is None:
                continue
            for dep in table:
                if dep in names and table[dep] != version:
                    table[dep] = version
                    changed.append(f"{kind}:{dep}")
        return changed


def read_manifest(path: Path) -> Result[PackageDescriptor, JsonFileError]:
    """Load a manifest.

    Returns:
        Ok(PackageDescriptor), or Err(NotFoundError) when the file is absent
        and Err(ParseError) when it is not a JSON object.
    """
    data = read_json_object(path)
    if isinstance(data, Err):
        return data
    return Ok(PackageDescriptor(path=path, data=data.value))


def write_manifest(descriptor: PackageDescriptor) -> Result[bool, JsonFileError]:
    """Persist a descriptor in place. Ok(True) when the file changed."""
    return write_json_object(descriptor.path, descriptor.data)


def update_manifest(
    path: Path, transform: Callable[[PackageDescriptor], None]
) -> Result[bool, JsonFileError]:
    """Read, transform in place, and write back a manifest."""
    read = read_manifest(path)
    if isinstance(read, Err):
        return read
    transform(read.value)
    return write_manifest(read.value)
