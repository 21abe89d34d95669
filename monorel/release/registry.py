"""Workspace package registry.

The registry is the static table of packages the monorepo publishes. Short
ids ("node", "server-runtime") map to a published name under the scope
("@remix-run/node") and to a source directory ("packages/remix-node").

Publish order is ``core + runtimes + adapters + trailing`` and is
hand-maintained, not derived from the dependency graph.
``find_order_violations`` checks it against what manifests declare.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from monorel.core.config import LayoutConfig, PackageGroupsConfig

__all__ = [
    "OrderViolation",
    "WorkspaceRegistry",
    "find_order_violations",
]


@dataclass(frozen=True, slots=True)
class WorkspaceRegistry:
    scope: str
    dir_prefix: str
    core: tuple[str, ...]
    runtimes: tuple[str, ...]
    adapters: tuple[str, ...]
    trailing: tuple[str, ...] = ()
    umbrella_packages: tuple[str, ...] = ()

    @classmethod
    def from_config(cls, layout: LayoutConfig, groups: PackageGroupsConfig) -> WorkspaceRegistry:
        return cls(
            scope=layout.scope,
            dir_prefix=layout.dir_prefix,
            core=groups.core,
            runtimes=groups.runtimes,
            adapters=groups.adapters,
            trailing=groups.trailing,
            umbrella_packages=groups.umbrella,
        )

    def groups(self) -> dict[str, tuple[str, ...]]:
        """Scoped package groups in publish order."""
        return {
            "core": self.core,
            "runtimes": self.runtimes,
            "adapters": self.adapters,
            "trailing": self.trailing,
        }

    def all(self) -> tuple[str, ...]:
        """Every scoped package id, in publish order."""
        return (*self.core, *self.runtimes, *self.adapters, *self.trailing)

    def umbrella(self) -> tuple[str, ...]:
        """Top-level distributables, published under their bare names."""
        return self.umbrella_packages

    def published_name(self, package_id: str) -> str:
        if package_id in self.umbrella_packages:
            return package_id
        return f"{self.scope}/{package_id}"

    def directory_name(self, package_id: str) -> str:
        if package_id in self.umbrella_packages:
            return package_id
        return f"{self.dir_prefix}{package_id}"

    def published_names(self) -> frozenset[str]:
        """Scoped names of every package in ``all()``."""
        return frozenset(self.published_name(p) for p in self.all())

    def is_workspace_package(self, name: str) -> bool:
        return name in self.published_names()


@dataclass(frozen=True, slots=True)
class OrderViolation:
    """``package`` is published before ``dependency``, which it declares."""

    package: str
    dependency: str

    def __str__(self) -> str:
        return f"{self.package} is published before its dependency {self.dependency}"


def find_order_violations(
    order: Iterable[str], dependencies: Mapping[str, Iterable[str]]
) -> list[OrderViolation]:
    """Check a publish order against declared dependencies.

    Args:
        order: Published package names in publish order.
        dependencies: Published name -> names it depends on. Names outside
            ``order`` are external and ignored.

    Returns:
        Every (package, dependency) pair where the dependency comes later.
    """
    ordered = list(order)
    position = {name: i for i, name in enumerate(ordered)}
    violations: list[OrderViolation] = []
    for name in ordered:
        for dep in sorted(dependencies.get(name, ())):
            if dep == name or dep not in position:
                continue
            if position[dep] > position[name]:
                violations.append(OrderViolation(package=name, dependency=dep))
    return violations
