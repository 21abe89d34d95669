"""Release use cases: cut a release, publish a release, report versions.

``cut_release`` order matters:
1. validate the version and check the tree is clean (nothing written yet),
2. propagate the version through manifests and import maps,
3. commit and tag, only if every file was updated.

``publish_release`` runs later and independently; it consumes only the tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from monorel.core.result import Err, Ok, Result
from monorel.core.workspace import Workspace
from monorel.output.console import ConsoleProtocol, Style
from monorel.release import import_map, propagate
from monorel.release.committer import (
    ReleaseCommit,
    commit_and_tag,
    ensure_clean_worktree,
    ensure_tag_available,
)
from monorel.release.errors import ReleaseError
from monorel.release.manifest import read_manifest
from monorel.release.outcome import Failed, Skipped, UpdateReport, Updated
from monorel.release.publish import PublishTarget, iter_publish, plan_publish, preflight
from monorel.release.registry import WorkspaceRegistry
from monorel.release.semver import require_version
from monorel.release.vcs import RegistryClient, VersionControl

__all__ = [
    "PackageVersion",
    "PublishSummary",
    "ReleaseSummary",
    "cut_release",
    "publish_release",
    "workspace_versions",
]


@dataclass(frozen=True, slots=True)
class ReleaseSummary:
    version: str
    commit: ReleaseCommit
    report: UpdateReport


@dataclass(frozen=True, slots=True)
class PublishSummary:
    tag: str
    channel: str
    published: tuple[PublishTarget, ...]
    dry_run: bool


@dataclass(frozen=True, slots=True)
class PackageVersion:
    name: str
    version: str | None


def registry_for(workspace: Workspace) -> WorkspaceRegistry:
    return WorkspaceRegistry.from_config(workspace.config.layout, workspace.config.packages)


def cut_release(
    *,
    workspace: Workspace,
    version: str,
    vcs: VersionControl,
    console: ConsoleProtocol,
) -> Result[ReleaseSummary, ReleaseError]:
    parsed = require_version(version)
    if isinstance(parsed, Err):
        return parsed
    version = str(parsed.value)

    clean = ensure_clean_worktree(vcs)
    if isinstance(clean, Err):
        return clean
    available = ensure_tag_available(vcs, version)
    if isinstance(available, Err):
        return available

    registry = registry_for(workspace)

    console.header(f"Updating manifests to {version}")
    manifests = propagate.apply_version(version, registry, workspace)
    _render_report(manifests, console, workspace, version)

    console.header("Updating import maps")
    maps = import_map.sync_import_maps(
        workspace.import_map_paths(),
        version,
        registry,
        workspace.config.import_maps.cdn_url,
    )
    _render_report(maps, console, workspace, version)

    report = manifests.merge(maps)
    if not report.ok:
        failed = ", ".join(_display_path(o.path, workspace.root) for o in report.failed)
        return Err(
            ReleaseError(
                kind="propagation_failed",
                message=f"{len(report.failed)} file(s) could not be updated; nothing was committed",
                hint=f"fix {failed}, then discard the partial edits (git checkout -- .) and rerun",
            )
        )

    console.header("Committing")
    commit = commit_and_tag(vcs, version)
    if isinstance(commit, Err):
        return commit
    console.success(f"Committed and tagged version {version} ({commit.value.tag})")

    return Ok(ReleaseSummary(version=version, commit=commit.value, report=report))


def publish_release(
    *,
    workspace: Workspace,
    vcs: VersionControl,
    client: RegistryClient,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[PublishSummary, ReleaseError]:
    """Publish every package for the tag at HEAD, stopping at the first failure."""
    plan = plan_publish(vcs, registry_for(workspace), workspace)
    if isinstance(plan, Err):
        return plan
    plan_value = plan.value

    console.print(
        f"Publishing {plan_value.tag.name} to dist-tag {plan_value.channel!r}"
        + (" (dry run)" if dry_run else ""),
        Style.BOLD,
    )

    checked = preflight(plan_value)
    if isinstance(checked, Err):
        return checked

    published: list[PublishTarget] = []
    for step in iter_publish(
        plan_value,
        client,
        repository=workspace.config.publish.repository,
        console=console,
        dry_run=dry_run,
    ):
        if isinstance(step.result, Err):
            remaining = len(plan_value.targets) - len(published) - 1
            if remaining:
                console.print(f"stopped; {remaining} package(s) not published", Style.DIM)
            return step.result
        published.append(step.target)
        if not dry_run:
            console.success(f"Published {step.target.published_name}@{plan_value.tag.version}")

    return Ok(
        PublishSummary(
            tag=plan_value.tag.name,
            channel=plan_value.channel,
            published=tuple(published),
            dry_run=dry_run,
        )
    )


def workspace_versions(workspace: Workspace) -> list[PackageVersion]:
    """Current version of every known package; None when the manifest is unreadable."""
    registry = registry_for(workspace)
    out: list[PackageVersion] = []
    for package_id in (*registry.umbrella(), *registry.all()):
        read = read_manifest(workspace.manifest_path(registry.directory_name(package_id)))
        version = read.value.version if isinstance(read, Ok) else None
        out.append(PackageVersion(name=registry.published_name(package_id), version=version))
    return out


def _render_report(
    report: UpdateReport,
    console: ConsoleProtocol,
    workspace: Workspace,
    version: str,
) -> None:
    for outcome in report.outcomes:
        match outcome:
            case Updated(target=target, changed=True):
                console.success(f"Updated {target} to version {version}")
            case Updated(target=target, changed=False):
                console.print(f"  {target} already at {version}", Style.DIM)
            case Skipped(reason=reason):
                console.warning(f"{reason}; skipping")
            case Failed(target=target, path=path):
                shown = _display_path(path, workspace.root)
                console.error(f"{target} ({shown}): {outcome.message}")


def _display_path(path: Path, root: Path) -> str:
    """Path relative to the workspace root, or absolute when configured outside it."""
    if path.is_relative_to(root):
        return str(path.relative_to(root))
    return str(path)
