"""Publish sequencer.

Publishing replays a release tag: the version comes from the ``v<semver>``
tag at HEAD, the npm dist-tag from its pre-release id, and packages go out
one by one in registry order so each package's dependency ranges already
resolve when it lands.

``iter_publish`` yields one step per package and does the next package's
work only when asked for the next step, so the caller decides whether a
failure stops the sequence. ``monorel.release.service.publish_release``
stops at the first failure.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

from monorel.core.result import Err, Ok, Result
from monorel.core.workspace import Workspace
from monorel.output.console import ConsoleProtocol
from monorel.release.errors import ReleaseError
from monorel.release.jsonfile import describe_error
from monorel.release.manifest import (
    INSTALLED_DEPENDENCY_FIELDS,
    PackageDescriptor,
    read_manifest,
    update_manifest,
)
from monorel.release.npm import publish_command
from monorel.release.registry import WorkspaceRegistry, find_order_violations
from monorel.release.semver import Version, channel_for, version_from_tag
from monorel.release.vcs import RegistryClient, VersionControl

__all__ = [
    "PublishPlan",
    "PublishStep",
    "PublishTarget",
    "ReleaseTag",
    "iter_publish",
    "plan_publish",
    "preflight",
    "resolve_release_tag",
]


@dataclass(frozen=True, slots=True)
class ReleaseTag:
    name: str
    version: Version


@dataclass(frozen=True, slots=True)
class PublishTarget:
    package_id: str
    published_name: str
    directory: Path

    @property
    def manifest_path(self) -> Path:
        return self.directory / "package.json"


@dataclass(frozen=True, slots=True)
class PublishPlan:
    tag: ReleaseTag
    channel: str
    targets: tuple[PublishTarget, ...]


@dataclass(frozen=True, slots=True)
class PublishStep:
    target: PublishTarget
    result: Result[None, ReleaseError]


def resolve_release_tag(vcs: VersionControl) -> Result[ReleaseTag, ReleaseError]:
    """Find the ``v<semver>`` tag pointing at HEAD."""
    tags = vcs.tags_at_head()
    if isinstance(tags, Err):
        return Err(
            ReleaseError(
                kind="git_failed",
                message="failed to list tags at HEAD",
                hint=tags.error.message or None,
            )
        )

    for tag in tags.value:
        version = version_from_tag(tag)
        if version is not None:
            return Ok(ReleaseTag(name=tag, version=version))

    hint = "Run `monorel release <version>` first."
    if tags.value:
        hint = f"tags at HEAD are not release tags: {', '.join(tags.value)}"
    return Err(
        ReleaseError(
            kind="missing_version",
            message="Missing release version. Run the version script first.",
            hint=hint,
        )
    )


def plan_publish(
    vcs: VersionControl,
    registry: WorkspaceRegistry,
    workspace: Workspace,
) -> Result[PublishPlan, ReleaseError]:
    tag = resolve_release_tag(vcs)
    if isinstance(tag, Err):
        return tag

    ids: list[str] = []
    if workspace.config.publish.include_umbrella:
        ids.extend(registry.umbrella())
    ids.extend(registry.all())

    targets = tuple(
        PublishTarget(
            package_id=pid,
            published_name=registry.published_name(pid),
            directory=workspace.built_package_dir(registry.published_name(pid)),
        )
        for pid in ids
    )
    return Ok(PublishPlan(tag=tag.value, channel=channel_for(tag.value.version), targets=targets))


def preflight(plan: PublishPlan) -> Result[None, ReleaseError]:
    """Check every built manifest exists and the order respects its dependencies.

    Only tables a consumer install resolves count as ordering constraints;
    consumers never install devDependencies, so they may point anywhere.

    Runs before the first publish so a bad build or a stale order is caught
    while the registry is still untouched.
    """
    dependencies: dict[str, set[str]] = {}
    for target in plan.targets:
        read = read_manifest(target.manifest_path)
        if isinstance(read, Err):
            return Err(
                ReleaseError(
                    kind="build_missing",
                    message=f"cannot publish {target.published_name}: {describe_error(read.error)}",
                    hint="Build the packages before publishing.",
                )
            )
        dependencies[target.published_name] = read.value.dependency_names(
            INSTALLED_DEPENDENCY_FIELDS
        )

    violations = find_order_violations(
        (t.published_name for t in plan.targets), dependencies
    )
    if violations:
        return Err(
            ReleaseError(
                kind="order_violation",
                message="publish order does not respect package dependencies",
                hint="; ".join(str(v) for v in violations),
            )
        )
    return Ok(None)


def iter_publish(
    plan: PublishPlan,
    client: RegistryClient,
    *,
    repository: str,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Iterator[PublishStep]:
    """Patch and publish each target in order, one step per package."""
    for target in plan.targets:
        console.command(publish_command(target.directory, plan.channel))
        if dry_run:
            yield PublishStep(target, Ok(None))
            continue

        patched = update_manifest(target.manifest_path, _set_repository(repository))
        if isinstance(patched, Err):
            yield PublishStep(
                target,
                Err(
                    ReleaseError(
                        kind="publish_failed",
                        message=f"failed to patch {target.published_name} manifest",
                        hint=describe_error(patched.error),
                    )
                ),
            )
            continue

        published = client.publish(target.directory, plan.channel)
        if isinstance(published, Err):
            e = published.error
            yield PublishStep(
                target,
                Err(
                    ReleaseError(
                        kind="publish_failed",
                        message=f"npm publish failed for {target.published_name} (exit {e.returncode})",
                        hint=e.diagnostic or None,
                    )
                ),
            )
            continue

        yield PublishStep(target, Ok(None))


def _set_repository(url: str) -> Callable[[PackageDescriptor], None]:
    def transform(descriptor: PackageDescriptor) -> None:
        descriptor.repository = url

    return transform
