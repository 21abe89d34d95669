from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import cast

import pytest
import typer
from typer.testing import CliRunner

from monorel import __version__
from monorel.cli.app import app
from monorel.cli.context import CLIContext, CLIOptions, build_context
from monorel.core.errors import ErrorCode
from monorel.core.workspace import Workspace
from monorel.git.repository import StatusEntry
from monorel.output.console import MockConsole
from monorel.test.fakes import FakeRegistry, FakeVcs, read_json, write_json


def _typer_ctx() -> typer.Context:
    return cast(typer.Context, SimpleNamespace(obj=None))


def _patch_context(
    monkeypatch: pytest.MonkeyPatch, module: object, workspace: Workspace
) -> MockConsole:
    console = MockConsole()
    cli = CLIContext(workspace=workspace, console=console)
    monkeypatch.setattr(module, "build_context", lambda _options: cli)
    return console


def _build(workspace: Workspace, version: str) -> None:
    for pid in ("server-runtime", "node", "express", "serve"):
        write_json(
            workspace.built_package_dir(f"@remix-run/{pid}") / "package.json",
            {"name": f"@remix-run/{pid}", "version": version},
        )


# =============================================================================
# release
# =============================================================================


def test_release_requires_version(monkeypatch: pytest.MonkeyPatch) -> None:
    import monorel.cli.commands.release_cmd as release_cmd

    def fail(_options: CLIOptions) -> CLIContext:
        raise AssertionError("workspace must not be resolved without a version")

    monkeypatch.setattr(release_cmd, "build_context", fail)

    with pytest.raises(typer.Exit) as exc:
        release_cmd.release(_typer_ctx(), version=None)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_release_rejects_invalid_version(
    small_workspace: Workspace, monkeypatch: pytest.MonkeyPatch
) -> None:
    import monorel.cli.commands.release_cmd as release_cmd

    vcs = FakeVcs()
    console = _patch_context(monkeypatch, release_cmd, small_workspace)
    monkeypatch.setattr(release_cmd, "Repository", lambda _root: vcs)

    with pytest.raises(typer.Exit) as exc:
        release_cmd.release(_typer_ctx(), version="1.2")

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert console.has_error()
    assert vcs.commits == []


def test_release_dirty_tree_is_precondition_error(
    small_workspace: Workspace, monkeypatch: pytest.MonkeyPatch
) -> None:
    import monorel.cli.commands.release_cmd as release_cmd

    vcs = FakeVcs(entries=[StatusEntry(xy=" M", path="packages/remix-node/src/index.ts")])
    console = _patch_context(monkeypatch, release_cmd, small_workspace)
    monkeypatch.setattr(release_cmd, "Repository", lambda _root: vcs)

    with pytest.raises(typer.Exit) as exc:
        release_cmd.release(_typer_ctx(), version="1.2.0")

    assert exc.value.exit_code == int(ErrorCode.PRECONDITION_ERROR)
    assert console.find("packages/remix-node/src/index.ts")
    assert read_json(small_workspace.manifest_path("remix-node"))["version"] == "1.1.0"


def test_release_commits_and_tags(small_workspace: Workspace, monkeypatch: pytest.MonkeyPatch) -> None:
    import monorel.cli.commands.release_cmd as release_cmd

    vcs = FakeVcs()
    console = _patch_context(monkeypatch, release_cmd, small_workspace)
    monkeypatch.setattr(release_cmd, "Repository", lambda _root: vcs)

    release_cmd.release(_typer_ctx(), version=" 1.2.0 ")

    assert vcs.commits == ["Version 1.2.0"]
    assert vcs.tags == {"v1.2.0": "Version 1.2.0"}
    assert console.find("Committed and tagged version 1.2.0 (v1.2.0)")


def test_release_git_failure_is_tool_error(
    small_workspace: Workspace, monkeypatch: pytest.MonkeyPatch
) -> None:
    import monorel.cli.commands.release_cmd as release_cmd

    vcs = FakeVcs(commit_error="Please tell me who you are.")
    _patch_context(monkeypatch, release_cmd, small_workspace)
    monkeypatch.setattr(release_cmd, "Repository", lambda _root: vcs)

    with pytest.raises(typer.Exit) as exc:
        release_cmd.release(_typer_ctx(), version="1.2.0")

    assert exc.value.exit_code == int(ErrorCode.TOOL_ERROR)


# =============================================================================
# publish
# =============================================================================


def test_publish_without_tag(small_workspace: Workspace, monkeypatch: pytest.MonkeyPatch) -> None:
    import monorel.cli.commands.publish_cmd as publish_cmd

    registry = FakeRegistry()
    console = _patch_context(monkeypatch, publish_cmd, small_workspace)
    monkeypatch.setattr(publish_cmd, "Repository", lambda _root: FakeVcs())
    monkeypatch.setattr(publish_cmd, "NpmRegistry", lambda _root: registry)

    with pytest.raises(typer.Exit) as exc:
        publish_cmd.publish(_typer_ctx(), dry_run=False)

    assert exc.value.exit_code == int(ErrorCode.PRECONDITION_ERROR)
    assert console.find("Missing release version")
    assert registry.published == []


def test_publish_dry_run(small_workspace: Workspace, monkeypatch: pytest.MonkeyPatch) -> None:
    import monorel.cli.commands.publish_cmd as publish_cmd

    _build(small_workspace, "1.2.0-nightly.7")
    registry = FakeRegistry()
    console = _patch_context(monkeypatch, publish_cmd, small_workspace)
    monkeypatch.setattr(publish_cmd, "Repository", lambda _root: FakeVcs(head_tags=["v1.2.0-nightly.7"]))
    monkeypatch.setattr(publish_cmd, "NpmRegistry", lambda _root: registry)

    publish_cmd.publish(_typer_ctx(), dry_run=True)

    assert registry.published == []
    assert len(console.find("npm publish --tag nightly")) == 4
    assert console.find("Would publish 4 package(s) from v1.2.0-nightly.7 as 'nightly'")


def test_publish_failure_is_tool_error(
    small_workspace: Workspace, monkeypatch: pytest.MonkeyPatch
) -> None:
    import monorel.cli.commands.publish_cmd as publish_cmd

    _build(small_workspace, "1.2.0")
    registry = FakeRegistry(fail_on={"express"})
    console = _patch_context(monkeypatch, publish_cmd, small_workspace)
    monkeypatch.setattr(publish_cmd, "Repository", lambda _root: FakeVcs(head_tags=["v1.2.0"]))
    monkeypatch.setattr(publish_cmd, "NpmRegistry", lambda _root: registry)

    with pytest.raises(typer.Exit) as exc:
        publish_cmd.publish(_typer_ctx(), dry_run=False)

    assert exc.value.exit_code == int(ErrorCode.TOOL_ERROR)
    assert [d.name for d, _ in registry.published] == ["server-runtime", "node"]
    assert console.find("npm ERR! code E403")


# =============================================================================
# context / app
# =============================================================================


def test_build_context_reads_config(tmp_path: Path) -> None:
    (tmp_path / "monorel.toml").write_text('[workspace]\nscope = "@acme"\n', encoding="utf-8")

    cli = build_context(CLIOptions(workspace=tmp_path))

    assert cli.workspace.root == tmp_path.resolve()
    assert cli.workspace.config.layout.scope == "@acme"


def test_build_context_bad_config(tmp_path: Path) -> None:
    (tmp_path / "monorel.toml").write_text("[workspace\n", encoding="utf-8")

    with pytest.raises(typer.Exit) as exc:
        build_context(CLIOptions(workspace=tmp_path))

    assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)


def test_build_context_missing_workspace(tmp_path: Path) -> None:
    with pytest.raises(typer.Exit) as exc:
        build_context(CLIOptions(workspace=tmp_path / "nope"))

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_version_flag() -> None:
    result = CliRunner().invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_status_reports_drift(small_workspace: Workspace) -> None:
    manifest = small_workspace.manifest_path("remix-node")
    data = read_json(manifest)
    data["version"] = "1.0.0"
    write_json(manifest, data)
    (small_workspace.root / "monorel.toml").write_text(
        '[packages]\ncore = ["server-runtime"]\nruntimes = ["node"]\n'
        'adapters = ["express"]\ntrailing = ["serve"]\numbrella = ["remix"]\n',
        encoding="utf-8",
    )

    result = CliRunner().invoke(app, ["--workspace", str(small_workspace.root), "status"])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert "@remix-run/node" in result.output
