from __future__ import annotations

from pathlib import Path

import pytest

from monorel.core.workspace import Workspace
from monorel.test.fakes import small_config, write_json


@pytest.fixture
def small_workspace(tmp_path: Path) -> Workspace:
    """node <- express <- serve, plus server-runtime and the remix umbrella."""
    packages = tmp_path / "packages"
    write_json(
        packages / "remix-server-runtime" / "package.json",
        {"name": "@remix-run/server-runtime", "version": "1.1.0", "license": "MIT"},
    )
    write_json(
        packages / "remix-node" / "package.json",
        {
            "name": "@remix-run/node",
            "version": "1.1.0",
            "dependencies": {"@remix-run/server-runtime": "^1.1.0", "cookie": "^0.4.1"},
        },
    )
    write_json(
        packages / "remix-express" / "package.json",
        {
            "name": "@remix-run/express",
            "version": "1.1.0",
            "dependencies": {"@remix-run/node": "^1.1.0"},
            "peerDependencies": {"express": "^4.17.1"},
        },
    )
    write_json(
        packages / "remix-serve" / "package.json",
        {
            "name": "@remix-run/serve",
            "version": "1.1.0",
            "dependencies": {"@remix-run/express": "^1.1.0", "express": "^4.17.1"},
            "devDependencies": {"@remix-run/node": "~1.1.0"},
        },
    )
    write_json(
        packages / "remix" / "package.json",
        {"name": "remix", "version": "1.1.0", "dependencies": {"@remix-run/serve": "1.1.0"}},
    )
    return Workspace(root=tmp_path, config=small_config())
