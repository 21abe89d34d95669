"""npm registry collaborator."""

from __future__ import annotations

from pathlib import Path

from monorel.core.result import Result
from monorel.platform.process import ProcessError, run_streaming


def publish_command(directory: Path, tag: str) -> list[str]:
    return ["npm", "publish", "--tag", tag, str(directory)]


class NpmRegistry:
    """Publishes built package directories with the npm CLI.

    npm output is streamed to the terminal; authentication is whatever the
    ambient npm configuration provides.
    """

    def __init__(self, cwd: Path) -> None:
        self.cwd = cwd

    def publish(self, directory: Path, tag: str) -> Result[None, ProcessError]:
        return run_streaming(publish_command(directory, tag), cwd=self.cwd)
