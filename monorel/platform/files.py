"""Filesystem helpers."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

__all__ = ["atomic_write_text", "write_text_if_changed"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace.

    An existing file keeps its permission bits.
    """
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        if path.exists():
            os.chmod(tmp_path, stat.S_IMODE(path.stat().st_mode))
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def write_text_if_changed(path: Path, content: str, *, encoding: str = "utf-8") -> bool:
    """Atomically replace path with content unless it already holds it.

    Returns True when the file was written.

    Raises:
        OSError: Reading or writing failed.
    """
    try:
        current = path.read_text(encoding=encoding)
    except FileNotFoundError:
        current = None
    if current == content:
        return False
    atomic_write_text(path, content, encoding=encoding)
    return True
