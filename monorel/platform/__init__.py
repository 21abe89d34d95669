"""Platform abstraction layer: processes and files."""

from .files import atomic_write_text, write_text_if_changed
from .process import ProcessError, run, run_streaming

__all__ = [
    # files
    "atomic_write_text",
    "write_text_if_changed",
    # process
    "ProcessError",
    "run",
    "run_streaming",
]
