"""Round-trip safe JSON document I/O.

Manifests and import maps are read into plain dicts, which keep key order,
and written back in the same shape ``jsonfile.writeFile(..., {spaces: 2})``
produces: two-space indentation, non-ASCII left as-is, one trailing newline.
A document that would serialize to its current bytes is not rewritten.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from monorel.core.result import Err, Ok, Result
from monorel.core.structured import StrDict, as_str_dict
from monorel.platform.files import write_text_if_changed

__all__ = [
    "JsonFileError",
    "NotFoundError",
    "ParseError",
    "ReadError",
    "WriteError",
    "describe_error",
    "dump_json",
    "read_json_object",
    "write_json_object",
]


@dataclass(frozen=True, slots=True)
class NotFoundError:
    path: Path


@dataclass(frozen=True, slots=True)
class ParseError:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class ReadError:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class WriteError:
    path: Path
    reason: str


JsonFileError = NotFoundError | ParseError | ReadError | WriteError


def describe_error(error: JsonFileError) -> str:
    match error:
        case NotFoundError(path=path):
            return f"file not found: {path}"
        case ParseError(path=path, reason=reason):
            return f"invalid JSON in {path}: {reason}"
        case ReadError(path=path, reason=reason):
            return f"failed to read {path}: {reason}"
        case WriteError(path=path, reason=reason):
            return f"failed to write {path}: {reason}"


def dump_json(data: StrDict) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def read_json_object(path: Path) -> Result[StrDict, JsonFileError]:
    """Read a JSON file whose root must be an object."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(NotFoundError(path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ReadError(path, str(e)))

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(ParseError(path, str(e)))

    data = as_str_dict(obj)
    if data is None:
        return Err(ParseError(path, "root must be a JSON object"))
    return Ok(data)


def write_json_object(path: Path, data: StrDict) -> Result[bool, JsonFileError]:
    """Serialize data over path; Ok(True) when the bytes changed."""
    try:
        return Ok(write_text_if_changed(path, dump_json(data)))
    except OSError as e:
        return Err(WriteError(path, str(e)))
