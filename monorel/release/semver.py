from __future__ import annotations

import re
from dataclasses import dataclass

from monorel.core.result import Err, Ok, Result
from monorel.release.errors import ReleaseError

_IDENT = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    rf"(?:-({_IDENT}(?:\.{_IDENT})*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

LATEST_CHANNEL = "latest"
# Checked in order; a pre-release id containing the keyword maps to it.
KEYWORD_CHANNELS = ("nightly", "experimental")


@dataclass(frozen=True, slots=True)
class Version:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str | None = None

    def __str__(self) -> str:
        out = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            out += "-" + ".".join(self.prerelease)
        if self.build:
            out += "+" + self.build
        return out

    def to_tag(self) -> str:
        return tag_name(str(self))


def parse_version(text: str) -> Version | None:
    m = _SEMVER_RE.match(text.strip())
    if m is None:
        return None
    pre = tuple(m.group(4).split(".")) if m.group(4) else ()
    return Version(int(m.group(1)), int(m.group(2)), int(m.group(3)), pre, m.group(5))


def require_version(text: str) -> Result[Version, ReleaseError]:
    version = parse_version(text)
    if version is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"invalid version: {text!r}",
                hint="Expected MAJOR.MINOR.PATCH[-PRERELEASE], e.g. 1.2.0 or 1.2.0-nightly.3",
            )
        )
    return Ok(version)


def tag_name(version: str) -> str:
    return f"v{version}"


def version_from_tag(tag: str) -> Version | None:
    """Parse a release tag ``v<semver>``; None for any other tag."""
    if not tag.startswith("v"):
        return None
    return parse_version(tag[1:])


def channel_for(version: Version) -> str:
    """Distribution channel (npm dist-tag) for a version.

    - no pre-release: "latest"
    - first pre-release id containing "nightly" / "experimental": that keyword
    - otherwise the first pre-release id itself ("beta" for 2.0.0-beta.1)
    """
    if not version.prerelease:
        return LATEST_CHANNEL
    ident = version.prerelease[0]
    for keyword in KEYWORD_CHANNELS:
        if keyword in ident:
            return keyword
    return ident


def distribution_channel(version: str) -> Result[str, ReleaseError]:
    parsed = require_version(version)
    if isinstance(parsed, Err):
        return parsed
    return Ok(channel_for(parsed.value))
