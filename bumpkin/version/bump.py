"""Version bump rules.

    patch      1.2.3         -> 1.2.4
    minor      1.2.3         -> 1.3.0
    major      1.2.3         -> 2.0.0
    alpha      1.2.3         -> 1.2.4-alpha.0
    alpha      1.2.4-alpha.0 -> 1.2.4-alpha.1
    beta       1.2.4-alpha.1 -> 1.2.4-beta.0
    release    1.2.4-rc.2    -> 1.2.4

``custom`` and ``conventional`` are resolved by the caller (a literal target,
or the commit classifier's recommendation) and leave the version untouched
here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from bumpkin.core.result import Err, Ok, Result

from .semver import Version, VersionError, parse_prerelease

__all__ = ["BumpKind", "BumpRequest", "bump", "bump_prerelease", "parse_bump_kind"]


class BumpKind(Enum):
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"
    CUSTOM = "custom"
    CONVENTIONAL = "conventional"
    PRERELEASE_ALPHA = "prerelease-alpha"
    PRERELEASE_BETA = "prerelease-beta"
    PRERELEASE_RC = "prerelease-rc"
    RELEASE = "release"

    def __str__(self) -> str:
        return self.value

    @property
    def prerelease_type(self) -> str | None:
        return _PRERELEASE_TYPES.get(self)


_PRERELEASE_TYPES = {
    BumpKind.PRERELEASE_ALPHA: "alpha",
    BumpKind.PRERELEASE_BETA: "beta",
    BumpKind.PRERELEASE_RC: "rc",
}


@dataclass(frozen=True, slots=True)
class BumpRequest:
    """What the user asked for. ``custom_version`` is only read for CUSTOM."""

    kind: BumpKind
    custom_version: str | None = None


def parse_bump_kind(text: str) -> Result[BumpKind, VersionError]:
    try:
        return Ok(BumpKind(text.strip().lower()))
    except ValueError:
        return Err(VersionError(f"unknown bump type: {text!r}"))


def bump_prerelease(version: Version, pre_type: str) -> Version:
    """Move to (or along) the ``pre_type`` prerelease track."""
    if not version.prerelease:
        return Version(version.major, version.minor, version.patch + 1, f"{pre_type}.0")

    parsed = parse_prerelease(version.prerelease)
    if parsed is not None and parsed[0] == pre_type:
        return Version(version.major, version.minor, version.patch, f"{pre_type}.{parsed[1] + 1}")

    # Switching track (or replacing an opaque suffix) restarts the counter
    # on the same numeric triple.
    return Version(version.major, version.minor, version.patch, f"{pre_type}.0")


def bump(version: Version, kind: BumpKind) -> Version:
    match kind:
        case BumpKind.PATCH:
            return Version(version.major, version.minor, version.patch + 1)
        case BumpKind.MINOR:
            return Version(version.major, version.minor + 1, 0)
        case BumpKind.MAJOR:
            return Version(version.major + 1, 0, 0)
        case BumpKind.RELEASE:
            return Version(version.major, version.minor, version.patch)
        case BumpKind.PRERELEASE_ALPHA | BumpKind.PRERELEASE_BETA | BumpKind.PRERELEASE_RC:
            return bump_prerelease(version, _PRERELEASE_TYPES[kind])
        case BumpKind.CUSTOM | BumpKind.CONVENTIONAL:
            return version
