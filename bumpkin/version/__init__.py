"""Semantic version model and bump rules."""

from .bump import BumpKind, BumpRequest, bump, bump_prerelease, parse_bump_kind
from .semver import (
    Version,
    VersionError,
    compare,
    parse_prerelease,
    parse_version,
    zero_version,
)

__all__ = [
    "BumpKind",
    "BumpRequest",
    "Version",
    "VersionError",
    "bump",
    "bump_prerelease",
    "compare",
    "parse_bump_kind",
    "parse_prerelease",
    "parse_version",
    "zero_version",
]
