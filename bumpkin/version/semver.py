from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

from bumpkin.core.result import Err, Ok, Result

__all__ = [
    "Version",
    "VersionError",
    "compare",
    "parse_prerelease",
    "parse_version",
    "zero_version",
]


_NUM = r"(?:0|[1-9][0-9]*)"
# numeric prerelease identifiers may not have leading zeros; build identifiers may
_PRE_IDENT = rf"(?:{_NUM}|[0-9]*[A-Za-z-][0-9A-Za-z-]*)"
_BUILD_IDENT = r"[0-9A-Za-z-]+"
_VERSION_RE = re.compile(
    rf"^({_NUM})\.({_NUM})\.({_NUM})"
    rf"(?:-({_PRE_IDENT}(?:\.{_PRE_IDENT})*))?"
    rf"(?:\+({_BUILD_IDENT}(?:\.{_BUILD_IDENT})*))?$"
)


@dataclass(frozen=True, slots=True)
class VersionError:
    message: str


def parse_prerelease(prerelease: str) -> tuple[str, int] | None:
    """Split ``"<type>.<n>"`` into its parts, or None if it has another shape."""
    pre_type, sep, number = prerelease.partition(".")
    if not pre_type or not sep or not number.isdigit():
        return None
    return (pre_type, int(number))


def _compare_identifiers(a: str, b: str) -> int:
    # semver precedence: numeric < alphanumeric, numerics compared as ints
    a_num, b_num = a.isdigit(), b.isdigit()
    if a_num and b_num:
        x, y = int(a), int(b)
        return (x > y) - (x < y)
    if a_num != b_num:
        return -1 if a_num else 1
    return (a > b) - (a < b)


def _compare_prerelease(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return 1
    if not b:
        return -1
    a_parts, b_parts = a.split("."), b.split(".")
    for x, y in zip(a_parts, b_parts):
        c = _compare_identifiers(x, y)
        if c:
            return c
    return (len(a_parts) > len(b_parts)) - (len(a_parts) < len(b_parts))


@total_ordering
@dataclass(frozen=True, slots=True, eq=False)
class Version:
    """A semantic version. Build metadata is carried but never compared."""

    major: int
    minor: int
    patch: int
    prerelease: str = ""
    metadata: str = ""

    def __post_init__(self) -> None:
        if self.major < 0 or self.minor < 0 or self.patch < 0:
            raise ValueError(f"version components must be non-negative: {self._core()}")

    def _core(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __str__(self) -> str:
        s = self._core()
        if self.prerelease:
            s += f"-{self.prerelease}"
        if self.metadata:
            s += f"+{self.metadata}"
        return s

    def with_prefix(self, prefix: str) -> str:
        return f"{prefix}{self}"

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease != ""

    @property
    def prerelease_type(self) -> str | None:
        """``alpha`` for ``1.0.0-alpha.3``; None for releases and opaque suffixes."""
        parsed = parse_prerelease(self.prerelease) if self.prerelease else None
        return parsed[0] if parsed else None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare(self, other) == 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare(self, other) < 0

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.prerelease))


def compare(a: Version, b: Version) -> int:
    """Return -1, 0 or 1 following semantic versioning precedence."""
    ta, tb = (a.major, a.minor, a.patch), (b.major, b.minor, b.patch)
    if ta != tb:
        return -1 if ta < tb else 1
    return _compare_prerelease(a.prerelease, b.prerelease)


def parse_version(text: str, *, allow_v: bool = True) -> Result[Version, VersionError]:
    """Parse ``[v]MAJOR.MINOR.PATCH[-prerelease][+metadata]``.

    Callers that already removed a tag prefix pass ``allow_v=False`` so that
    ``vv1.0.0`` is not read as a version under prefix ``v``.
    """
    s = text.strip()
    if not s:
        return Err(VersionError("empty version string"))

    if allow_v:
        s = s.removeprefix("v")
    m = _VERSION_RE.match(s)
    if m is None:
        return Err(VersionError(f"invalid version {text!r}"))

    return Ok(
        Version(
            major=int(m.group(1)),
            minor=int(m.group(2)),
            patch=int(m.group(3)),
            prerelease=m.group(4) or "",
            metadata=m.group(5) or "",
        )
    )


def zero_version() -> Version:
    """The version assumed when a repository has no tags yet."""
    return Version(0, 0, 0)
