"""Conventional Commits parsing.

Header shape: ``type(scope)!: description``. Only the standard types are
recognized; anything else (including a well-formed header with an unknown
type) is classified as ``"other"``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = ["OTHER", "STANDARD_TYPES", "ClassifiedCommit", "classify", "is_footer_line"]

OTHER = "other"

STANDARD_TYPES = frozenset(
    {
        "feat",
        "fix",
        "docs",
        "style",
        "refactor",
        "perf",
        "test",
        "build",
        "ci",
        "chore",
        "revert",
    }
)

_HEADER_RE = re.compile(r"^([a-zA-Z]+)(?:\(([^)]+)\))?(!)?\s*:\s*(.+)$")
_BREAKING_FOOTER_RE = re.compile(r"^BREAKING[ -]CHANGE\s*:", re.MULTILINE)
_FOOTER_RE = re.compile(r"^[A-Za-z-]+\s*[:#]\s*")


@dataclass(frozen=True, slots=True)
class ClassifiedCommit:
    type: str = OTHER
    scope: str | None = None
    breaking: bool = False
    description: str = ""
    body: str = ""

    @property
    def is_conventional(self) -> bool:
        return self.type != OTHER


def is_footer_line(line: str) -> bool:
    """True for ``Token: value``, ``Token #value`` and breaking-change footers."""
    if line.startswith(("BREAKING CHANGE:", "BREAKING-CHANGE:")):
        return True
    return _FOOTER_RE.match(line) is not None


def _extract_body(content: str) -> str:
    body: list[str] = []
    for line in content.split("\n"):
        if is_footer_line(line.strip()):
            break
        if line.strip():
            body.append(line)
    return "\n".join(body).strip()


def classify(message: str) -> ClassifiedCommit:
    lines = message.split("\n")
    header = lines[0].strip()

    commit_type = OTHER
    scope: str | None = None
    breaking = False
    description = ""

    m = _HEADER_RE.match(header)
    if m is not None and m.group(1).lower() in STANDARD_TYPES:
        commit_type = m.group(1).lower()
        scope = m.group(2)
        breaking = m.group(3) == "!"
        description = m.group(4).strip()

    body = ""
    if len(lines) > 1:
        rest = "\n".join(lines[1:]).strip()
        if _BREAKING_FOOTER_RE.search(rest):
            breaking = True
        body = _extract_body(rest)

    return ClassifiedCommit(
        type=commit_type,
        scope=scope,
        breaking=breaking,
        description=description,
        body=body,
    )
