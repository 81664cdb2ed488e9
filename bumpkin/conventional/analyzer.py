from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from bumpkin.version.bump import BumpKind

from .parser import classify

__all__ = ["AnalysisResult", "analyze", "analyze_commits"]

# Types that add user-visible value and warrant a minor bump.
_MINOR_TYPES = frozenset({"feat", "perf"})


class _HasMessage(Protocol):
    @property
    def message(self) -> str: ...


def _empty_counts() -> dict[str, int]:
    return {}


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    recommended: BumpKind = BumpKind.PATCH
    type_counts: dict[str, int] = field(default_factory=_empty_counts)
    breaking_count: int = 0
    total: int = 0

    def summary(self) -> str:
        """One-line description, e.g. ``3 commits (feat: 2, fix: 1), 0 breaking``."""
        counts = ", ".join(f"{t}: {n}" for t, n in sorted(self.type_counts.items()))
        noun = "commit" if self.total == 1 else "commits"
        detail = f" ({counts})" if counts else ""
        return f"{self.total} {noun}{detail}, {self.breaking_count} breaking"


def analyze(messages: Iterable[str]) -> AnalysisResult:
    """Classify every message and recommend a bump (major > minor > patch)."""
    counts: Counter[str] = Counter()
    breaking = 0
    total = 0
    has_minor = False

    for message in messages:
        total += 1
        commit = classify(message)
        if commit.is_conventional:
            counts[commit.type] += 1
        if commit.breaking:
            breaking += 1
        if commit.type in _MINOR_TYPES:
            has_minor = True

    if breaking:
        recommended = BumpKind.MAJOR
    elif has_minor:
        recommended = BumpKind.MINOR
    else:
        recommended = BumpKind.PATCH

    return AnalysisResult(
        recommended=recommended,
        type_counts=dict(counts),
        breaking_count=breaking,
        total=total,
    )


def analyze_commits(commits: Sequence[_HasMessage]) -> AnalysisResult:
    return analyze(c.message for c in commits)
