"""Failure variants of a release attempt.

``execute`` returns ``Err(ReleaseError)`` when nothing irreversible happened
yet (or a collaborator failed outright), and ``Err(PartialSuccess)`` when the
tag already exists but a later step failed. Callers tell them apart with
``match``:

    match execute(request, repo=repo, console=console):
        case Ok(result):
            ...
        case Err(PartialSuccess(result=partial)):
            ...  # tag exists; do not suggest re-running from scratch
        case Err(ReleaseError() as error):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from bumpkin.hooks import HookFailure, HookPhase

from .model import ReleaseResult

ReleaseErrorKind = Literal[
    "invalid_version",
    "invalid_request",
    "tag_lookup_failed",
    "commits_failed",
    "head_failed",
    "tag_exists",
    "tag_failed",
    "remote_failed",
    "push_failed",
    "hook_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


@dataclass(frozen=True, slots=True)
class PartialSuccess:
    """The tag was created, then ``phase`` failed. Tags are never rolled back."""

    phase: HookPhase
    cause: HookFailure
    result: ReleaseResult

    @property
    def message(self) -> str:
        return f"{self.phase} hook failed (tag already created): {self.cause.message}"

    def pretty(self) -> str:
        return self.message


type ReleaseFailure = ReleaseError | PartialSuccess


def describe_failure(failure: ReleaseFailure) -> str:
    """User-facing description of either failure variant."""
    match failure:
        case PartialSuccess(result=result):
            return (
                f"tag {result.tag_name} was created, but {failure.message}; "
                "fix the hook and run it manually instead of re-running the release"
            )
        case ReleaseError():
            return failure.pretty()
