from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from bumpkin.core.config import DEFAULT_PREFIX, DEFAULT_REMOTE
from bumpkin.version import BumpKind, BumpRequest, Version


class ReleasePhase(Enum):
    COMPUTING_VERSION = "computing-version"
    PRE_TAG_HOOKS = "pre-tag-hooks"
    TAGGING = "tagging"
    POST_TAG_HOOKS = "post-tag-hooks"
    PUSHING = "pushing"
    POST_PUSH_HOOKS = "post-push-hooks"
    DONE = "done"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Everything one release attempt needs, fixed up front."""

    bump: BumpRequest
    prefix: str = DEFAULT_PREFIX
    remote: str = DEFAULT_REMOTE
    dry_run: bool = False
    push: bool = True
    run_hooks: bool = True
    pre_tag_hooks: tuple[str, ...] = ()
    post_tag_hooks: tuple[str, ...] = ()
    post_push_hooks: tuple[str, ...] = ()
    # Deadline per hook phase, in seconds.
    hook_timeout: float | None = None
    hook_cwd: Path | None = None


@dataclass(frozen=True, slots=True)
class VersionPlan:
    previous: Version
    new: Version
    tag_name: str
    # CONVENTIONAL is resolved to the recommended patch/minor/major here.
    applied: BumpKind


@dataclass(frozen=True, slots=True)
class ReleaseResult:
    previous_version: str
    new_version: str
    tag_name: str
    commit_hash: str
    tag_created: bool = False
    pushed: bool = False
    hooks_executed: int = 0
    post_push_warnings: tuple[str, ...] = ()

    @property
    def short_hash(self) -> str:
        return self.commit_hash[:7]
