from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal

__all__ = [
    "Hook",
    "HookContext",
    "HookError",
    "HookPhase",
    "HookResult",
    "OutputLine",
    "Stream",
    "create_hooks",
]


class HookPhase(Enum):
    PRE_TAG = "pre-tag"
    POST_TAG = "post-tag"
    POST_PUSH = "post-push"

    def __str__(self) -> str:
        return self.value


class Stream(Enum):
    OUT = "out"
    ERR = "err"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Hook:
    command: str
    phase: HookPhase

    @property
    def is_empty(self) -> bool:
        return not self.command.strip()


def create_hooks(commands: Iterable[str], phase: HookPhase) -> list[Hook]:
    return [Hook(command=c, phase=phase) for c in commands]


@dataclass(frozen=True, slots=True)
class HookContext:
    """Release facts exposed to hook commands as environment variables."""

    version: str
    previous_version: str
    tag_name: str
    prefix: str
    remote: str
    commit_hash: str
    dry_run: bool = False

    def to_env(self) -> dict[str, str]:
        return {
            "BUMPKIN_VERSION": self.version,
            "BUMPKIN_PREVIOUS_VERSION": self.previous_version,
            "BUMPKIN_TAG": self.tag_name,
            "BUMPKIN_PREFIX": self.prefix,
            "BUMPKIN_REMOTE": self.remote,
            "BUMPKIN_COMMIT": self.commit_hash,
            "BUMPKIN_DRY_RUN": "true" if self.dry_run else "false",
            "VERSION": self.version,
            "TAG": self.tag_name,
        }


@dataclass(frozen=True, slots=True)
class HookError:
    """Why a hook did not succeed.

    ``exit`` is a normal non-zero exit; ``timeout`` and ``cancelled`` mean the
    command was killed; ``spawn_failed`` means it never started.
    """

    kind: Literal["exit", "timeout", "cancelled", "spawn_failed"]
    message: str
    returncode: int = -1

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class HookResult:
    hook: Hook
    succeeded: bool
    error: HookError | None = None
    duration: float = 0.0
    output: str | None = None


@dataclass(frozen=True, slots=True)
class OutputLine:
    text: str
    stream: Stream
    timestamp: datetime

    @property
    def is_stderr(self) -> bool:
        return self.stream is Stream.ERR
