"""Batch execution of hook sequences.

Each hook runs through the platform shell with the process environment
plus the release variables from ``HookContext``. Output is not captured:
it goes straight to the terminal while the hook runs.

Two failure policies:

- ``FAIL_CLOSED``: stop at the first failing hook (pre-tag, post-tag).
- ``FAIL_OPEN``: run every hook and collect one warning per failure
  (post-push).
"""

from __future__ import annotations

import os
import time
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from bumpkin.core.result import Err
from bumpkin.platform.process import ProcessError, run_shell

from .types import Hook, HookContext, HookError, HookResult

__all__ = [
    "FailurePolicy",
    "HookFailure",
    "SequenceOutcome",
    "build_env",
    "failure_message",
    "hook_error_from_process",
    "run_hook",
    "run_sequence",
]


class FailurePolicy(Enum):
    FAIL_CLOSED = "fail-closed"
    FAIL_OPEN = "fail-open"


def failure_message(hook: Hook, cause: HookError) -> str:
    return f"hook '{hook.command}' failed: {cause}"


@dataclass(frozen=True, slots=True)
class HookFailure:
    """The hook that stopped a fail-closed sequence, and why."""

    hook: Hook
    cause: HookError

    @property
    def message(self) -> str:
        return failure_message(self.hook, self.cause)

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class SequenceOutcome:
    results: tuple[HookResult, ...] = ()
    warnings: tuple[str, ...] = ()
    failure: HookFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def executed(self) -> int:
        return len(self.results)


def build_env(context: HookContext | None) -> dict[str, str]:
    env = dict(os.environ)
    if context is not None:
        env.update(context.to_env())
    return env


def hook_error_from_process(error: ProcessError) -> HookError:
    if error.timed_out:
        return HookError(kind="timeout", message=error.stderr or "timed out")
    if error.returncode < 0 and error.stderr:
        return HookError(kind="spawn_failed", message=f"failed to start hook: {error.stderr}")
    return HookError(
        kind="exit",
        message=f"exit status {error.returncode}",
        returncode=error.returncode,
    )


def run_hook(
    hook: Hook,
    context: HookContext | None,
    *,
    timeout: float | None = None,
    cwd: Path | None = None,
) -> HookResult:
    """Run one hook to completion. Empty commands succeed without running."""
    if hook.is_empty:
        return HookResult(hook=hook, succeeded=True)

    start = time.monotonic()
    result = run_shell(hook.command, env=build_env(context), cwd=cwd, timeout=timeout)
    duration = time.monotonic() - start

    if isinstance(result, Err):
        return HookResult(
            hook=hook,
            succeeded=False,
            error=hook_error_from_process(result.error),
            duration=duration,
        )
    return HookResult(hook=hook, succeeded=True, duration=duration)


def run_sequence(
    hooks: Sequence[Hook],
    context: HookContext | None,
    *,
    policy: FailurePolicy,
    timeout: float | None = None,
    cwd: Path | None = None,
) -> SequenceOutcome:
    """Run hooks in order under ``policy``.

    ``timeout`` bounds the whole sequence; each command gets whatever time
    is left. A command started with no time left fails as timed out.
    """
    deadline = time.monotonic() + timeout if timeout is not None else None
    results: list[HookResult] = []
    warnings: list[str] = []

    for hook in hooks:
        remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
        result = run_hook(hook, context, timeout=remaining, cwd=cwd)
        results.append(result)

        if result.succeeded or result.error is None:
            continue

        if policy is FailurePolicy.FAIL_CLOSED:
            return SequenceOutcome(
                results=tuple(results),
                failure=HookFailure(hook=hook, cause=result.error),
            )
        warnings.append(failure_message(hook, result.error))

    return SequenceOutcome(results=tuple(results), warnings=tuple(warnings))
