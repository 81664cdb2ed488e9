"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer

from bumpkin.core.errors import ExitCode
from bumpkin.output.console import ConsoleProtocol, Style
from bumpkin.release import PartialSuccess, ReleaseError, ReleaseFailure


def fail(
    console: ConsoleProtocol,
    message: str,
    code: ExitCode = ExitCode.GENERAL_ERROR,
    *,
    hint: str | None = None,
) -> NoReturn:
    """Print an error (and optional hint) and exit with ``code``."""
    console.error(message)
    if hint:
        console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(code))


def failure_exit_code(failure: ReleaseFailure) -> ExitCode:
    match failure:
        case PartialSuccess():
            return ExitCode.HOOK_FAILED
        case ReleaseError(kind="hook_failed"):
            return ExitCode.HOOK_FAILED
        case ReleaseError(kind="invalid_version" | "invalid_request"):
            return ExitCode.INVALID_ARGS
        case ReleaseError():
            return ExitCode.GENERAL_ERROR
