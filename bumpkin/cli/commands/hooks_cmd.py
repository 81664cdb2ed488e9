"""``bumpkin hooks PHASE`` - run one phase's configured hooks with live output."""

from __future__ import annotations

from pathlib import Path

import typer

from bumpkin.cli.context import CLIContext, build_context
from bumpkin.core.errors import ExitCode
from bumpkin.core.result import Err
from bumpkin.hooks import (
    CancelToken,
    HookContext,
    HookPhase,
    HookResult,
    HookStream,
    OutputBuffer,
    create_hooks,
    failure_message,
    run_streaming,
)
from bumpkin.output.console import ConsoleProtocol, Style
from bumpkin.version import zero_version

from ._helpers import fail

DEFAULT_BUFFER_LINES = 1000


def _phase_commands(ctx: CLIContext, phase: HookPhase) -> tuple[str, ...]:
    hooks = ctx.config.hooks
    match phase:
        case HookPhase.PRE_TAG:
            return hooks.pre_tag
        case HookPhase.POST_TAG:
            return hooks.post_tag
        case HookPhase.POST_PUSH:
            return hooks.post_push


def _current_context(ctx: CLIContext, prefix: str, *, dry_run: bool) -> HookContext:
    """Hook environment describing the latest tag, as if it was just released."""
    latest = ctx.repo.latest_tag(prefix)
    if isinstance(latest, Err):
        fail(ctx.console, f"failed to get latest tag: {latest.error.message}")
    tag = latest.value
    version = tag.version if tag is not None and tag.version is not None else zero_version()

    head = ctx.repo.head()
    if isinstance(head, Err):
        fail(ctx.console, f"failed to get HEAD: {head.error.message}")

    return HookContext(
        version=str(version),
        previous_version=str(version),
        tag_name=tag.name if tag is not None else version.with_prefix(prefix),
        prefix=prefix,
        remote=ctx.config.remote,
        commit_hash=head.value,
        dry_run=dry_run,
    )


def _drain(
    stream: HookStream, buffer: OutputBuffer, console: ConsoleProtocol, *, echo: bool
) -> None:
    for line in stream.lines():
        buffer.add_line(line)
        if echo:
            console.output_line(line.text, stderr=line.is_stderr)


def _follow(
    stream: HookStream,
    token: CancelToken,
    buffer: OutputBuffer,
    console: ConsoleProtocol,
    *,
    echo: bool,
) -> HookResult:
    """Echo lines until the stream closes; Ctrl-C cancels the hook."""
    try:
        while not stream.closed:
            line = stream.get_line(timeout=0.1)
            if line is None:
                continue
            buffer.add_line(line)
            if echo:
                console.output_line(line.text, stderr=line.is_stderr)
    except KeyboardInterrupt:
        token.cancel()
        _drain(stream, buffer, console, echo=echo)
    return stream.result()


def hooks(
    phase: str = typer.Argument(..., help="Hook phase: pre-tag, post-tag or post-push"),
    prefix: str | None = typer.Option(None, "--prefix", "-p", help="Tag prefix"),
    config: Path | None = typer.Option(None, "--config", "-C", help="Config file path"),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-d", help="Export BUMPKIN_DRY_RUN=true to the hooks"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Deadline in seconds for the whole phase"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only show output of a failing hook"
    ),
    max_lines: int = typer.Option(
        DEFAULT_BUFFER_LINES, "--lines", help="Lines of output kept per hook"
    ),
) -> None:
    """Run the hooks configured for PHASE, streaming their output."""
    ctx = build_context(config)
    console = ctx.console

    try:
        hook_phase = HookPhase(phase)
    except ValueError:
        fail(
            console,
            f"unknown hook phase: {phase}",
            ExitCode.INVALID_ARGS,
            hint="use pre-tag, post-tag or post-push",
        )
    if max_lines < 0:
        fail(console, "--lines must be >= 0", ExitCode.INVALID_ARGS)

    commands = _phase_commands(ctx, hook_phase)
    if not commands:
        console.info(f"no {hook_phase} hooks configured")
        return

    context = _current_context(
        ctx, prefix if prefix is not None else ctx.config.prefix, dry_run=dry_run
    )
    token = CancelToken(timeout=timeout)
    failures = 0

    for hook in create_hooks(commands, hook_phase):
        console.print(f"$ {hook.command}", Style.BOLD)
        buffer = OutputBuffer(max_lines)
        stream = run_streaming(hook, context, cancel=token, cwd=ctx.repo.path)
        result = _follow(stream, token, buffer, console, echo=not quiet)

        if result.succeeded:
            console.success(f"{hook.command} ({result.duration:.1f}s)")
            continue

        assert result.error is not None
        if quiet and buffer.line_count():
            console.print(buffer.render(), Style.DIM)
        if result.error.kind == "cancelled":
            fail(console, "hook cancelled", ExitCode.USER_CANCELLED)

        message = failure_message(hook, result.error)
        if hook_phase is HookPhase.POST_PUSH:
            console.warning(message)
            failures += 1
            continue
        fail(console, message, ExitCode.HOOK_FAILED)

    if failures:
        console.warning(f"{failures} {hook_phase} hook(s) failed")
