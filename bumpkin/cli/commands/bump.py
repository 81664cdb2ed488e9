"""``bumpkin bump`` - compute the next version, tag it, push it, run hooks."""

from __future__ import annotations

import json
from pathlib import Path

import typer

from bumpkin.cli.context import CLIContext, build_context
from bumpkin.core.errors import ExitCode
from bumpkin.core.result import Err, Ok
from bumpkin.output.console import ConsoleProtocol, Style
from bumpkin.release import (
    PartialSuccess,
    ReleaseRequest,
    ReleaseResult,
    describe_failure,
    execute,
    plan_version,
)
from bumpkin.version import BumpKind, BumpRequest

from ._helpers import fail, failure_exit_code


def _select_bump(
    *,
    patch: bool,
    minor: bool,
    major: bool,
    alpha: bool,
    beta: bool,
    rc: bool,
    release: bool,
    conventional: bool,
    set_version: str | None,
) -> BumpRequest | None:
    """The single requested bump, or None when zero or several were given."""
    flags = [
        (patch, BumpKind.PATCH),
        (minor, BumpKind.MINOR),
        (major, BumpKind.MAJOR),
        (alpha, BumpKind.PRERELEASE_ALPHA),
        (beta, BumpKind.PRERELEASE_BETA),
        (rc, BumpKind.PRERELEASE_RC),
        (release, BumpKind.RELEASE),
        (conventional, BumpKind.CONVENTIONAL),
        (set_version is not None, BumpKind.CUSTOM),
    ]
    selected = [kind for enabled, kind in flags if enabled]
    if len(selected) != 1:
        return None
    return BumpRequest(kind=selected[0], custom_version=set_version)


def _result_payload(result: ReleaseResult | None, *, dry_run: bool, error: str | None) -> str:
    payload: dict[str, object] = {"success": error is None, "dry_run": dry_run}
    if result is not None:
        payload.update(
            previous_version=result.previous_version,
            new_version=result.new_version,
            tag_name=result.tag_name,
            commit_hash=result.commit_hash,
            tag_created=result.tag_created,
            pushed=result.pushed,
            hooks_executed=result.hooks_executed,
            post_push_warnings=list(result.post_push_warnings),
        )
    if error is not None:
        payload["error"] = error
    return json.dumps(payload, indent=2)


def _print_result(
    console: ConsoleProtocol, result: ReleaseResult, *, dry_run: bool, no_push: bool
) -> None:
    if dry_run:
        console.print("[DRY RUN]", Style.BOLD)
    console.print(f"Version: {result.previous_version} → {result.new_version}")
    console.print(f"Tag: {result.tag_name}")
    console.print(f"Commit: {result.short_hash}")
    console.print(f"Tag created: {'yes' if result.tag_created else 'no (dry run)'}")

    if result.pushed:
        pushed = "yes"
    elif no_push:
        pushed = "no (--no-push)"
    elif dry_run:
        pushed = "no (dry run)"
    else:
        pushed = "no"
    console.print(f"Pushed: {pushed}")

    if result.post_push_warnings:
        console.newline()
        console.print("Post-push hook warnings:", Style.WARNING)
        for warning in result.post_push_warnings:
            console.print(f"  - {warning}", Style.WARNING)


def _build_request(
    ctx: CLIContext,
    bump_request: BumpRequest,
    *,
    prefix: str | None,
    remote: str | None,
    dry_run: bool,
    no_push: bool,
    no_hooks: bool,
) -> ReleaseRequest:
    hooks = ctx.config.hooks
    return ReleaseRequest(
        bump=bump_request,
        prefix=prefix if prefix is not None else ctx.config.prefix,
        remote=remote or ctx.config.remote,
        dry_run=dry_run,
        push=not no_push,
        run_hooks=not no_hooks,
        pre_tag_hooks=hooks.pre_tag,
        post_tag_hooks=hooks.post_tag,
        post_push_hooks=hooks.post_push,
        hook_cwd=ctx.repo.path,
    )


def bump(
    patch: bool = typer.Option(False, "--patch", help="Bump patch version (x.y.Z)"),
    minor: bool = typer.Option(False, "--minor", help="Bump minor version (x.Y.0)"),
    major: bool = typer.Option(False, "--major", help="Bump major version (X.0.0)"),
    alpha: bool = typer.Option(False, "--alpha", help="Bump to alpha prerelease"),
    beta: bool = typer.Option(False, "--beta", help="Bump to beta prerelease"),
    rc: bool = typer.Option(False, "--rc", help="Bump to release candidate"),
    release: bool = typer.Option(False, "--release", help="Promote prerelease to release"),
    conventional: bool = typer.Option(
        False, "--conventional", "-c", help="Derive the bump from conventional commits"
    ),
    set_version: str | None = typer.Option(None, "--set-version", help="Set a specific version"),
    prefix: str | None = typer.Option(None, "--prefix", "-p", help="Tag prefix"),
    remote: str | None = typer.Option(None, "--remote", "-r", help="Git remote name"),
    config: Path | None = typer.Option(None, "--config", "-C", help="Config file path"),
    dry_run: bool = typer.Option(False, "--dry-run", "-d", help="Preview without changes"),
    no_push: bool = typer.Option(False, "--no-push", help="Create the tag but don't push"),
    no_hooks: bool = typer.Option(False, "--no-hooks", help="Skip hook execution"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    as_json: bool = typer.Option(False, "--json", help="Output result as JSON"),
) -> None:
    """Tag HEAD with the next semantic version."""
    ctx = build_context(config, stderr=as_json)
    console = ctx.console

    bump_request = _select_bump(
        patch=patch,
        minor=minor,
        major=major,
        alpha=alpha,
        beta=beta,
        rc=rc,
        release=release,
        conventional=conventional,
        set_version=set_version,
    )
    if bump_request is None:
        fail(
            console,
            "exactly one bump type flag must be specified",
            ExitCode.INVALID_ARGS,
            hint="e.g. --patch, --minor, --alpha or --set-version 1.2.3",
        )

    request = _build_request(
        ctx,
        bump_request,
        prefix=prefix,
        remote=remote,
        dry_run=dry_run,
        no_push=no_push,
        no_hooks=no_hooks,
    )

    if not yes and not dry_run:
        planned = plan_version(request, repo=ctx.repo)
        if isinstance(planned, Err):
            fail(console, planned.error.message, failure_exit_code(planned.error))
        plan = planned.value
        console.print(f"Will bump version: {plan.previous} → {plan.new}")
        fail(
            console,
            "confirmation required",
            ExitCode.INVALID_ARGS,
            hint="use --yes to proceed, or --dry-run to preview",
        )

    match execute(request, repo=ctx.repo, console=console):
        case Ok(result):
            if as_json:
                typer.echo(_result_payload(result, dry_run=dry_run, error=None))
            else:
                _print_result(console, result, dry_run=dry_run, no_push=no_push)
        case Err(failure):
            partial = failure.result if isinstance(failure, PartialSuccess) else None
            if as_json:
                typer.echo(_result_payload(partial, dry_run=dry_run, error=failure.pretty()))
                raise typer.Exit(code=int(failure_exit_code(failure)))
            hint = failure.hint if not isinstance(failure, PartialSuccess) else None
            fail(console, describe_failure(failure), failure_exit_code(failure), hint=hint)
