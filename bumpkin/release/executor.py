"""Release orchestration.

Phases run strictly in order:

    computing-version -> pre-tag-hooks -> tagging -> post-tag-hooks
        -> pushing -> post-push-hooks -> done

Failure policy per phase:

- computing-version, pre-tag-hooks, tagging: plain ``ReleaseError``; no
  tag exists yet (or tag creation itself failed).
- post-tag-hooks: ``PartialSuccess``; the tag exists and is not rolled back.
- pushing: collaborator errors are fatal; a missing remote only means
  "not pushed".
- post-push-hooks: fail-open; failures become ``post_push_warnings``.
"""

from __future__ import annotations

from dataclasses import replace
from functools import partial

from bumpkin.conventional import analyze_commits
from bumpkin.core.result import Err, Ok, Result
from bumpkin.git import GitError, GitRepository, Tag
from bumpkin.hooks import (
    FailurePolicy,
    HookContext,
    HookPhase,
    SequenceOutcome,
    create_hooks,
    run_sequence,
)
from bumpkin.output.console import ConsoleProtocol, Style
from bumpkin.version import BumpKind, Version, bump, parse_version, zero_version

from .errors import PartialSuccess, ReleaseError, ReleaseFailure
from .model import ReleasePhase, ReleaseRequest, ReleaseResult, VersionPlan

__all__ = ["execute", "plan_version", "resolve_previous"]


def _enter(console: ConsoleProtocol, phase: ReleasePhase) -> None:
    console.print(f"{phase}...", Style.DIM)


def resolve_previous(
    repo: GitRepository, prefix: str
) -> Result[tuple[Tag | None, Version], ReleaseError]:
    """Latest matching tag and its version (``0.0.0`` when there is none)."""
    latest = repo.latest_tag(prefix)
    if isinstance(latest, Err):
        return Err(
            ReleaseError(
                kind="tag_lookup_failed",
                message=f"failed to get latest tag: {latest.error.message}",
            )
        )
    tag = latest.value
    if tag is None or tag.version is None:
        return Ok((tag, zero_version()))
    return Ok((tag, tag.version))


def _custom_version(request: ReleaseRequest) -> Result[Version, ReleaseError]:
    literal = (request.bump.custom_version or "").strip()
    if not literal:
        return Err(
            ReleaseError(
                kind="invalid_request",
                message="custom version not specified",
                hint="pass the target version, e.g. --set-version 2.0.0",
            )
        )

    parsed = parse_version(literal.removeprefix(request.prefix) if request.prefix else literal)
    if isinstance(parsed, Err):
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"invalid custom version: {parsed.error.message}",
            )
        )
    return Ok(parsed.value)


def _recommended_kind(repo: GitRepository, tag: Tag | None) -> Result[BumpKind, ReleaseError]:
    commits = repo.commits_since(tag.name) if tag is not None else repo.all_commits()
    return commits.map(lambda found: analyze_commits(found).recommended).map_err(
        lambda e: ReleaseError(
            kind="commits_failed", message=f"failed to read commits: {e.message}"
        )
    )


def plan_version(
    request: ReleaseRequest, *, repo: GitRepository
) -> Result[VersionPlan, ReleaseError]:
    """Compute the previous version, the next version and the tag name.

    Has no side effects; dry runs and confirmation prompts use it directly.
    """
    resolved = resolve_previous(repo, request.prefix)
    if isinstance(resolved, Err):
        return resolved
    tag, previous = resolved.value

    kind = request.bump.kind
    match kind:
        case BumpKind.CUSTOM:
            custom = _custom_version(request)
            if isinstance(custom, Err):
                return custom
            new = custom.value
        case BumpKind.CONVENTIONAL:
            recommended = _recommended_kind(repo, tag)
            if isinstance(recommended, Err):
                return recommended
            kind = recommended.value
            new = bump(previous, kind)
        case _:
            new = bump(previous, kind)

    return Ok(
        VersionPlan(
            previous=previous,
            new=new,
            tag_name=new.with_prefix(request.prefix),
            applied=kind,
        )
    )


def _run_phase(
    request: ReleaseRequest,
    commands: tuple[str, ...],
    phase: HookPhase,
    context: HookContext,
    policy: FailurePolicy,
) -> SequenceOutcome:
    return run_sequence(
        create_hooks(commands, phase),
        context,
        policy=policy,
        timeout=request.hook_timeout,
        cwd=request.hook_cwd,
    )


def _tag_error(tag_name: str, error: GitError) -> ReleaseError:
    if error.kind == "tag_exists":
        return ReleaseError(
            kind="tag_exists",
            message=f"tag {tag_name} already exists",
            hint="pick another version, or delete the tag if it was created by mistake",
        )
    return ReleaseError(kind="tag_failed", message=f"failed to create tag: {error.message}")


def execute(
    request: ReleaseRequest,
    *,
    repo: GitRepository,
    console: ConsoleProtocol,
) -> Result[ReleaseResult, ReleaseFailure]:
    """Run one release attempt.

    Returns:
        Ok(ReleaseResult) on success (including dry runs),
        Err(ReleaseError) when the release failed as a whole,
        Err(PartialSuccess) when the tag exists but a post-tag hook failed.
    """
    _enter(console, ReleasePhase.COMPUTING_VERSION)
    planned = plan_version(request, repo=repo)
    if isinstance(planned, Err):
        return planned
    plan = planned.value

    head = repo.head().map_err(
        lambda e: ReleaseError(kind="head_failed", message=f"failed to get HEAD: {e.message}")
    )
    if isinstance(head, Err):
        return head

    result = ReleaseResult(
        previous_version=str(plan.previous),
        new_version=str(plan.new),
        tag_name=plan.tag_name,
        commit_hash=head.value,
    )

    if request.dry_run:
        console.print(f"dry run: would tag {plan.tag_name}", Style.DIM)
        return Ok(result)

    context = HookContext(
        version=result.new_version,
        previous_version=result.previous_version,
        tag_name=result.tag_name,
        prefix=request.prefix,
        remote=request.remote,
        commit_hash=result.commit_hash,
        dry_run=request.dry_run,
    )

    if request.run_hooks and request.pre_tag_hooks:
        _enter(console, ReleasePhase.PRE_TAG_HOOKS)
        outcome = _run_phase(
            request, request.pre_tag_hooks, HookPhase.PRE_TAG, context, FailurePolicy.FAIL_CLOSED
        )
        if outcome.failure is not None:
            return Err(
                ReleaseError(
                    kind="hook_failed",
                    message=f"pre-tag {outcome.failure.message}",
                    hint="no tag was created",
                )
            )
        result = replace(result, hooks_executed=result.hooks_executed + outcome.executed)

    _enter(console, ReleasePhase.TAGGING)
    created = repo.create_tag(result.tag_name, f"Release {result.tag_name}").map_err(
        partial(_tag_error, result.tag_name)
    )
    if isinstance(created, Err):
        return created
    result = replace(result, tag_created=True)

    if request.run_hooks and request.post_tag_hooks:
        _enter(console, ReleasePhase.POST_TAG_HOOKS)
        outcome = _run_phase(
            request, request.post_tag_hooks, HookPhase.POST_TAG, context, FailurePolicy.FAIL_CLOSED
        )
        result = replace(result, hooks_executed=result.hooks_executed + outcome.executed)
        if outcome.failure is not None:
            return Err(
                PartialSuccess(phase=HookPhase.POST_TAG, cause=outcome.failure, result=result)
            )

    if request.push:
        _enter(console, ReleasePhase.PUSHING)
        has_remote = repo.has_remote(request.remote)
        if isinstance(has_remote, Err):
            return Err(
                ReleaseError(
                    kind="remote_failed",
                    message=f"failed to check remote: {has_remote.error.message}",
                )
            )
        if has_remote.value:
            pushed = repo.push_tag(result.tag_name, request.remote)
            if isinstance(pushed, Err):
                return Err(
                    ReleaseError(
                        kind="push_failed",
                        message=f"failed to push tag: {pushed.error.message}",
                        hint=f"the tag exists locally; retry with: "
                        f"git push {request.remote} {result.tag_name}",
                    )
                )
            result = replace(result, pushed=True)
        else:
            console.print(f"remote '{request.remote}' not found, skipping push", Style.DIM)

    if request.run_hooks and result.pushed and request.post_push_hooks:
        _enter(console, ReleasePhase.POST_PUSH_HOOKS)
        outcome = _run_phase(
            request, request.post_push_hooks, HookPhase.POST_PUSH, context, FailurePolicy.FAIL_OPEN
        )
        for warning in outcome.warnings:
            console.warning(warning)
        result = replace(
            result,
            hooks_executed=result.hooks_executed + outcome.executed,
            post_push_warnings=outcome.warnings,
        )

    _enter(console, ReleasePhase.DONE)
    return Ok(result)
