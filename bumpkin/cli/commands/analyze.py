"""``bumpkin analyze`` - recommend a bump from conventional commits."""

from __future__ import annotations

import typer

from bumpkin.cli.context import build_context
from bumpkin.conventional import analyze_commits, classify
from bumpkin.core.errors import ExitCode
from bumpkin.core.result import Err
from bumpkin.output.console import Style

from ._helpers import fail


def analyze(
    prefix: str | None = typer.Option(None, "--prefix", "-p", help="Tag prefix"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="List each classified commit"),
) -> None:
    """Classify commits since the latest tag and recommend a bump."""
    ctx = build_context()
    console = ctx.console
    tag_prefix = prefix if prefix is not None else ctx.config.prefix

    latest = ctx.repo.latest_tag(tag_prefix)
    if isinstance(latest, Err):
        fail(console, f"failed to get latest tag: {latest.error.message}")
    tag = latest.value

    commits = ctx.repo.commits_since(tag.name) if tag is not None else ctx.repo.all_commits()
    if isinstance(commits, Err):
        fail(console, f"failed to read commits: {commits.error.message}")

    since = f"since {tag.name}" if tag is not None else "in history"
    if not commits.value:
        fail(console, f"no commits {since}", ExitCode.NO_COMMITS)

    result = analyze_commits(commits.value)
    console.header(f"Commits {since}")
    if verbose:
        for commit in commits.value:
            classified = classify(commit.message)
            marker = "!" if classified.breaking else ""
            line = f"  {commit.short_hash} {classified.type}{marker}: {commit.subject}"
            console.print(line, Style.DIM)
    console.print(result.summary())
    console.success(f"recommended bump: {result.recommended}")
