"""``bumpkin current`` - show the latest version tag."""

from __future__ import annotations

import typer

from bumpkin.cli.context import build_context
from bumpkin.core.result import Err

from ._helpers import fail


def current(
    prefix: str | None = typer.Option(None, "--prefix", "-p", help="Tag prefix"),
) -> None:
    """Show the latest version tag."""
    ctx = build_context()
    tag_prefix = prefix if prefix is not None else ctx.config.prefix

    latest = ctx.repo.latest_tag(tag_prefix)
    if isinstance(latest, Err):
        fail(ctx.console, f"failed to get latest tag: {latest.error.message}")

    tag = latest.value
    if tag is None:
        ctx.console.print("No version tags found")
        return
    ctx.console.print(tag.name)
