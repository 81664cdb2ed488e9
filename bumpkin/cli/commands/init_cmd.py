"""``bumpkin init`` - write a starter config."""

from __future__ import annotations

from pathlib import Path

import typer

from bumpkin.core.config import CONFIG_FILE_NAME, render_default_config
from bumpkin.core.errors import ExitCode
from bumpkin.core.result import Err
from bumpkin.git import Repository
from bumpkin.output.console import RichConsole

from ._helpers import fail


def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
) -> None:
    """Create .bumpkin.toml in the repository root."""
    console = RichConsole()
    repo = Repository.discover(Path.cwd())
    if isinstance(repo, Err):
        fail(console, repo.error.message, ExitCode.NOT_GIT_REPO)

    path = repo.value.path / CONFIG_FILE_NAME
    if path.exists() and not force:
        fail(console, f"{path} already exists", hint="use --force to overwrite it")

    try:
        path.write_text(render_default_config(), encoding="utf-8")
    except OSError as e:
        fail(console, f"failed to write {path}: {e}")

    console.success(f"wrote {path}")
