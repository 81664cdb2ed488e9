from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from bumpkin.core.config import CONFIG_FILE_NAME, Config, load_config, load_config_or_default
from bumpkin.core.errors import ExitCode
from bumpkin.core.result import Err
from bumpkin.git import Repository
from bumpkin.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo: Repository
    config: Config
    console: ConsoleProtocol


def build_context(config_path: Path | None = None, *, stderr: bool = False) -> CLIContext:
    """Open the enclosing repository and its config, or exit with a code.

    ``stderr`` routes human-readable output away from stdout, for commands
    that print machine-readable results.
    """
    console = RichConsole(stderr=stderr)

    repo_result = Repository.discover(Path.cwd())
    if isinstance(repo_result, Err):
        console.error(repo_result.error.message)
        raise typer.Exit(code=int(ExitCode.NOT_GIT_REPO))
    repo = repo_result.value

    if config_path is not None:
        config_result = load_config(config_path)
    else:
        config_result = load_config_or_default(repo.path / CONFIG_FILE_NAME)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        raise typer.Exit(code=int(ExitCode.INVALID_ARGS))

    return CLIContext(repo=repo, config=config_result.value, console=console)
