"""Platform abstraction layer."""

from .process import (
    ProcessError,
    run,
    run_shell,
    shell_argv,
    spawn_shell,
    terminate,
)

__all__ = [
    "ProcessError",
    "run",
    "run_shell",
    "shell_argv",
    "spawn_shell",
    "terminate",
]
