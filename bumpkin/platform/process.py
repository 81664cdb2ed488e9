"""Subprocess execution with Result-based error handling.

Two flavours of command are run by bumpkin:

- argv commands (``git ...``) whose output is captured and parsed: ``run``.
- user hook commands, handed verbatim to the platform shell so that ``&&``,
  ``;`` and redirections behave as typed: ``run_shell`` (output goes to the
  terminal) and ``spawn_shell`` (output piped back for streaming).

Shell commands start in their own process group on POSIX so that
``terminate`` can stop the whole pipeline, not only the ``sh`` wrapper.
"""

from __future__ import annotations

import contextlib
import os
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path

from bumpkin.core.result import Err, Ok, Result

__all__ = [
    "ProcessError",
    "run",
    "run_shell",
    "shell_argv",
    "spawn_shell",
    "terminate",
]

_IS_WINDOWS = os.name == "nt"
_TERMINATE_GRACE_SECONDS = 2.0


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code of the process (-1 if it never ran or was killed
            on timeout).
        stdout: Standard output (may be empty).
        stderr: Standard error, or a description of why the process failed.
        timed_out: True when the process was killed because of a timeout.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        if self.timed_out:
            return f"{cmd_str} timed out"
        return f"{cmd_str} failed (exit {self.returncode})"


def shell_argv(command: str) -> list[str]:
    """Wrap a raw command string for the platform shell."""
    if _IS_WINDOWS:
        return ["cmd", "/C", command]
    return ["sh", "-c", command]


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
                timed_out=True,
            )
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def _popen_shell(
    command: str,
    *,
    cwd: Path | None,
    env: dict[str, str] | None,
    pipe: bool,
) -> subprocess.Popen[bytes]:
    stream = subprocess.PIPE if pipe else None
    return subprocess.Popen(
        shell_argv(command),
        cwd=str(cwd) if cwd is not None else None,
        env=env,
        stdin=subprocess.DEVNULL,
        stdout=stream,
        stderr=stream,
        start_new_session=not _IS_WINDOWS,
    )


def run_shell(
    command: str,
    *,
    env: dict[str, str] | None = None,
    cwd: Path | None = None,
    timeout: float | None = None,
) -> Result[None, ProcessError]:
    """Run a command through the platform shell, output going to the terminal.

    Only the exit status is reported. On timeout the command (and anything
    it spawned) is terminated.
    """
    argv = (command,)
    try:
        proc = _popen_shell(command, cwd=cwd, env=env, pipe=False)
    except OSError as e:
        return Err(ProcessError(command=argv, returncode=-1, stdout="", stderr=str(e)))

    try:
        returncode = proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        terminate(proc)
        return Err(
            ProcessError(
                command=argv,
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {timeout}s",
                timed_out=True,
            )
        )

    if returncode != 0:
        return Err(ProcessError(command=argv, returncode=returncode, stdout="", stderr=""))
    return Ok(None)


def spawn_shell(
    command: str,
    *,
    env: dict[str, str] | None = None,
    cwd: Path | None = None,
) -> Result[subprocess.Popen[bytes], ProcessError]:
    """Start a shell command with stdout and stderr piped back separately.

    The caller owns the returned process: it must read both pipes and wait
    for (or ``terminate``) the process.
    """
    try:
        return Ok(_popen_shell(command, cwd=cwd, env=env, pipe=True))
    except OSError as e:
        return Err(ProcessError(command=(command,), returncode=-1, stdout="", stderr=str(e)))


def _signal_group(proc: subprocess.Popen[bytes], sig: signal.Signals) -> None:
    if _IS_WINDOWS:
        if sig == signal.SIGTERM:
            proc.terminate()
        else:
            proc.kill()
        return
    with contextlib.suppress(ProcessLookupError, PermissionError):
        os.killpg(proc.pid, sig)


def terminate(proc: subprocess.Popen[bytes]) -> None:
    """Stop a shell command started by this module.

    Sends SIGTERM to the process group, then SIGKILL if it is still alive
    after a short grace period. Safe to call on a process that already
    exited.
    """
    if proc.poll() is not None:
        return

    try:
        _signal_group(proc, signal.SIGTERM)
    except OSError:
        return

    try:
        proc.wait(timeout=_TERMINATE_GRACE_SECONDS)
        return
    except subprocess.TimeoutExpired:
        pass

    kill_sig = signal.SIGTERM if _IS_WINDOWS else signal.SIGKILL
    try:
        _signal_group(proc, kill_sig)
    except OSError:
        return
    with contextlib.suppress(subprocess.TimeoutExpired):
        proc.wait(timeout=_TERMINATE_GRACE_SECONDS)
