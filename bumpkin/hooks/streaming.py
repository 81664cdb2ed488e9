"""Streaming execution of a single hook.

``run_streaming`` starts the command immediately and returns a
``HookStream``. Behind it:

- two reader threads, one per pipe, turn every line into an ``OutputLine``
  and put it on a shared bounded queue;
- a supervisor thread waits for the process (killing it if the
  ``CancelToken`` fires), joins the readers, resolves the one-shot result
  future and finally enqueues the end-of-stream marker.

The result can therefore resolve while lines are still queued. Consumers
iterate ``lines()`` to the end to see everything the hook printed.
"""

from __future__ import annotations

import queue
import subprocess
import threading
import time
from collections.abc import Iterator
from concurrent.futures import Future
from datetime import datetime
from pathlib import Path
from typing import IO, Final

from bumpkin.core.result import Err
from bumpkin.platform.process import spawn_shell, terminate

from .cancel import CancelToken
from .runner import build_env, hook_error_from_process
from .types import Hook, HookContext, HookError, HookResult, OutputLine, Stream

__all__ = ["LINE_QUEUE_CAPACITY", "HookStream", "run_streaming"]

LINE_QUEUE_CAPACITY: Final = 100
_POLL_INTERVAL_SECONDS = 0.05


class _EndOfStream:
    pass


_END = _EndOfStream()

type _QueueItem = OutputLine | _EndOfStream


class HookStream:
    """Live view of a running hook: its output lines and its final result."""

    def __init__(self, hook: Hook) -> None:
        self.hook = hook
        self._queue: queue.Queue[_QueueItem] = queue.Queue(maxsize=LINE_QUEUE_CAPACITY)
        self._future: Future[HookResult] = Future()
        self._closed = False

    @property
    def done(self) -> bool:
        """True once the result is available (lines may still be pending)."""
        return self._future.done()

    def result(self, timeout: float | None = None) -> HookResult:
        """Wait for the hook to finish.

        Raises:
            TimeoutError: If ``timeout`` elapses first.
        """
        return self._future.result(timeout=timeout)

    def lines(self) -> Iterator[OutputLine]:
        """Yield output lines as they arrive until the stream is closed."""
        while not self._closed:
            item = self._queue.get()
            if isinstance(item, _EndOfStream):
                self._closed = True
                return
            yield item

    def get_line(self, timeout: float | None = None) -> OutputLine | None:
        """Next line, or None when the stream is closed or ``timeout`` passes."""
        if self._closed:
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if isinstance(item, _EndOfStream):
            self._closed = True
            return None
        return item

    @property
    def closed(self) -> bool:
        return self._closed

    # Producer side

    def _emit(self, text: str, stream: Stream) -> None:
        self._queue.put(OutputLine(text=text, stream=stream, timestamp=datetime.now()))

    def _finish(self, result: HookResult) -> None:
        self._future.set_result(result)
        self._queue.put(_END)


def _read_pipe(pipe: IO[bytes], stream: Stream, out: HookStream) -> None:
    try:
        for raw in iter(pipe.readline, b""):
            text = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            out._emit(text, stream)
    except (OSError, ValueError) as e:
        out._emit(f"[read error: {e}]", Stream.ERR)
    finally:
        pipe.close()


def _supervise(
    proc: subprocess.Popen[bytes],
    hook: Hook,
    cancel: CancelToken,
    out: HookStream,
    start: float,
) -> None:
    assert proc.stdout is not None and proc.stderr is not None
    readers = [
        threading.Thread(target=_read_pipe, args=(proc.stdout, Stream.OUT, out), daemon=True),
        threading.Thread(target=_read_pipe, args=(proc.stderr, Stream.ERR, out), daemon=True),
    ]
    for t in readers:
        t.start()

    cancel_reason: str | None = None
    while True:
        try:
            proc.wait(timeout=_POLL_INTERVAL_SECONDS)
            break
        except subprocess.TimeoutExpired:
            pass
        if cancel.cancelled:
            cancel_reason = cancel.reason
            terminate(proc)
            break

    for t in readers:
        t.join()
    returncode = proc.wait()
    duration = time.monotonic() - start

    error: HookError | None = None
    if cancel_reason == "deadline exceeded":
        error = HookError(kind="timeout", message="hook timed out: deadline exceeded")
    elif cancel_reason is not None:
        error = HookError(kind="cancelled", message="hook cancelled")
    elif returncode != 0:
        error = HookError(kind="exit", message=f"exit status {returncode}", returncode=returncode)

    out._finish(
        HookResult(hook=hook, succeeded=error is None, error=error, duration=duration)
    )


def run_streaming(
    hook: Hook,
    context: HookContext | None,
    *,
    cancel: CancelToken | None = None,
    cwd: Path | None = None,
) -> HookStream:
    """Start ``hook`` and stream its output.

    An empty command, or a command that fails to start, yields a stream that
    is already finished.
    """
    out = HookStream(hook)
    token = cancel or CancelToken()

    if hook.is_empty:
        out._finish(HookResult(hook=hook, succeeded=True))
        return out

    start = time.monotonic()
    spawned = spawn_shell(hook.command, env=build_env(context), cwd=cwd)
    if isinstance(spawned, Err):
        out._finish(
            HookResult(
                hook=hook,
                succeeded=False,
                error=hook_error_from_process(spawned.error),
                duration=time.monotonic() - start,
            )
        )
        return out

    threading.Thread(
        target=_supervise,
        args=(spawned.value, hook, token, out, start),
        name=f"hook-supervisor:{hook.phase}",
        daemon=True,
    ).start()
    return out
