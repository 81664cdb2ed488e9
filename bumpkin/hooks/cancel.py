from __future__ import annotations

import threading
import time

__all__ = ["CancelToken"]


class CancelToken:
    """Cooperative cancellation signal with an optional deadline.

    Passed into ``run_streaming``; the supervisor polls it while the hook
    runs and terminates the process once it fires. ``cancel()`` may be
    called from any thread (typically a Ctrl-C handler or a UI thread).
    """

    def __init__(self, *, timeout: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def deadline_exceeded(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.deadline_exceeded

    @property
    def reason(self) -> str | None:
        """``"cancelled"``, ``"deadline exceeded"`` or None while still live."""
        if self._event.is_set():
            return "cancelled"
        if self.deadline_exceeded:
            return "deadline exceeded"
        return None

    def remaining(self) -> float | None:
        """Seconds left before the deadline (never negative), None if unbounded."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def wait(self, timeout: float) -> bool:
        """Block up to ``timeout`` seconds; True once cancelled."""
        remaining = self.remaining()
        if remaining is not None:
            timeout = min(timeout, remaining)
        self._event.wait(timeout)
        return self.cancelled
