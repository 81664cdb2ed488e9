"""Bounded, thread-safe store of recent hook output.

Stream reader threads append lines while a display consumer takes
snapshots. Once ``max_lines`` is exceeded the oldest lines are dropped;
a capacity of zero keeps nothing.
"""

from __future__ import annotations

import threading
from collections import deque

from .types import OutputLine

__all__ = ["OutputBuffer"]


class OutputBuffer:
    def __init__(self, max_lines: int) -> None:
        if max_lines < 0:
            raise ValueError(f"max_lines must be >= 0, got {max_lines}")
        self._max_lines = max_lines
        self._lines: deque[OutputLine] = deque()
        self._lock = threading.Lock()

    @property
    def max_lines(self) -> int:
        return self._max_lines

    def add_line(self, line: OutputLine) -> None:
        with self._lock:
            self._lines.append(line)
            while len(self._lines) > self._max_lines:
                self._lines.popleft()

    def line_count(self) -> int:
        with self._lock:
            return len(self._lines)

    def lines(self) -> tuple[OutputLine, ...]:
        """Snapshot copy; later writes do not affect it."""
        with self._lock:
            return tuple(self._lines)

    def render(self) -> str:
        """``[out] text`` / ``[err] text``, one line each."""
        snapshot = self.lines()
        return "\n".join(f"[{line.stream}] {line.text}" for line in snapshot)

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()
