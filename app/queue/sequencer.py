from __future__ import annotations

from itertools import count
from threading import Lock


class Sequencer:
    """Issue strictly increasing admission order numbers.

    Values are never reused, even across a queue reset; gaps are allowed.
    """

    def __init__(self, start: int = 1) -> None:
        self._counter = count(start)
        self._last = start - 1
        self._lock = Lock()

    def next(self) -> int:
        with self._lock:
            self._last = next(self._counter)
            return self._last

    @property
    def last(self) -> int:
        """Most recently issued value (``start - 1`` before the first call)."""

        with self._lock:
            return self._last
