from __future__ import annotations

import math
from collections import deque
from datetime import datetime


class ReleaseCadenceEstimator:
    """Moving estimate of how often active slots free up.

    Keeps the most recent release timestamps and averages the gaps between
    them. Falls back to a configured interval until two distinct release
    instants are known. When ``now`` is given, the time since the last release
    is a lower bound on the interval, so a stalled queue never reports a wait
    of zero.
    """

    def __init__(self, *, history_size: int, default_interval_seconds: float) -> None:
        self._releases: deque[datetime] = deque(maxlen=history_size)
        self._default_interval = default_interval_seconds

    def record(self, released_at: datetime) -> None:
        if self._releases and released_at < self._releases[-1]:
            released_at = self._releases[-1]
        self._releases.append(released_at)

    def average_interval(self, now: datetime | None = None) -> float:
        interval = self._default_interval
        if len(self._releases) >= 2:
            span = (self._releases[-1] - self._releases[0]).total_seconds()
            if span > 0:
                interval = span / (len(self._releases) - 1)
        if now is not None and self._releases:
            interval = max(interval, (now - self._releases[-1]).total_seconds())
        return interval

    def estimate_wait(self, position: int, now: datetime | None = None) -> int:
        if position <= 0:
            return 0
        return math.ceil(position * self.average_interval(now))

    def reset(self) -> None:
        self._releases.clear()

    def __len__(self) -> int:
        return len(self._releases)
