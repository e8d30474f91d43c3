from __future__ import annotations

import time
from collections.abc import Callable


class TimeoutTable:
    """Per-source suspensions.

    Entries are never deleted; a source is active again as soon as the clock
    reaches its ``resume_at``.  Owned by the scheduler task only.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._resume_at: dict[str, float] = {}

    def now(self) -> float:
        return self._clock()

    def is_timed_out(self, name: str) -> bool:
        resume_at = self._resume_at.get(name)
        return resume_at is not None and resume_at > self._clock()

    def time_out(self, name: str, resume_at: float) -> None:
        """Suspend ``name`` until ``resume_at``, replacing any earlier entry."""
        if resume_at <= self._clock():
            raise ValueError(f"resume_at for {name} must lie in the future")
        self._resume_at[name] = resume_at

    def resume_at(self, name: str) -> float | None:
        """When ``name`` resumes, or None if it is not suspended."""
        if not self.is_timed_out(name):
            return None
        return self._resume_at[name]
