from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone

from core.models import StatsSnapshot


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatsAggregator:
    """Operational counters shared by the scheduler, the flush job and the API.

    All access goes through one lock which is never held across I/O.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = asyncio.Lock()
        self._fetch_attempts = 0
        self._new_items = 0
        self._errors = 0
        self._window_start = clock()

    async def record_fetch(self) -> None:
        async with self._lock:
            self._fetch_attempts += 1

    async def record_new_items(self, count: int = 1) -> None:
        async with self._lock:
            self._new_items += count

    async def record_error(self) -> None:
        async with self._lock:
            self._errors += 1

    async def snapshot(self) -> StatsSnapshot:
        async with self._lock:
            return self._current()

    async def flush(self) -> StatsSnapshot:
        """Return the current window and start a new one."""
        async with self._lock:
            snap = self._current()
            self._fetch_attempts = 0
            self._new_items = 0
            self._errors = 0
            self._window_start = self._clock()
        return snap

    def _current(self) -> StatsSnapshot:
        return StatsSnapshot(
            fetch_attempts=self._fetch_attempts,
            new_items=self._new_items,
            errors=self._errors,
            window_start=self._window_start,
        )
