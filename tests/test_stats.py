import asyncio
from datetime import datetime, timedelta, timezone

from core.stats import StatsAggregator


def test_flush_reports_and_resets():
    times = iter(
        [
            datetime(2026, 10, 17, tzinfo=timezone.utc),
            datetime(2026, 10, 18, tzinfo=timezone.utc),
        ]
    )

    async def scenario():
        stats = StatsAggregator(clock=lambda: next(times))
        for _ in range(3):
            await stats.record_new_items()
        await stats.record_fetch()
        await stats.record_error()

        reported = await stats.flush()
        after = await stats.snapshot()
        return reported, after

    reported, after = asyncio.run(scenario())

    assert reported.new_items == 3
    assert reported.fetch_attempts == 1
    assert reported.errors == 1
    assert reported.window_start == datetime(2026, 10, 17, tzinfo=timezone.utc)

    assert after.new_items == 0
    assert after.fetch_attempts == 0
    assert after.errors == 0
    assert after.window_start - reported.window_start == timedelta(days=1)


def test_snapshot_does_not_reset():
    async def scenario():
        stats = StatsAggregator()
        await stats.record_fetch()
        await stats.record_fetch()
        first = await stats.snapshot()
        second = await stats.snapshot()
        return first, second

    first, second = asyncio.run(scenario())
    assert first.fetch_attempts == second.fetch_attempts == 2


def test_concurrent_increments_are_not_lost():
    async def scenario():
        stats = StatsAggregator()
        await asyncio.gather(*(stats.record_new_items() for _ in range(50)))
        return await stats.flush()

    assert asyncio.run(scenario()).new_items == 50
