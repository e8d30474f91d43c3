import asyncio

from core.shutdown import EXIT_FATAL, EXIT_OK, ShutdownSignal, exit_when_triggered


def test_first_trigger_wins():
    signal = ShutdownSignal()
    signal.trigger(EXIT_FATAL, "unclassified failure")
    signal.trigger(EXIT_OK, "requested via API")
    assert signal.exit_code == EXIT_FATAL
    assert signal.reason == "unclassified failure"


def test_crashed_task_triggers_fatal_shutdown():
    async def crash():
        raise ValueError("resume_at for news must lie in the future")

    async def scenario():
        signal = ShutdownSignal()
        task = asyncio.create_task(crash(), name="fetch-loop")
        signal.watch(task)
        code = await asyncio.wait_for(signal.wait(), timeout=1)
        return signal, code

    signal, code = asyncio.run(scenario())
    assert code == EXIT_FATAL
    assert "fetch-loop" in signal.reason
    assert "must lie in the future" in signal.reason


def test_cleanly_finished_task_does_not_trigger():
    async def finish():
        return EXIT_OK

    async def scenario():
        signal = ShutdownSignal()
        task = asyncio.create_task(finish())
        signal.watch(task)
        await task
        await asyncio.sleep(0)
        return signal

    assert not asyncio.run(scenario()).is_set()


def test_exit_uses_the_signalled_code():
    exits = []

    async def scenario():
        signal = ShutdownSignal()
        watcher = asyncio.create_task(exit_when_triggered(signal, _exit=exits.append))
        await asyncio.sleep(0)
        assert exits == []
        signal.trigger(EXIT_FATAL, "unclassified failure")
        await asyncio.wait_for(watcher, timeout=1)

    asyncio.run(scenario())
    assert exits == [EXIT_FATAL]
