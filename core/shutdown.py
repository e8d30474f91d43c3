from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1


class ShutdownSignal:
    """The one place a task may ask the process to end."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.exit_code = EXIT_OK
        self.reason = ""

    def trigger(self, exit_code: int, reason: str) -> None:
        if self._event.is_set():
            return
        log.warning("Shutdown requested (exit %d): %s", exit_code, reason)
        self.exit_code = exit_code
        self.reason = reason
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> int:
        await self._event.wait()
        return self.exit_code

    def watch(self, task: asyncio.Task) -> None:
        """Treat ``task`` dying with an exception as fatal."""
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.critical("Task %s crashed", task.get_name(), exc_info=exc)
            self.trigger(EXIT_FATAL, f"task {task.get_name()} crashed: {exc!r}")


async def exit_when_triggered(
    signal: ShutdownSignal,
    _exit: Callable[[int], object] = os._exit,
) -> None:
    """Wait for the signal, then end the process without draining."""
    code = await signal.wait()
    log.warning("Exiting with status %d: %s", code, signal.reason)
    logging.shutdown()
    _exit(code)
