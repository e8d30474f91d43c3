from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.exc import SQLAlchemyError

from core.errors import ClassifiedError, NotificationError, Severity, SourceSuspended
from core.escalation import DEFAULT_SUSPENSION, Action, ActionKind, classify, decide
from core.models import NewsItem, Source, StatsSnapshot
from core.shutdown import EXIT_FATAL, EXIT_OK, ShutdownSignal
from core.stats import StatsAggregator
from core.timeouts import TimeoutTable
from data.artifacts import ArtifactStore
from data.repositories import DedupGate
from notify.base import BaseNotifier
from scrapers.base import BaseExtractor

log = logging.getLogger(__name__)


class FetchScheduler:
    """Walks the sources one at a time, forever.

    Fetches are strictly serial with a fixed pause after every source, which
    is the only rate limiting the upstream gets.
    """

    def __init__(
        self,
        sources: list[Source],
        extractor: BaseExtractor,
        gate: DedupGate,
        notifier: BaseNotifier,
        stats: StatsAggregator,
        shutdown: ShutdownSignal,
        *,
        artifacts: ArtifactStore | None = None,
        timeouts: TimeoutTable | None = None,
        delay_seconds: float = 15.0,
        suspend_for: timedelta = DEFAULT_SUSPENSION,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        hooks: bool = True,
    ) -> None:
        if suspend_for <= timedelta(0):
            raise ValueError("suspend_for must be positive")
        self._sources = list(sources)
        self._extractor = extractor
        self._gate = gate
        self._notifier = notifier
        self._stats = stats
        self._shutdown = shutdown
        self._artifacts = artifacts
        self._timeouts = timeouts or TimeoutTable()
        self._delay = delay_seconds
        self._suspend_for = suspend_for
        self._sleep = sleep
        self._hooks = hooks

    async def run_forever(self) -> int:
        log.info(
            "Fetch loop started: %d sources, %.0fs between sources, hooks %s",
            len(self._sources),
            self._delay,
            "on" if self._hooks else "off",
        )
        while not self._shutdown.is_set():
            if not self._sources:
                await self._sleep(self._delay)
                continue
            await self.run_pass()
        return self._shutdown.exit_code

    async def run_once(self) -> int:
        await self.run_pass()
        if self._shutdown.is_set():
            return self._shutdown.exit_code
        return EXIT_OK

    async def run_pass(self) -> None:
        for source in self._sources:
            if self._shutdown.is_set():
                return
            await self.process(source)
            if self._shutdown.is_set():
                return
            await self._sleep(self._delay)

    async def process(self, source: Source) -> None:
        """Fetch one source and act on the outcome."""
        try:
            self._ensure_active(source)
            await self._stats.record_fetch()
            items = await self._extractor.extract(source)
            await self._handle_items(source, items)
        except Exception as exc:
            await self._handle_failure(source, exc)

    # ── success path ────────────────────────────────────────────────

    def _ensure_active(self, source: Source) -> None:
        resume_at = self._timeouts.resume_at(source.name)
        if resume_at is not None:
            raise SourceSuspended(source.name, resume_at)

    async def _handle_items(self, source: Source, items: list[NewsItem]) -> None:
        new_count = 0
        undelivered: list[str] = []
        # Listing pages are newest first; announce in publication order.
        for item in reversed(items):
            try:
                is_new = await self._gate.mark_and_check(source.name, item.url)
            except SQLAlchemyError as e:
                log.error("Dedup ledger failed for %s %s: %s", source.name, item.url, e)
                await self._stats.record_error()
                await self._escalate(
                    "DedupGateFailure", f"{source.name}: {item.url}: {e}", Severity.ERROR
                )
                continue
            if not is_new:
                continue

            new_count += 1
            await self._stats.record_new_items()
            if self._hooks:
                try:
                    await self._notifier.deliver(source, item)
                except NotificationError as e:
                    log.warning("[%s] %s", source.name, e)
                    undelivered.append(item.url)

        # One alert per pass, however many deliveries failed.
        if undelivered:
            await self._handle_failure(
                source,
                NotificationError(
                    f"{len(undelivered)} of {new_count} new posts not delivered, "
                    f"first {undelivered[0]}"
                ),
            )

        if new_count:
            log.info("[%s] %d new of %d posts", source.name, new_count, len(items))
        else:
            log.debug("[%s] nothing new (%d posts)", source.name, len(items))

    # ── failure path ────────────────────────────────────────────────

    async def _handle_failure(self, source: Source, exc: Exception) -> None:
        error = classify(exc)
        action = decide(error, self._suspend_for)
        if error is None:
            log.debug("[%s] skipped: %s", source.name, exc)
            return

        await self._stats.record_error()

        if action.kind is ActionKind.PERSIST_ARTIFACT_AND_SUSPEND:
            self._save_artifact(source, error)
        if action.suspends:
            self._suspend(source, action)

        context = f"{source.name}: {error.describe()}"
        if action.escalate:
            await self._escalate(error.kind.value, context, action.severity)
        else:
            log.warning("[%s] %s", source.name, error.describe())

        if action.kind is ActionKind.ESCALATE_AND_TERMINATE:
            self._shutdown.trigger(EXIT_FATAL, context)

    def _suspend(self, source: Source, action: Action) -> None:
        resume_at = self._timeouts.now() + action.suspend_for.total_seconds()
        self._timeouts.time_out(source.name, resume_at)
        log.warning(
            "[%s] suspended for %d minutes",
            source.name,
            action.suspend_for.total_seconds() // 60,
        )

    def _save_artifact(self, source: Source, error: ClassifiedError) -> None:
        if self._artifacts is None or not error.document:
            return
        try:
            self._artifacts.save(source.name, error.document)
        except OSError as e:
            log.error("Could not save artifact for %s: %s", source.name, e)

    async def _escalate(self, kind: str, context: str, severity: Severity) -> None:
        try:
            await self._notifier.escalate(kind, context, severity)
        except Exception:
            log.exception("Escalation %s could not be sent", kind)


class StatsReporter:
    """Flushes the stats window on a fixed period and reports it."""

    def __init__(
        self,
        stats: StatsAggregator,
        notifier: BaseNotifier,
        interval_hours: int = 24,
    ) -> None:
        self._stats = stats
        self._notifier = notifier
        self._interval_hours = interval_hours
        self._scheduler = AsyncIOScheduler()

    def start(self) -> None:
        self._scheduler.add_job(
            self.flush,
            "interval",
            hours=self._interval_hours,
            id="stats_flush",
            replace_existing=True,
        )
        self._scheduler.start()
        log.info("Stats report scheduled every %d hours", self._interval_hours)

    def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    async def flush(self) -> StatsSnapshot:
        # Reset before reporting; a failed report drops the window.
        snapshot = await self._stats.flush()
        log.info("Stats window closed: %s", snapshot.as_dict())
        try:
            await self._notifier.report(snapshot)
        except Exception:
            log.exception("Stats report could not be sent")
        return snapshot

    def get_status(self) -> dict:
        job = self._scheduler.get_job("stats_flush")
        next_run = job.next_run_time if job is not None else None
        return {
            "running": self._scheduler.running,
            "interval_hours": self._interval_hours,
            "next_report": next_run.isoformat() if next_run else None,
        }
