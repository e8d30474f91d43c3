"""News Relay — entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import timedelta

import httpx
import uvicorn

from api.app import create_app
from config.settings import Settings, settings
from config.sources import load_sources
from core.models import Source
from core.shutdown import ShutdownSignal, exit_when_triggered
from core.stats import StatsAggregator
from data.artifacts import ArtifactStore
from data.database import Database
from data.repositories import DedupGate
from notify.webhook import WebhookNotifier
from scrapers.publisher import PublisherExtractor
from scrapers.scheduler import FetchScheduler, StatsReporter

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Relay new publisher posts to a webhook")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single pass over all sources and exit (no status API)",
    )
    parser.add_argument(
        "--no-hooks",
        action="store_true",
        help="Record new posts without delivering them",
    )
    return parser


def build_http_client(cfg: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"User-Agent": cfg.USER_AGENT},
        follow_redirects=True,
        max_redirects=cfg.MAX_REDIRECTS,
        timeout=cfg.REQUEST_TIMEOUT_SECONDS,
    )


def build_scheduler(
    cfg: Settings,
    sources: list[Source],
    *,
    client: httpx.AsyncClient,
    gate: DedupGate,
    notifier: WebhookNotifier,
    stats: StatsAggregator,
    shutdown: ShutdownSignal,
    hooks: bool,
) -> FetchScheduler:
    return FetchScheduler(
        sources,
        PublisherExtractor(client),
        gate,
        notifier,
        stats,
        shutdown,
        artifacts=ArtifactStore(cfg.ARTIFACT_DIR),
        delay_seconds=cfg.INTER_SOURCE_DELAY_SECONDS,
        suspend_for=timedelta(minutes=cfg.SUSPEND_MINUTES),
        hooks=hooks,
    )


async def run_single_pass(cfg: Settings, hooks: bool) -> int:
    sources = load_sources(cfg.SOURCES)
    db = Database(cfg.DATABASE_URL)
    await db.init()
    try:
        async with build_http_client(cfg) as client:
            notifier = WebhookNotifier(client, cfg.NEWS_WEBHOOK_URL, cfg.ALERT_WEBHOOK_URL)
            scheduler = build_scheduler(
                cfg,
                sources,
                client=client,
                gate=DedupGate(db),
                notifier=notifier,
                stats=StatsAggregator(),
                shutdown=ShutdownSignal(),
                hooks=hooks,
            )
            return await scheduler.run_once()
    finally:
        await db.close()


def serve(cfg: Settings, hooks: bool) -> None:
    sources = load_sources(cfg.SOURCES)
    db = Database(cfg.DATABASE_URL)
    gate = DedupGate(db)
    stats = StatsAggregator()
    shutdown = ShutdownSignal()
    client = build_http_client(cfg)
    notifier = WebhookNotifier(client, cfg.NEWS_WEBHOOK_URL, cfg.ALERT_WEBHOOK_URL)
    reporter = StatsReporter(stats, notifier, cfg.STATS_FLUSH_HOURS)

    app = create_app(
        sources=sources,
        gate=gate,
        stats=stats,
        shutdown=shutdown,
        shutdown_token=cfg.SHUTDOWN_TOKEN,
        reporter=reporter,
    )

    @app.on_event("startup")
    async def on_startup() -> None:
        log.info("Initialising database…")
        await db.init()

        reporter.start()

        log.info("Starting fetch loop…")
        scheduler = build_scheduler(
            cfg,
            sources,
            client=client,
            gate=gate,
            notifier=notifier,
            stats=stats,
            shutdown=shutdown,
            hooks=hooks,
        )
        fetch_loop = asyncio.create_task(scheduler.run_forever(), name="fetch-loop")
        shutdown.watch(fetch_loop)
        app.state.tasks = [
            fetch_loop,
            asyncio.create_task(exit_when_triggered(shutdown), name="shutdown-watch"),
        ]

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        reporter.stop()
        await client.aclose()
        await db.close()
        log.info("Fetch loop stopped.")

    uvicorn.run(app, host=cfg.API_HOST, port=cfg.DASHBOARD_PORT, reload=False)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    hooks = not args.no_hooks
    if args.once:
        return asyncio.run(run_single_pass(settings, hooks))
    serve(settings, hooks)
    return 0


if __name__ == "__main__":
    sys.exit(main())
