from __future__ import annotations

from datetime import datetime, timezone

from fastapi import FastAPI

from api.routers import control, status
from core.models import Source
from core.shutdown import ShutdownSignal
from core.stats import StatsAggregator
from data.repositories import DedupGate
from scrapers.scheduler import StatsReporter


def create_app(
    *,
    sources: list[Source],
    gate: DedupGate,
    stats: StatsAggregator,
    shutdown: ShutdownSignal,
    shutdown_token: str = "",
    started_at: datetime | None = None,
    reporter: StatsReporter | None = None,
) -> FastAPI:
    """Build the read-only status API around the already constructed core."""
    app = FastAPI(title="News Relay", version="0.1.0")
    app.state.sources = {s.name: s for s in sources}
    app.state.gate = gate
    app.state.stats = stats
    app.state.reporter = reporter
    app.state.shutdown = shutdown
    app.state.shutdown_token = shutdown_token
    app.state.started_at = started_at or datetime.now(timezone.utc)

    app.include_router(status.router)
    app.include_router(control.router)

    # Health check
    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
