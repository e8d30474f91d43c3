from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request

router = APIRouter(prefix="/api", tags=["status"])


def _source_to_dict(s) -> dict:
    return {"name": s.name, "scrape_type": s.scrape_type.value, "url": s.url}


@router.get("/sources")
async def list_sources(request: Request):
    return [_source_to_dict(s) for s in request.app.state.sources.values()]


@router.get("/sources/{name}/latest")
async def latest_item(name: str, request: Request):
    if name not in request.app.state.sources:
        raise HTTPException(404, f"Unknown source: {name}")
    url = await request.app.state.gate.latest(name)
    if url is None:
        raise HTTPException(404, f"Nothing recorded for {name} yet")
    return {"source": name, "url": url}


@router.get("/uptime")
async def uptime(request: Request):
    started_at: datetime = request.app.state.started_at
    elapsed = datetime.now(timezone.utc) - started_at
    return {
        "started_at": started_at.isoformat(),
        "uptime_seconds": int(elapsed.total_seconds()),
    }


@router.get("/stats")
async def current_stats(request: Request):
    snapshot = await request.app.state.stats.snapshot()
    return snapshot.as_dict()


@router.get("/stats/report")
async def stats_report_schedule(request: Request):
    reporter = request.app.state.reporter
    if reporter is None:
        raise HTTPException(503, "Stats report is not scheduled")
    return reporter.get_status()
