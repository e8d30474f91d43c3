from __future__ import annotations

import secrets

from fastapi import APIRouter, Header, HTTPException, Request

from core.shutdown import EXIT_OK

router = APIRouter(prefix="/api", tags=["control"])


@router.post("/shutdown", status_code=202)
async def shutdown(request: Request, authorization: str | None = Header(default=None)):
    token: str = request.app.state.shutdown_token
    if not token:
        raise HTTPException(503, "Shutdown is not enabled")
    supplied = (authorization or "").removeprefix("Bearer ").strip()
    if not secrets.compare_digest(supplied.encode(), token.encode()):
        raise HTTPException(401, "Invalid token")

    request.app.state.shutdown.trigger(EXIT_OK, "requested via API")
    return {"status": "shutting down"}
