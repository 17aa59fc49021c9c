"""Health endpoint.

GET /health - 503 until the lifespan marks ``app.state.ready``; afterwards
200 with the health of the key store and the event recorder.

An unhealthy recorder only degrades the service: key mutations keep working
and their audit failures are logged.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from accesskeys.config import Config

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> Any:
    """Primary health check.

    Response body (200 / 503 when the store is down):
        {
          "status": "ok" | "degraded" | "error",
          "store": "healthy" | "error",
          "events": "healthy" | "error",
          "store_provider": "sqlite" | "memory",
          "events_provider": "sqlite" | "memory" | "null"
        }
    """
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={"status": "starting", "message": "Access key service is starting up"},
        )

    config: Config = request.app.state.config
    store_ok = await request.app.state.key_store.health_check()
    events_ok = await request.app.state.event_recorder.health_check()

    if not store_ok:
        status = "error"
    elif not events_ok:
        status = "degraded"
    else:
        status = "ok"

    body = {
        "status": status,
        "store": "healthy" if store_ok else "error",
        "events": "healthy" if events_ok else "error",
        "store_provider": config.store.provider,
        "events_provider": config.events.provider,
    }
    return JSONResponse(status_code=200 if store_ok else 503, content=body)
