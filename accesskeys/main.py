"""Access key service FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app() - testable application factory
  - lifespan - @asynccontextmanager startup/shutdown sequence
  - app = create_app() - module-level instance for uvicorn

Startup sequence:
  1. load_config()             → app.state.config
  2. create_key_store()        → app.state.key_store
  3. create_event_recorder()   → app.state.event_recorder
  4. app.state.ready = True

Shutdown (reverse):
  app.state.ready = False → close event recorder → close key store
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from accesskeys.api.limiter import limiter
from accesskeys.api.middleware import RequestIDMiddleware
from accesskeys.api.router import router as keys_router
from accesskeys.config import Config, load_config
from accesskeys.events.factory import create_event_recorder
from accesskeys.events.protocol import EventRecorder
from accesskeys.health import router as health_router
from accesskeys.store.factory import create_key_store
from accesskeys.store.protocol import KeyStore
from accesskeys.utils.logger import configure_logging, get_logger

# ─── Logging Setup ────────────────────────────────────────────────────────────
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the store and recorder before serving; close them after.

    load_config() raises SystemExit and the backend factories raise
    RuntimeError on an incompatible schema; both abort startup before
    ready=True is set.
    """
    logger.info("Access key service starting up...")

    config: Config = load_config()
    app.state.config = config

    key_store: KeyStore = await create_key_store(config)
    app.state.key_store = key_store

    try:
        event_recorder: EventRecorder = await create_event_recorder(config)
    except Exception:
        await key_store.close()
        raise
    app.state.event_recorder = event_recorder

    app.state.ready = True
    logger.info(
        "Access key service ready",
        store_provider=config.store.provider,
        events_provider=config.events.provider,
    )

    yield

    logger.info("Access key service shutting down...")
    app.state.ready = False

    await event_recorder.close()
    await key_store.close()

    logger.info("Access key service shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def _describe_validation_error(error: dict) -> str:
    """Render one pydantic error as ``field: message`` (body prefix dropped)."""
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "invalid value")
    return f"{field}: {message}" if field else message


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Call directly in tests to get an isolated app instance. The module-level
    ``app`` is the instance uvicorn serves.
    """
    application = FastAPI(
        title="Access Keys",
        description="Lifecycle of project-scoped SSH and cloud credentials",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None,
        openapi_url="/openapi.json" if DEBUG else None,
    )

    # /health answers 503 on any request that arrives before startup completes.
    application.state.ready = False

    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # In Starlette the LAST-added middleware is OUTERMOST. RequestIDMiddleware
    # is added last so the request_id is bound before rate limiting logs.
    application.add_middleware(SlowAPIMiddleware)
    application.add_middleware(RequestIDMiddleware)

    application.include_router(health_router)
    application.include_router(keys_router)

    @application.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=str(request.url.path),
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        problems = [_describe_validation_error(error) for error in exc.errors()]
        logger.info(
            "request_validation_failed",
            path=str(request.url.path),
            problems=problems,
        )
        return JSONResponse(
            status_code=400, content={"error": "Invalid request: " + "; ".join(problems)}
        )

    @application.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=str(request.url.path),
        )
        return JSONResponse(
            status_code=500, content={"error": "Internal server error"}
        )

    return application


app = create_app()
