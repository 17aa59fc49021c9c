"""Access key HTTP endpoints.

Provides, under /api/project/{project_id}:
  GET    /keys              - list keys (?sort=name|type, ?order=desc)
  POST   /keys              - create a key, 204
  GET    /keys/{key_id}     - single key
  PUT    /keys/{key_id}     - update a key, 204 (omit secret to keep it)
  DELETE /keys/{key_id}     - soft delete; ?setRemoved=1 for hard delete, 204
  GET    /events            - project audit trail, newest first

Secrets are accepted in request bodies and never returned.

Error bodies:
  400 {"error": "..."}                 - validation failure (key rules, or a
                                         malformed body / query string)
  400 {"error": "...", "inUse": true}  - hard delete blocked by dependents
  404 {"error": "..."}                 - unknown key
  500 {"error": "Internal server error"}
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse

from accesskeys.api.dependencies import (
    get_event_recorder,
    get_lifecycle_manager,
    get_query_service,
    resolve_access_key,
    resolve_project,
)
from accesskeys.api.limiter import KEY_READ_RATE_LIMIT, KEY_WRITE_RATE_LIMIT, limiter
from accesskeys.api.schemas import AccessKeyIn, AccessKeyOut, EventOut
from accesskeys.constants import SORT_DESCENDING
from accesskeys.events.protocol import EventFilters, EventRecorder
from accesskeys.keys.errors import (
    KeyInUseError,
    KeyNotFoundError,
    KeyValidationError,
    PersistenceError,
)
from accesskeys.keys.manager import KeyLifecycleManager
from accesskeys.keys.models import AccessKey, Project
from accesskeys.keys.query import KeyQueryService
from accesskeys.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/project/{project_id}", tags=["access-keys"])


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


_INTERNAL_ERROR = "Internal server error"


# ─── Read ─────────────────────────────────────────────────────────────────────


@router.get("/keys")
@limiter.limit(KEY_READ_RATE_LIMIT)
async def get_keys(
    request: Request,
    sort: Optional[str] = None,
    order: Optional[str] = None,
    project: Project = Depends(resolve_project),
    query: KeyQueryService = Depends(get_query_service),
) -> list[AccessKeyOut]:
    """List the project's keys (removed keys excluded, secrets never included)."""
    try:
        keys = await query.list(
            project.id,
            sort_by=sort,
            sort_descending=order == SORT_DESCENDING,
        )
    except PersistenceError:
        return _error(500, _INTERNAL_ERROR)  # type: ignore[return-value]
    return [AccessKeyOut.from_key(k) for k in keys]  # type: ignore[union-attr]


@router.get("/keys/{key_id}")
@limiter.limit(KEY_READ_RATE_LIMIT)
async def get_key(
    request: Request,
    project: Project = Depends(resolve_project),
    key: AccessKey = Depends(resolve_access_key),
    query: KeyQueryService = Depends(get_query_service),
) -> AccessKeyOut:
    resolved = await query.list(project.id, key=key)
    return AccessKeyOut.from_key(resolved)  # type: ignore[arg-type]


# ─── Mutations ────────────────────────────────────────────────────────────────


@router.post("/keys", status_code=204)
@limiter.limit(KEY_WRITE_RATE_LIMIT)
async def add_key(
    body: AccessKeyIn,
    request: Request,
    project: Project = Depends(resolve_project),
    manager: KeyLifecycleManager = Depends(get_lifecycle_manager),
) -> Response:
    """Create a key. ``body.project_id`` must equal the project in the URL."""
    try:
        await manager.create(project.id, body.to_key())
    except KeyValidationError as exc:
        logger.info(
            "access_key_rejected",
            project_id=project.id,
            code=exc.code,
        )
        return _error(400, exc.message)
    except PersistenceError:
        return _error(500, _INTERNAL_ERROR)
    return Response(status_code=204)


@router.put("/keys/{key_id}", status_code=204)
@limiter.limit(KEY_WRITE_RATE_LIMIT)
async def update_key(
    body: AccessKeyIn,
    request: Request,
    existing: AccessKey = Depends(resolve_access_key),
    manager: KeyLifecycleManager = Depends(get_lifecycle_manager),
) -> Response:
    """Update a key. An omitted or blank secret keeps the stored secret."""
    try:
        await manager.update(existing, body.to_key())
    except KeyValidationError as exc:
        logger.info(
            "access_key_rejected",
            project_id=existing.project_id,
            key_id=existing.id,
            code=exc.code,
        )
        return _error(400, exc.message)
    except KeyNotFoundError as exc:
        return _error(404, exc.message)
    except PersistenceError:
        return _error(500, _INTERNAL_ERROR)
    return Response(status_code=204)


@router.delete("/keys/{key_id}", status_code=204)
@limiter.limit(KEY_WRITE_RATE_LIMIT)
async def remove_key(
    request: Request,
    set_removed: Optional[str] = Query(None, alias="setRemoved"),
    key: AccessKey = Depends(resolve_access_key),
    manager: KeyLifecycleManager = Depends(get_lifecycle_manager),
) -> Response:
    """Delete a key.

    Without ``setRemoved`` the key is soft-deleted (flagged, still readable by
    id). Any non-empty ``setRemoved`` requests physical deletion, which is
    refused with ``inUse: true`` while inventories, repositories or templates
    reference the key.
    """
    hard = bool(set_removed)
    try:
        await manager.delete(key, hard=hard)
    except KeyInUseError as exc:
        return _error(400, exc.message, inUse=True)
    except KeyNotFoundError as exc:
        return _error(404, exc.message)
    except PersistenceError:
        return _error(500, _INTERNAL_ERROR)
    return Response(status_code=204)


# ─── Audit trail ──────────────────────────────────────────────────────────────


@router.get("/events")
@limiter.limit(KEY_READ_RATE_LIMIT)
async def get_events(
    request: Request,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    project: Project = Depends(resolve_project),
    recorder: EventRecorder = Depends(get_event_recorder),
) -> list[EventOut]:
    """Audit events of the project, newest first."""
    events = await recorder.query_events(
        EventFilters(project_id=project.id, limit=limit, offset=offset)
    )
    return [EventOut.from_event(e) for e in events]
