"""FastAPI dependencies that resolve request context before dispatch.

  resolve_project()     - the project the request operates under
  resolve_access_key()  - loads {key_id} within that project, 404 if absent

The lifecycle core never reads request state; these dependencies resolve it
and the handlers pass project and key to the core as plain arguments.

Caller authentication and project authorization happen upstream of this
service; resolve_project() trusts the path it is given. Deployments that
authorize here override it via ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from accesskeys.events.protocol import EventRecorder
from accesskeys.keys.errors import KeyNotFoundError, StoreError
from accesskeys.keys.manager import KeyLifecycleManager
from accesskeys.keys.models import AccessKey, Project
from accesskeys.keys.query import KeyQueryService
from accesskeys.store.protocol import KeyStore
from accesskeys.utils.logger import get_logger

logger = get_logger(__name__)


def get_key_store(request: Request) -> KeyStore:
    return request.app.state.key_store


def get_event_recorder(request: Request) -> EventRecorder:
    return request.app.state.event_recorder


def get_lifecycle_manager(
    store: KeyStore = Depends(get_key_store),
    recorder: EventRecorder = Depends(get_event_recorder),
) -> KeyLifecycleManager:
    return KeyLifecycleManager(store, recorder)


def get_query_service(store: KeyStore = Depends(get_key_store)) -> KeyQueryService:
    return KeyQueryService(store)


async def resolve_project(project_id: int) -> Project:
    return Project(id=project_id)


async def resolve_access_key(
    key_id: int,
    project: Project = Depends(resolve_project),
    store: KeyStore = Depends(get_key_store),
) -> AccessKey:
    """Load the key named in the path, scoped to the resolved project.

    Raises:
        HTTPException(404): No such key in this project.
        HTTPException(500): The store failed.
    """
    try:
        return await store.get_by_id(project.id, key_id)
    except KeyNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except StoreError as exc:
        logger.error(
            "access_key_lookup_failed",
            project_id=project.id,
            key_id=key_id,
            error=str(exc),
        )
        raise HTTPException(status_code=500, detail="Internal server error") from exc
