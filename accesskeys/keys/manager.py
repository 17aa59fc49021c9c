"""Access key lifecycle: create, update, soft/hard delete.

KeyLifecycleManager owns the policy between the HTTP layer and the
collaborators:

  create(project_id, candidate)
    project check → validate_key → normalize_secret → store.create → event
  update(existing, candidate)
    validate_key → type/project identity check → secret merge → store.update → event
  delete(key, hard=False)
    store.soft_delete | store.hard_delete → event

Every validation runs before the store is touched; a rejected candidate
produces zero store calls.

Audit events are written after the store call returns. A failing recorder is
logged as ``event_record_failed`` and the mutation still succeeds, on all
three paths alike. Store failures are not retried.
"""

from __future__ import annotations

import dataclasses

from accesskeys.constants import EVENT_KEY_CREATED, EVENT_KEY_DELETED, EVENT_KEY_UPDATED
from accesskeys.events.models import Event
from accesskeys.events.protocol import EventRecorder
from accesskeys.keys.errors import (
    KeyInUseError,
    KeyTypeChangeError,
    PersistenceError,
    ProjectMismatchError,
    StoreError,
)
from accesskeys.keys.models import AccessKey
from accesskeys.keys.secrets import normalize_secret
from accesskeys.keys.validator import validate_key
from accesskeys.store.protocol import KeyStore
from accesskeys.utils.logger import get_logger

logger = get_logger(__name__)


class KeyLifecycleManager:
    """Orchestrates key mutations against a KeyStore and an EventRecorder."""

    def __init__(self, store: KeyStore, recorder: EventRecorder) -> None:
        self._store = store
        self._recorder = recorder

    # ── Create ────────────────────────────────────────────────────────────────

    async def create(self, project_id: int, candidate: AccessKey) -> AccessKey:
        """Persist a new key under ``project_id``.

        Args:
            project_id: Project resolved from the request context.
            candidate:  Key as received; ``candidate.project_id`` must equal
                        ``project_id``.

        Returns:
            The stored key with its assigned id and normalized secret.

        Raises:
            ProjectMismatchError: Payload project differs from ``project_id``.
            KeyValidationError:   Invalid type or empty SSH secret.
            PersistenceError:     The store failed.
        """
        if candidate.project_id != project_id:
            raise ProjectMismatchError()

        validate_key(candidate)

        key = dataclasses.replace(
            candidate,
            id=None,
            removed=False,
            secret=normalize_secret(candidate.secret) if candidate.has_secret else None,
        )

        try:
            created = await self._store.create(key)
        except StoreError as exc:
            logger.error("access_key_create_failed", project_id=project_id, error=str(exc))
            raise PersistenceError() from exc

        logger.info(
            "access_key_created",
            project_id=created.project_id,
            key_id=created.id,
            key_type=created.type,
        )
        await self._record_event(
            Event(
                project_id=created.project_id,
                object_id=created.id,
                description=EVENT_KEY_CREATED.format(name=created.name),
            )
        )
        return created

    # ── Update ────────────────────────────────────────────────────────────────

    async def update(self, existing: AccessKey, candidate: AccessKey) -> AccessKey:
        """Replace name and (optionally) secret of ``existing``.

        An absent or blank (whitespace-only) ``candidate.secret`` keeps the
        stored secret byte-for-byte; a supplied one is normalized and
        replaces it.
        Identity (id, project_id) always comes from ``existing``.

        Raises:
            KeyValidationError:   Invalid type, empty SSH secret, a type change,
                                  or a payload project other than the key's.
            KeyNotFoundError:     The key vanished before the write.
            PersistenceError:     The store failed.
        """
        validate_key(candidate)

        if candidate.project_id is not None and candidate.project_id != existing.project_id:
            raise ProjectMismatchError()
        if candidate.type != existing.type:
            raise KeyTypeChangeError()

        if candidate.has_secret:
            secret = normalize_secret(candidate.secret)  # type: ignore[arg-type]
        else:
            secret = existing.secret

        key = AccessKey(
            id=existing.id,
            project_id=existing.project_id,
            name=candidate.name,
            type=candidate.type,
            secret=secret,
            removed=existing.removed,
        )

        try:
            await self._store.update(key)
        except StoreError as exc:
            logger.error(
                "access_key_update_failed",
                project_id=existing.project_id,
                key_id=existing.id,
                error=str(exc),
            )
            raise PersistenceError() from exc

        logger.info(
            "access_key_updated",
            project_id=existing.project_id,
            key_id=existing.id,
            secret_replaced=candidate.has_secret,
        )
        await self._record_event(
            Event(
                project_id=existing.project_id,
                object_id=existing.id,
                description=EVENT_KEY_UPDATED.format(name=key.name),
            )
        )
        return key

    # ── Delete ────────────────────────────────────────────────────────────────

    async def delete(self, key: AccessKey, hard: bool = False) -> None:
        """Remove ``key``.

        Soft (default): the key is flagged removed and stays retrievable by id.
        Hard: the key is physically deleted unless something references it.

        Raises:
            KeyInUseError:    Hard delete blocked by a dependent; key intact.
            KeyNotFoundError: The key no longer exists.
            PersistenceError: The store failed.
        """
        try:
            if hard:
                await self._store.hard_delete(key.project_id, key.id)  # type: ignore[arg-type]
            else:
                await self._store.soft_delete(key.project_id, key.id)  # type: ignore[arg-type]
        except KeyInUseError:
            logger.info(
                "access_key_delete_blocked",
                project_id=key.project_id,
                key_id=key.id,
            )
            raise
        except StoreError as exc:
            logger.error(
                "access_key_delete_failed",
                project_id=key.project_id,
                key_id=key.id,
                hard=hard,
                error=str(exc),
            )
            raise PersistenceError() from exc

        logger.info(
            "access_key_deleted",
            project_id=key.project_id,
            key_id=key.id,
            hard=hard,
        )
        await self._record_event(
            Event(
                project_id=key.project_id,
                object_id=key.id,
                description=EVENT_KEY_DELETED.format(name=key.name),
            )
        )

    # ── Audit ─────────────────────────────────────────────────────────────────

    async def _record_event(self, event: Event) -> None:
        """Write an audit event. Failures are logged, never raised."""
        try:
            await self._recorder.record(event)
        except Exception as exc:
            logger.error(
                "event_record_failed",
                project_id=event.project_id,
                object_id=event.object_id,
                description=event.description,
                error=str(exc),
                error_type=type(exc).__name__,
            )
