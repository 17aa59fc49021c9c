"""LocalSQLiteRecorder - aiosqlite-based async EventRecorder.

Features:
  - WAL mode: PRAGMA journal_mode=WAL
  - Schema version guard: PRAGMA user_version=1 - RuntimeError on mismatch, refuse startup
  - Long-lived connection: opened in initialize(), closed in close()
  - Append-only: the recorder exposes no UPDATE or DELETE path

Unlike the key store, record() raises EventWriteError on failure. Deciding
that an audit failure is non-fatal belongs to the caller.
"""

from __future__ import annotations

import os
from datetime import datetime
from typing import Any, Optional

import aiosqlite

from accesskeys.events.models import Event
from accesskeys.events.protocol import EventFilters, EventWriteError
from accesskeys.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Schema DDL ───────────────────────────────────────────────────────────────

_CREATE_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS event (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id   INTEGER,
    object_type  TEXT,
    object_id    INTEGER,
    description  TEXT NOT NULL,
    created      TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_event_project_created
    ON event(project_id, created DESC);

CREATE INDEX IF NOT EXISTS idx_event_object
    ON event(object_type, object_id);
"""

_SCHEMA_VERSION = 1


def _row_to_event(row: aiosqlite.Row) -> Event:
    return Event(
        id=row["id"],
        project_id=row["project_id"],
        object_type=row["object_type"],
        object_id=row["object_id"],
        description=row["description"],
        created=datetime.fromisoformat(row["created"]),
    )


class LocalSQLiteRecorder:
    """Async SQLite audit trail.

    Usage:
        recorder = LocalSQLiteRecorder("~/.accesskeys/events.db")
        await recorder.initialize()
        await recorder.record(Event(project_id=7, description="..."))
        events = await recorder.query_events(EventFilters(project_id=7))
        await recorder.close()
    """

    def __init__(self, db_path: str = "~/.accesskeys/events.db") -> None:
        self._db_path: str = os.path.expanduser(db_path)
        self._db: Optional[aiosqlite.Connection] = None

    @property
    def db_path(self) -> str:
        return self._db_path

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def initialize(self) -> None:
        """Open the connection, enable WAL, and create or verify the schema.

        Raises:
            RuntimeError: If PRAGMA user_version is neither 0 nor 1.
        """
        parent_dir = os.path.dirname(self._db_path)
        if parent_dir:
            os.makedirs(parent_dir, exist_ok=True)

        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.execute("PRAGMA journal_mode=WAL;")

        cursor = await self._db.execute("PRAGMA user_version;")
        row = await cursor.fetchone()
        current_version: int = row[0] if row else 0

        if current_version == 0:
            await self._db.executescript(_CREATE_SCHEMA_SQL)
            await self._db.execute(f"PRAGMA user_version = {_SCHEMA_VERSION};")
            await self._db.commit()
            logger.info(
                "event_db_schema_created",
                db_path=self._db_path,
                schema_version=_SCHEMA_VERSION,
            )
        elif current_version == _SCHEMA_VERSION:
            logger.info(
                "event_db_schema_ok",
                db_path=self._db_path,
                schema_version=current_version,
            )
        else:
            await self._db.close()
            self._db = None
            raise RuntimeError(
                f"Unsupported event database schema version: {current_version}. "
                f"Expected {_SCHEMA_VERSION}; migrate or move {self._db_path} aside."
            )

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None
            logger.debug("event_db_closed", db_path=self._db_path)

    # ── EventRecorder Protocol Methods ────────────────────────────────────────

    async def record(self, event: Event) -> Event:
        if self._db is None:
            raise EventWriteError("Event recorder not initialized - call initialize() first")
        try:
            cursor = await self._db.execute(
                "INSERT INTO event (project_id, object_type, object_id, description, created) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    event.project_id,
                    event.object_type,
                    event.object_id,
                    event.description,
                    event.created.isoformat(),
                ),
            )
            await self._db.commit()
        except aiosqlite.Error as exc:
            raise EventWriteError(f"Audit event insert failed: {exc}") from exc

        return Event(
            id=cursor.lastrowid,
            project_id=event.project_id,
            object_type=event.object_type,
            object_id=event.object_id,
            description=event.description,
            created=event.created,
        )

    async def query_events(self, filters: EventFilters) -> list[Event]:
        assert self._db is not None, "Database not initialized"
        sql, params = _build_select_sql(filters)
        cursor = await self._db.execute(sql, params)
        rows = await cursor.fetchall()
        return [_row_to_event(row) for row in rows]

    async def health_check(self) -> bool:
        try:
            assert self._db is not None
            await self._db.execute("SELECT 1")
            return True
        except Exception:
            return False


# ─── SQL Builder Helper ───────────────────────────────────────────────────────


def _build_select_sql(filters: EventFilters) -> tuple[str, list[Any]]:
    """Build a parameterized SELECT from EventFilters, newest first."""
    sql = "SELECT * FROM event"
    conditions: list[str] = []
    params: list[Any] = []

    if filters.project_id is not None:
        conditions.append("project_id = ?")
        params.append(filters.project_id)

    if filters.object_type is not None:
        conditions.append("object_type = ?")
        params.append(filters.object_type)

    if filters.object_id is not None:
        conditions.append("object_id = ?")
        params.append(filters.object_id)

    if filters.since is not None:
        conditions.append("created >= ?")
        params.append(filters.since.isoformat())

    if conditions:
        sql += " WHERE " + " AND ".join(conditions)

    sql += " ORDER BY created DESC, id DESC LIMIT ? OFFSET ?"
    params.extend([filters.limit, filters.offset])
    return sql, params
