"""SQLiteKeyStore - aiosqlite-based async KeyStore.

Features:
  - Long-lived connection: opened in initialize(), closed in close()
  - WAL mode: PRAGMA journal_mode=WAL
  - Schema version guard: PRAGMA user_version=1, RuntimeError on mismatch
  - os.chmod(db_path, 0o600) on every initialize() - the file holds secrets
  - Referential check on hard delete against inventory, repository and
    template rows that point at the key

Writes are serialized with an asyncio.Lock so the reference check and the
DELETE of hard_delete() cannot interleave with another write on the same
connection.
"""

from __future__ import annotations

import asyncio
import os
from typing import Optional

import aiosqlite

from accesskeys.constants import KEY_REFERENCE_COLUMNS
from accesskeys.keys.errors import KeyInUseError, KeyNotFoundError, StoreError
from accesskeys.keys.models import AccessKey
from accesskeys.store.protocol import RetrieveQueryParams
from accesskeys.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Schema DDL ───────────────────────────────────────────────────────────────

_CREATE_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS access_key (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id  INTEGER NOT NULL,
    name        TEXT NOT NULL,
    type        TEXT NOT NULL CHECK(type IN ('ssh', 'aws', 'gcloud', 'do')),
    secret      TEXT,
    removed     INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_access_key_project
    ON access_key(project_id, removed);

CREATE TABLE IF NOT EXISTS inventory (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id      INTEGER NOT NULL,
    name            TEXT NOT NULL,
    ssh_key_id      INTEGER REFERENCES access_key(id),
    become_key_id   INTEGER REFERENCES access_key(id)
);

CREATE TABLE IF NOT EXISTS repository (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id  INTEGER NOT NULL,
    name        TEXT NOT NULL,
    ssh_key_id  INTEGER REFERENCES access_key(id)
);

CREATE TABLE IF NOT EXISTS template (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id    INTEGER NOT NULL,
    name          TEXT NOT NULL,
    vault_key_id  INTEGER REFERENCES access_key(id)
);
"""

_SCHEMA_VERSION = 1

_KEY_COLUMNS = "id, project_id, name, type, secret, removed"


def _row_to_access_key(row: aiosqlite.Row, with_secret: bool = True) -> AccessKey:
    return AccessKey(
        id=row["id"],
        project_id=row["project_id"],
        name=row["name"],
        type=row["type"],
        secret=row["secret"] if with_secret else None,
        removed=bool(row["removed"]),
    )


class SQLiteKeyStore:
    """Async SQLite KeyStore.

    Usage:
        store = SQLiteKeyStore("~/.accesskeys/keys.db")
        await store.initialize()   # RuntimeError on schema version mismatch
        key = await store.create(AccessKey(name="deploy", type="ssh", ...))
        await store.close()
    """

    def __init__(self, db_path: str = "~/.accesskeys/keys.db") -> None:
        self._db_path: str = os.path.expanduser(db_path)
        self._db: Optional[aiosqlite.Connection] = None
        self._write_lock = asyncio.Lock()

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
                "key_store_schema_created",
                db_path=self._db_path,
                schema_version=_SCHEMA_VERSION,
            )
        elif current_version == _SCHEMA_VERSION:
            logger.info(
                "key_store_schema_ok",
                db_path=self._db_path,
                schema_version=current_version,
            )
        else:
            await self._db.close()
            self._db = None
            raise RuntimeError(
                f"Unsupported key store schema version: {current_version}. "
                f"Expected {_SCHEMA_VERSION}; migrate or move {self._db_path} aside."
            )

        os.chmod(self._db_path, 0o600)

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None
            logger.debug("key_store_closed", db_path=self._db_path)

    def _conn(self) -> aiosqlite.Connection:
        if self._db is None:
            raise StoreError("Key store not initialized - call initialize() first")
        return self._db

    # ── KeyStore Protocol Methods ─────────────────────────────────────────────

    async def get_by_id(self, project_id: int, key_id: int) -> AccessKey:
        try:
            cursor = await self._conn().execute(
                f"SELECT {_KEY_COLUMNS} FROM access_key WHERE project_id = ? AND id = ?",
                (project_id, key_id),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StoreError(f"get_by_id failed: {exc}") from exc

        if row is None:
            raise KeyNotFoundError()
        return _row_to_access_key(row)

    async def list(
        self, project_id: int, params: RetrieveQueryParams
    ) -> list[AccessKey]:
        # sort_column is whitelisted - safe to interpolate
        direction = "DESC" if params.sort_inverted else "ASC"
        sql = (
            f"SELECT {_KEY_COLUMNS} FROM access_key "
            "WHERE project_id = ? AND removed = 0 "
            f"ORDER BY {params.sort_column} {direction}, id ASC"
        )
        try:
            cursor = await self._conn().execute(sql, (project_id,))
            rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise StoreError(f"list failed: {exc}") from exc
        return [_row_to_access_key(row, with_secret=False) for row in rows]

    async def create(self, key: AccessKey) -> AccessKey:
        async with self._write_lock:
            db = self._conn()
            try:
                cursor = await db.execute(
                    "INSERT INTO access_key (project_id, name, type, secret, removed) "
                    "VALUES (?, ?, ?, ?, 0)",
                    (key.project_id, key.name, key.type, key.secret),
                )
                await db.commit()
            except aiosqlite.Error as exc:
                await db.rollback()
                raise StoreError(f"create failed: {exc}") from exc

        return AccessKey(
            id=cursor.lastrowid,
            project_id=key.project_id,
            name=key.name,
            type=key.type,
            secret=key.secret,
        )

    async def update(self, key: AccessKey) -> None:
        async with self._write_lock:
            db = self._conn()
            try:
                cursor = await db.execute(
                    "UPDATE access_key SET name = ?, type = ?, secret = ? "
                    "WHERE project_id = ? AND id = ?",
                    (key.name, key.type, key.secret, key.project_id, key.id),
                )
                await db.commit()
            except aiosqlite.Error as exc:
                await db.rollback()
                raise StoreError(f"update failed: {exc}") from exc

        if cursor.rowcount == 0:
            raise KeyNotFoundError()

    async def soft_delete(self, project_id: int, key_id: int) -> None:
        async with self._write_lock:
            db = self._conn()
            try:
                cursor = await db.execute(
                    "UPDATE access_key SET removed = 1 WHERE project_id = ? AND id = ?",
                    (project_id, key_id),
                )
                await db.commit()
            except aiosqlite.Error as exc:
                await db.rollback()
                raise StoreError(f"soft_delete failed: {exc}") from exc

        if cursor.rowcount == 0:
            raise KeyNotFoundError()

    async def hard_delete(self, project_id: int, key_id: int) -> None:
        async with self._write_lock:
            db = self._conn()
            try:
                if await self._is_referenced(db, project_id, key_id):
                    raise KeyInUseError()
                cursor = await db.execute(
                    "DELETE FROM access_key WHERE project_id = ? AND id = ?",
                    (project_id, key_id),
                )
                await db.commit()
            except aiosqlite.Error as exc:
                await db.rollback()
                raise StoreError(f"hard_delete failed: {exc}") from exc

        if cursor.rowcount == 0:
            raise KeyNotFoundError()

    async def health_check(self) -> bool:
        try:
            await self._conn().execute("SELECT 1")
            return True
        except Exception:
            return False

    # ── Helpers ───────────────────────────────────────────────────────────────

    @staticmethod
    async def _is_referenced(
        db: aiosqlite.Connection, project_id: int, key_id: int
    ) -> bool:
        for table, column in KEY_REFERENCE_COLUMNS:
            cursor = await db.execute(
                f"SELECT 1 FROM {table} WHERE project_id = ? AND {column} = ? LIMIT 1",
                (project_id, key_id),
            )
            if await cursor.fetchone() is not None:
                logger.debug(
                    "access_key_referenced",
                    key_id=key_id,
                    table=table,
                    column=column,
                )
                return True
        return False
