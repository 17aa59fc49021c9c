"""KeyStore Protocol + RetrieveQueryParams dataclass.

Layout:
    protocol.py      - KeyStore Protocol + RetrieveQueryParams
    sqlite_store.py  - SQLiteKeyStore (aiosqlite, WAL, PRAGMA version guard)
    memory_store.py  - InMemoryKeyStore (tests, ephemeral deployments)
    factory.py       - create_key_store() - backend selection from config

Implementations serialize conflicting writes themselves; callers take no locks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from accesskeys.constants import DEFAULT_KEY_SORT_COLUMN, SORTABLE_KEY_COLUMNS
from accesskeys.keys.models import AccessKey


# ─── RetrieveQueryParams ─────────────────────────────────────────────────────


@dataclass
class RetrieveQueryParams:
    """Sort parameters for KeyStore.list()."""

    sort_by: Optional[str] = None
    """Requested sort column. Unrecognized values fall back to the default."""
    sort_inverted: bool = False
    """True for descending order."""

    @property
    def sort_column(self) -> str:
        """Whitelisted column to order by."""
        if self.sort_by in SORTABLE_KEY_COLUMNS:
            return self.sort_by  # type: ignore[return-value]
        return DEFAULT_KEY_SORT_COLUMN


# ─── KeyStore Protocol ───────────────────────────────────────────────────────


@runtime_checkable
class KeyStore(Protocol):
    """Durable CRUD for access keys.

    Implementations: SQLiteKeyStore (default), InMemoryKeyStore.

    Failures below the key domain (I/O, driver errors) are raised as
    StoreError. Outcomes of the key domain are raised as KeyNotFoundError and
    KeyInUseError.
    """

    async def get_by_id(self, project_id: int, key_id: int) -> AccessKey:
        """Return the key, including its secret and soft-deleted keys.

        Raises KeyNotFoundError if no key with that id exists in the project.
        """
        ...

    async def list(
        self, project_id: int, params: RetrieveQueryParams
    ) -> list[AccessKey]:
        """Return the project's keys, soft-deleted ones excluded.

        Secrets are NEVER included in listing results.
        """
        ...

    async def create(self, key: AccessKey) -> AccessKey:
        """Insert the key and return it with its assigned id."""
        ...

    async def update(self, key: AccessKey) -> None:
        """Overwrite name, type and secret of an existing key.

        Raises KeyNotFoundError if the key does not exist.
        """
        ...

    async def soft_delete(self, project_id: int, key_id: int) -> None:
        """Set the removed flag. The record is retained."""
        ...

    async def hard_delete(self, project_id: int, key_id: int) -> None:
        """Physically remove the key.

        Raises KeyInUseError, leaving the key intact, if any inventory,
        repository or template references it.
        """
        ...

    async def health_check(self) -> bool:
        """Returns True if the store is operational. Must not raise."""
        ...

    async def close(self) -> None:
        ...
