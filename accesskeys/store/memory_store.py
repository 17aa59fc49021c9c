"""InMemoryKeyStore - dict-backed KeyStore.

Used by tests and by ``store.provider: memory`` deployments where keys need
not survive a restart. Behaves like SQLiteKeyStore: ids are assigned
sequentially, listings exclude removed keys and mask secrets, and hard
deletion is refused while a reference is registered for the key.
"""

from __future__ import annotations

import asyncio
import dataclasses
from collections import defaultdict

from accesskeys.keys.errors import KeyInUseError, KeyNotFoundError
from accesskeys.keys.models import AccessKey
from accesskeys.store.protocol import RetrieveQueryParams


class InMemoryKeyStore:
    def __init__(self) -> None:
        self.keys: dict[int, AccessKey] = {}
        # key id -> set of (entity kind, entity id) that use the key
        self.references: defaultdict[int, set[tuple[str, int]]] = defaultdict(set)
        self._next_id = 1
        self._lock = asyncio.Lock()

    def _find(self, project_id: int, key_id: int) -> AccessKey:
        key = self.keys.get(key_id)
        if key is None or key.project_id != project_id:
            raise KeyNotFoundError()
        return key

    # dependents

    def add_reference(self, key_id: int, kind: str, entity_id: int) -> None:
        """Register an inventory/repository/template that uses ``key_id``."""
        self.references[key_id].add((kind, entity_id))

    def remove_reference(self, key_id: int, kind: str, entity_id: int) -> None:
        self.references[key_id].discard((kind, entity_id))

    # KeyStore

    async def get_by_id(self, project_id: int, key_id: int) -> AccessKey:
        return dataclasses.replace(self._find(project_id, key_id))

    async def list(
        self, project_id: int, params: RetrieveQueryParams
    ) -> list[AccessKey]:
        column = params.sort_column
        keys = [
            k for k in self.keys.values()
            if k.project_id == project_id and not k.removed
        ]
        keys.sort(key=lambda k: k.id)
        keys.sort(key=lambda k: getattr(k, column), reverse=params.sort_inverted)
        return [k.masked() for k in keys]

    async def create(self, key: AccessKey) -> AccessKey:
        async with self._lock:
            stored = dataclasses.replace(key, id=self._next_id, removed=False)
            self._next_id += 1
            self.keys[stored.id] = stored
        return dataclasses.replace(stored)

    async def update(self, key: AccessKey) -> None:
        async with self._lock:
            current = self._find(key.project_id, key.id)
            self.keys[current.id] = dataclasses.replace(
                current, name=key.name, type=key.type, secret=key.secret
            )

    async def soft_delete(self, project_id: int, key_id: int) -> None:
        async with self._lock:
            self._find(project_id, key_id).removed = True

    async def hard_delete(self, project_id: int, key_id: int) -> None:
        async with self._lock:
            self._find(project_id, key_id)
            if self.references.get(key_id):
                raise KeyInUseError()
            del self.keys[key_id]
            self.references.pop(key_id, None)

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass
