"""Unit tests for accesskeys/store/memory_store.py - InMemoryKeyStore."""

from __future__ import annotations

import pytest

from accesskeys.keys.errors import KeyInUseError, KeyNotFoundError
from accesskeys.keys.models import AccessKey
from accesskeys.store.memory_store import InMemoryKeyStore
from accesskeys.store.protocol import KeyStore, RetrieveQueryParams


def test_satisfies_protocol() -> None:
    assert isinstance(InMemoryKeyStore(), KeyStore)


class TestCrud:
    async def test_ids_are_sequential(self, memory_store: InMemoryKeyStore) -> None:
        a = await memory_store.create(AccessKey(name="a", type="ssh", project_id=7, secret="s\n"))
        b = await memory_store.create(AccessKey(name="b", type="aws", project_id=7))
        assert (a.id, b.id) == (1, 2)

    async def test_returned_key_is_a_copy(self, memory_store: InMemoryKeyStore) -> None:
        created = await memory_store.create(AccessKey(name="a", type="ssh", project_id=7, secret="s\n"))
        created.name = "mutated"

        stored = await memory_store.get_by_id(7, created.id)  # type: ignore[arg-type]

        assert stored.name == "a"

    async def test_get_by_id_is_project_scoped(self, memory_store: InMemoryKeyStore) -> None:
        created = await memory_store.create(AccessKey(name="a", type="ssh", project_id=7, secret="s\n"))

        with pytest.raises(KeyNotFoundError):
            await memory_store.get_by_id(9, created.id)  # type: ignore[arg-type]

    async def test_update_unknown_key_raises(self, memory_store: InMemoryKeyStore) -> None:
        with pytest.raises(KeyNotFoundError):
            await memory_store.update(AccessKey(id=5, name="x", type="ssh", project_id=7))

    async def test_update_keeps_removed_flag(self, memory_store: InMemoryKeyStore) -> None:
        created = await memory_store.create(AccessKey(name="a", type="aws", project_id=7))
        await memory_store.soft_delete(7, created.id)  # type: ignore[arg-type]

        await memory_store.update(AccessKey(id=created.id, name="b", type="aws", project_id=7))

        stored = await memory_store.get_by_id(7, created.id)  # type: ignore[arg-type]
        assert stored.name == "b"
        assert stored.removed is True


class TestListing:
    async def test_ties_broken_by_id(self, memory_store: InMemoryKeyStore) -> None:
        for name in ("z", "y", "x"):
            await memory_store.create(AccessKey(name=name, type="ssh", project_id=7, secret="s\n"))

        keys = await memory_store.list(7, RetrieveQueryParams(sort_by="type"))

        assert [k.id for k in keys] == [1, 2, 3]

    async def test_descending_by_name(self, memory_store: InMemoryKeyStore) -> None:
        for name in ("b", "c", "a"):
            await memory_store.create(AccessKey(name=name, type="aws", project_id=7))

        keys = await memory_store.list(7, RetrieveQueryParams(sort_inverted=True))

        assert [k.name for k in keys] == ["c", "b", "a"]


class TestHardDelete:
    async def test_referenced_key_not_deleted(self, memory_store: InMemoryKeyStore) -> None:
        created = await memory_store.create(AccessKey(name="a", type="ssh", project_id=7, secret="s\n"))
        memory_store.add_reference(created.id, "inventory", 1)  # type: ignore[arg-type]

        with pytest.raises(KeyInUseError):
            await memory_store.hard_delete(7, created.id)  # type: ignore[arg-type]

        assert created.id in memory_store.keys

    async def test_unknown_key_raises_not_found(self, memory_store: InMemoryKeyStore) -> None:
        with pytest.raises(KeyNotFoundError):
            await memory_store.hard_delete(7, 99)


def test_sort_column_whitelist() -> None:
    assert RetrieveQueryParams(sort_by="type").sort_column == "type"
    assert RetrieveQueryParams(sort_by="name").sort_column == "name"
    assert RetrieveQueryParams(sort_by="secret").sort_column == "name"
    assert RetrieveQueryParams().sort_column == "name"
