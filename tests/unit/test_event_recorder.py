"""Unit tests for the EventRecorder backends.

Covers LocalSQLiteRecorder and InMemoryRecorder through the same scenarios
via the parametrized ``event_recorder`` fixture, plus backend-specific
behaviour (schema guard, uninitialized writes, NullEventRecorder).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import AsyncGenerator

import aiosqlite
import pytest

from accesskeys.events.memory_backend import InMemoryRecorder
from accesskeys.events.models import Event
from accesskeys.events.protocol import (
    EventFilters,
    EventRecorder,
    EventWriteError,
    NullEventRecorder,
)
from accesskeys.events.sqlite_backend import LocalSQLiteRecorder, _build_select_sql

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(params=["sqlite", "memory"])
async def event_recorder(request, tmp_path: Path) -> AsyncGenerator[EventRecorder, None]:
    if request.param == "sqlite":
        recorder = LocalSQLiteRecorder(str(tmp_path / "events.db"))
        await recorder.initialize()
    else:
        recorder = InMemoryRecorder()
    yield recorder
    await recorder.close()


def _event(project_id: int = 7, object_id: int = 1, minutes: int = 0, name: str = "deploy") -> Event:
    return Event(
        project_id=project_id,
        object_id=object_id,
        description=f"Access Key {name} created",
        created=T0 + timedelta(minutes=minutes),
    )


# ─── Shared behaviour ─────────────────────────────────────────────────────────


class TestRecorderContract:
    async def test_satisfies_protocol(self, event_recorder: EventRecorder) -> None:
        assert isinstance(event_recorder, EventRecorder)

    async def test_record_assigns_id(self, event_recorder: EventRecorder) -> None:
        first = await event_recorder.record(_event())
        second = await event_recorder.record(_event(object_id=2))
        assert first.id is not None
        assert second.id is not None
        assert first.id != second.id

    async def test_round_trip_fields(self, event_recorder: EventRecorder) -> None:
        await event_recorder.record(_event(object_id=3))

        events = await event_recorder.query_events(EventFilters(project_id=7))

        assert len(events) == 1
        event = events[0]
        assert event.project_id == 7
        assert event.object_type == "key"
        assert event.object_id == 3
        assert event.description == "Access Key deploy created"
        assert event.created == T0

    async def test_newest_first(self, event_recorder: EventRecorder) -> None:
        for minutes, name in ((0, "a"), (10, "c"), (5, "b")):
            await event_recorder.record(_event(minutes=minutes, name=name))

        events = await event_recorder.query_events(EventFilters(project_id=7))

        assert [e.description for e in events] == [
            "Access Key c created",
            "Access Key b created",
            "Access Key a created",
        ]

    async def test_project_filter(self, event_recorder: EventRecorder) -> None:
        await event_recorder.record(_event(project_id=7))
        await event_recorder.record(_event(project_id=9))

        events = await event_recorder.query_events(EventFilters(project_id=9))

        assert [e.project_id for e in events] == [9]

    async def test_object_filter(self, event_recorder: EventRecorder) -> None:
        await event_recorder.record(_event(object_id=1))
        await event_recorder.record(_event(object_id=2))

        events = await event_recorder.query_events(EventFilters(object_type="key", object_id=2))

        assert [e.object_id for e in events] == [2]

    async def test_since_filter(self, event_recorder: EventRecorder) -> None:
        await event_recorder.record(_event(minutes=0))
        await event_recorder.record(_event(minutes=30))

        events = await event_recorder.query_events(
            EventFilters(since=T0 + timedelta(minutes=15))
        )

        assert [e.created for e in events] == [T0 + timedelta(minutes=30)]

    async def test_pagination_pages_are_disjoint(self, event_recorder: EventRecorder) -> None:
        for minutes in range(5):
            await event_recorder.record(_event(minutes=minutes))

        page_1 = await event_recorder.query_events(EventFilters(limit=2, offset=0))
        page_2 = await event_recorder.query_events(EventFilters(limit=2, offset=2))

        assert len(page_1) == 2
        assert len(page_2) == 2
        assert {e.id for e in page_1}.isdisjoint({e.id for e in page_2})

    async def test_health_check(self, event_recorder: EventRecorder) -> None:
        assert await event_recorder.health_check() is True


# ─── LocalSQLiteRecorder specifics ────────────────────────────────────────────


class TestLocalSQLiteRecorder:
    async def test_record_before_initialize_raises(self, tmp_path: Path) -> None:
        recorder = LocalSQLiteRecorder(str(tmp_path / "events.db"))
        with pytest.raises(EventWriteError):
            await recorder.record(_event())

    async def test_unsupported_schema_version_refused(self, tmp_path: Path) -> None:
        path = str(tmp_path / "events.db")
        async with aiosqlite.connect(path) as db:
            await db.execute("PRAGMA user_version = 2;")
            await db.commit()

        with pytest.raises(RuntimeError, match="schema version"):
            await LocalSQLiteRecorder(path).initialize()

    async def test_events_survive_reopen(self, tmp_path: Path) -> None:
        path = str(tmp_path / "events.db")
        first = LocalSQLiteRecorder(path)
        await first.initialize()
        await first.record(_event())
        await first.close()

        second = LocalSQLiteRecorder(path)
        await second.initialize()
        events = await second.query_events(EventFilters())
        await second.close()
        assert len(events) == 1

    async def test_health_check_false_after_close(self, tmp_path: Path) -> None:
        recorder = LocalSQLiteRecorder(str(tmp_path / "events.db"))
        await recorder.initialize()
        await recorder.close()
        assert await recorder.health_check() is False


class TestBuildSelectSql:
    def test_no_filters(self) -> None:
        sql, params = _build_select_sql(EventFilters())
        assert "WHERE" not in sql
        assert sql.endswith("ORDER BY created DESC, id DESC LIMIT ? OFFSET ?")
        assert params == [50, 0]

    def test_filters_are_parameterized(self) -> None:
        sql, params = _build_select_sql(EventFilters(project_id=7, object_type="key", object_id=3))
        assert "project_id = ?" in sql
        assert "object_type = ?" in sql
        assert "object_id = ?" in sql
        assert params == [7, "key", 3, 50, 0]


# ─── NullEventRecorder ────────────────────────────────────────────────────────


class TestNullEventRecorder:
    async def test_record_returns_event_unchanged(self) -> None:
        event = _event()
        assert await NullEventRecorder().record(event) is event

    async def test_query_returns_nothing(self) -> None:
        recorder = NullEventRecorder()
        await recorder.record(_event())
        assert await recorder.query_events(EventFilters()) == []
