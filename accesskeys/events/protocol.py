"""EventRecorder Protocol + EventFilters dataclass.

Event is defined in accesskeys/events/models.py.

Layout:
    models.py          - Event
    protocol.py        - EventRecorder Protocol + EventFilters + EventWriteError
                         + NullEventRecorder
    sqlite_backend.py  - LocalSQLiteRecorder (aiosqlite, WAL, PRAGMA version guard)
    memory_backend.py  - InMemoryRecorder
    factory.py         - create_event_recorder() - backend selection from config
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from accesskeys.events.models import Event
from accesskeys.utils.logger import get_logger

logger = get_logger(__name__)


class EventWriteError(Exception):
    """Raised by EventRecorder.record() when the event could not be persisted.

    The lifecycle manager catches and logs it; it never fails a key mutation.
    """

    code: str = "audit_write_failed"

    def __init__(self, message: str = "Audit event could not be recorded") -> None:
        super().__init__(message)
        self.message = message


# ─── EventFilters ─────────────────────────────────────────────────────────────


@dataclass
class EventFilters:
    """Query filters for EventRecorder.query_events().

    An empty EventFilters() returns the newest 50 events of every project.
    """

    project_id: Optional[int] = None
    object_type: Optional[str] = None
    object_id: Optional[int] = None
    since: Optional[datetime] = None
    """Include events created at or after this time (UTC)."""
    limit: int = 50
    offset: int = 0


# ─── EventRecorder Protocol ───────────────────────────────────────────────────


@runtime_checkable
class EventRecorder(Protocol):
    """Append-only audit trail.

    Implementations: LocalSQLiteRecorder (default), InMemoryRecorder,
    NullEventRecorder.

    record() runs after the key mutation has committed. Its failure is the
    caller's to log; nothing is rolled back.
    """

    async def record(self, event: Event) -> Event:
        """Persist the event and return it with its assigned id.

        Raises EventWriteError on failure.
        """
        ...

    async def query_events(self, filters: EventFilters) -> list[Event]:
        """Return matching events, newest first."""
        ...

    async def health_check(self) -> bool:
        """Returns True if the recorder is operational. Must not raise."""
        ...

    async def close(self) -> None:
        ...


# ─── NullEventRecorder ───────────────────────────────────────────────────────


class NullEventRecorder:
    """No-op EventRecorder - ``events.provider: null`` and test fixtures."""

    async def record(self, event: Event) -> Event:
        logger.debug("NullEventRecorder.record (discarded)", description=event.description)
        return event

    async def query_events(self, filters: EventFilters) -> list[Event]:
        return []

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass


# NullEventRecorder must satisfy the protocol; checked at import time.
assert isinstance(NullEventRecorder(), EventRecorder), (
    "NullEventRecorder does not satisfy EventRecorder protocol - implementation error"
)
