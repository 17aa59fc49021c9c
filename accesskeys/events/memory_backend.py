"""InMemoryRecorder - list-backed EventRecorder for tests and ephemeral runs."""

from __future__ import annotations

import dataclasses

from accesskeys.events.models import Event
from accesskeys.events.protocol import EventFilters


class InMemoryRecorder:
    def __init__(self) -> None:
        self.events: list[Event] = []

    async def record(self, event: Event) -> Event:
        stored = dataclasses.replace(event, id=len(self.events) + 1)
        self.events.append(stored)
        return stored

    async def query_events(self, filters: EventFilters) -> list[Event]:
        newest_first = sorted(self.events, key=lambda e: (e.created, e.id), reverse=True)
        matches = [
            e for e in newest_first
            if (filters.project_id is None or e.project_id == filters.project_id)
            and (filters.object_type is None or e.object_type == filters.object_type)
            and (filters.object_id is None or e.object_id == filters.object_id)
            and (filters.since is None or e.created >= filters.since)
        ]
        return matches[filters.offset:filters.offset + filters.limit]

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass
