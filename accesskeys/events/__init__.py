"""Audit event package.

    from accesskeys.events import Event, EventRecorder, EventFilters
"""

from accesskeys.events.memory_backend import InMemoryRecorder
from accesskeys.events.models import Event
from accesskeys.events.protocol import (
    EventFilters,
    EventRecorder,
    EventWriteError,
    NullEventRecorder,
)

__all__ = [
    "Event",
    "EventFilters",
    "EventRecorder",
    "EventWriteError",
    "InMemoryRecorder",
    "NullEventRecorder",
]
