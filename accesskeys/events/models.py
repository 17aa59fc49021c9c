"""Event dataclass for the append-only audit trail.

Events describe a mutation in free text ("Access Key deploy created") and are
tied to the object they concern by ``object_type`` + ``object_id``. Events are
never updated or deleted by this service.

IMPORTANT: ``description`` must never contain secret material. Descriptions
are built from the key name only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from accesskeys.constants import EVENT_OBJECT_TYPE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Event:
    project_id: Optional[int]
    """Project the mutated object belongs to."""
    description: str
    """Human-readable audit message."""
    object_type: str = EVENT_OBJECT_TYPE
    """Kind of object the event concerns. Always "key" for this service."""
    object_id: Optional[int] = None
    """Identifier of the mutated object."""
    created: datetime = field(default_factory=_utcnow)
    """UTC time the event was built."""
    id: Optional[int] = None
    """Assigned by the recorder."""
