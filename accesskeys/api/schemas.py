"""Request and response bodies for the access key API.

``AccessKeyOut`` has no ``secret`` field: a secret is accepted on create and
update but is never serialized back in any response.

``AccessKeyIn.type`` is a plain string so that an unknown type reaches
validate_key() and is answered with 400 "Invalid key type" rather than a
schema error.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from accesskeys.events.models import Event
from accesskeys.keys.models import AccessKey


class AccessKeyIn(BaseModel):
    """Body of POST /keys and PUT /keys/{key_id}."""

    name: str
    type: str
    project_id: Optional[int] = None
    """Must equal the project in the URL on create."""
    secret: Optional[str] = None
    """SSH private key or cloud credential. Omit on update to keep the stored one."""

    def to_key(self) -> AccessKey:
        return AccessKey(
            name=self.name,
            type=self.type,
            project_id=self.project_id,
            secret=self.secret,
        )


class AccessKeyOut(BaseModel):
    id: int
    name: str
    type: str
    project_id: int
    removed: bool = False

    @classmethod
    def from_key(cls, key: AccessKey) -> "AccessKeyOut":
        return cls(
            id=key.id,
            name=key.name,
            type=key.type,
            project_id=key.project_id,
            removed=key.removed,
        )


class EventOut(BaseModel):
    id: Optional[int] = None
    project_id: Optional[int] = None
    object_type: Optional[str] = None
    object_id: Optional[int] = None
    description: str
    created: datetime

    @classmethod
    def from_event(cls, event: Event) -> "EventOut":
        return cls(
            id=event.id,
            project_id=event.project_id,
            object_type=event.object_type,
            object_id=event.object_id,
            description=event.description,
            created=event.created,
        )
