"""AccessKey dataclass and the closed set of key types.

An AccessKey is a credential an automation project uses to reach target
infrastructure: an SSH private key, or an API credential for one of the
supported cloud providers.

``AccessKey.type`` is kept as the raw string received from the caller so that
an unknown value reaches validate_key() and is rejected there with a proper
validation error. Use ``AccessKey.key_type`` once a key has been validated.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class KeyType(str, Enum):
    """Closed set of supported credential types."""

    SSH = "ssh"
    AWS = "aws"
    GCLOUD = "gcloud"
    DO = "do"

    @classmethod
    def parse(cls, value: str) -> Optional["KeyType"]:
        """Return the member for ``value``, or None if it is not a known type."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class AccessKey:
    """Project-scoped credential record.

    ``id`` is assigned by the store on creation and is None on candidates.
    ``project_id`` is immutable once the key exists.
    ``secret`` is None when absent; stored secrets always end in one newline.
    ``removed`` is the soft-delete flag.
    """

    name: str
    type: str
    project_id: Optional[int] = None
    secret: Optional[str] = None
    id: Optional[int] = None
    removed: bool = False

    @property
    def key_type(self) -> Optional[KeyType]:
        return KeyType.parse(self.type)

    @property
    def has_secret(self) -> bool:
        """False for None, "" and whitespace-only secrets.

        Matches what survives normalize_secret(): a secret that would
        normalize to a bare newline carries no key material.
        """
        return bool(self.secret and self.secret.strip())

    def masked(self) -> "AccessKey":
        """Copy of this key with the secret dropped (read-path representation)."""
        return dataclasses.replace(self, secret=None)


@dataclass
class Project:
    """Already-authorized project a request operates under."""

    id: int
