"""Per-type structural validation of candidate access keys.

Rules:
  - type not in {ssh, aws, gcloud, do}  -> InvalidKeyTypeError
  - ssh with an absent or blank secret  -> EmptySecretError
  - aws / gcloud / do                   -> secret is opaque, no constraint

validate_key() is pure: no I/O, no mutation of the candidate.
"""

from __future__ import annotations

from typing import Callable

from accesskeys.keys.errors import EmptySecretError, InvalidKeyTypeError
from accesskeys.keys.models import AccessKey, KeyType


def _require_secret(key: AccessKey) -> None:
    if not key.has_secret:
        raise EmptySecretError()


def _opaque_secret(key: AccessKey) -> None:
    """Cloud credential structure is not inspected."""


_SECRET_RULES: dict[KeyType, Callable[[AccessKey], None]] = {
    KeyType.SSH: _require_secret,
    KeyType.AWS: _opaque_secret,
    KeyType.GCLOUD: _opaque_secret,
    KeyType.DO: _opaque_secret,
}


def validate_key(key: AccessKey) -> None:
    """Validate a candidate key against its type's rule.

    Raises:
        InvalidKeyTypeError: ``key.type`` is not a supported type.
        EmptySecretError:    SSH key without secret material.
    """
    key_type = key.key_type
    if key_type is None:
        raise InvalidKeyTypeError()
    _SECRET_RULES[key_type](key)


# Every KeyType must have a rule. Runs at import time so a new type without
# one fails immediately.
assert set(_SECRET_RULES) == set(KeyType), (
    "validate_key() has no secret rule for: "
    f"{sorted(t.value for t in set(KeyType) - set(_SECRET_RULES))}"
)
