"""Access key lifecycle package.

Public API:
  - AccessKey, KeyType, Project     - data model
  - validate_key()                  - per-type structural rules
  - normalize_secret()              - canonical trailing newline
  - KeyLifecycleManager             - create / update / delete policy
  - KeyQueryService                 - sorted listing, single-key short-circuit
  - AccessKeyError and subclasses   - failure taxonomy
"""

from __future__ import annotations

from accesskeys.keys.errors import (
    AccessKeyError,
    EmptySecretError,
    InvalidKeyTypeError,
    KeyInUseError,
    KeyNotFoundError,
    KeyTypeChangeError,
    KeyValidationError,
    PersistenceError,
    ProjectMismatchError,
    StoreError,
)
from accesskeys.keys.manager import KeyLifecycleManager
from accesskeys.keys.models import AccessKey, KeyType, Project
from accesskeys.keys.query import KeyQueryService
from accesskeys.keys.secrets import normalize_secret
from accesskeys.keys.validator import validate_key

__all__ = [
    "AccessKey",
    "KeyType",
    "Project",
    "validate_key",
    "normalize_secret",
    "KeyLifecycleManager",
    "KeyQueryService",
    "AccessKeyError",
    "KeyValidationError",
    "ProjectMismatchError",
    "InvalidKeyTypeError",
    "EmptySecretError",
    "KeyTypeChangeError",
    "KeyNotFoundError",
    "KeyInUseError",
    "StoreError",
    "PersistenceError",
]
