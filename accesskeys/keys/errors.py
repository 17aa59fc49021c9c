"""Exceptions raised by the access key lifecycle.

Every exception carries a machine-readable ``code``. The HTTP layer maps:

  KeyValidationError (and subclasses) -> 400 {"error": message}
  KeyInUseError                       -> 400 {"error": message, "inUse": true}
  KeyNotFoundError                    -> 404
  PersistenceError                    -> 500 (generic message, detail logged)

Validation errors are always raised before the store is touched.
"""

from __future__ import annotations


class AccessKeyError(Exception):
    """Base class for access key lifecycle failures."""

    code: str = "access_key_error"

    def __init__(self, message: str = "Access key operation failed") -> None:
        super().__init__(message)
        self.message = message


# ─── Validation ───────────────────────────────────────────────────────────────


class KeyValidationError(AccessKeyError):
    """Candidate key rejected before persistence. Never retried."""

    code = "validation_failed"

    def __init__(self, message: str = "Invalid access key") -> None:
        super().__init__(message)


class ProjectMismatchError(KeyValidationError):
    """Payload project differs from the project resolved for the request."""

    code = "project_mismatch"

    def __init__(
        self, message: str = "Project ID in body and URL must be the same"
    ) -> None:
        super().__init__(message)


class InvalidKeyTypeError(KeyValidationError):
    code = "invalid_type"

    def __init__(self, message: str = "Invalid key type") -> None:
        super().__init__(message)


class EmptySecretError(KeyValidationError):
    code = "empty_secret"

    def __init__(self, message: str = "SSH Secret empty") -> None:
        super().__init__(message)


class KeyTypeChangeError(KeyValidationError):
    """Update attempted to switch a key to a different type."""

    code = "type_immutable"

    def __init__(self, message: str = "Access key type cannot be changed") -> None:
        super().__init__(message)


# ─── Store outcomes ───────────────────────────────────────────────────────────


class KeyNotFoundError(AccessKeyError):
    code = "not_found"

    def __init__(self, message: str = "Access key not found") -> None:
        super().__init__(message)


class KeyInUseError(AccessKeyError):
    """Hard delete blocked by an inventory, repository or template reference.

    ``in_use`` lets the caller offer a soft delete instead.
    """

    code = "in_use"
    in_use: bool = True

    def __init__(
        self,
        message: str = "Access Key is in use by one or more inventories, repositories or templates",
    ) -> None:
        super().__init__(message)


class StoreError(AccessKeyError):
    """Raised by KeyStore implementations on a lower-level storage failure."""

    code = "store_error"


class PersistenceError(AccessKeyError):
    """Store-layer failure surfaced by the lifecycle manager. Not retried."""

    code = "persistence_error"

    def __init__(self, message: str = "Access key could not be persisted") -> None:
        super().__init__(message)
