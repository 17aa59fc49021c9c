"""Secret canonicalization before persistence.

SSH tooling downstream expects private-key material terminated by exactly one
newline. normalize_secret() strips whatever trailing whitespace the caller
sent and appends a single ``"\\n"``, so applying it to an already-normalized
value yields the same value.

Only freshly supplied secrets are normalized. A secret carried forward from
the stored key on update is written back untouched.
"""

from __future__ import annotations

SECRET_TERMINATOR: str = "\n"


def normalize_secret(secret: str) -> str:
    """Return ``secret`` with exactly one trailing newline.

    Example::

        normalize_secret("KEY")      # "KEY\\n"
        normalize_secret("KEY \\n\\n")  # "KEY\\n"
    """
    return secret.rstrip() + SECRET_TERMINATOR
