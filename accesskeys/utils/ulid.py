"""ULID generation for request correlation.

``generate_ulid()`` returns a 26-character Crockford Base32 ULID. It is used as
the X-Request-ID value assigned to every inbound request and bound into the
structlog context, so all log lines of one key mutation (store write plus
audit write) share one identifier.

Uses the ``python-ulid`` library; ULIDs are not generated by hand here.
"""

from __future__ import annotations

from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID as a 26-character uppercase string.

    Example::

        request_id = generate_ulid()
        assert len(request_id) == 26
    """
    return str(ULID())
