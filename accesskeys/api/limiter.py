"""Shared rate limiter for the key management endpoints.

Uses slowapi (Starlette-compatible rate limiting). The Limiter instance is
shared between:
  - accesskeys/api/router.py  (route decorators)
  - accesskeys/main.py        (app.state.limiter + SlowAPIMiddleware registration)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Mutations (create / update / delete)
KEY_WRITE_RATE_LIMIT = "30/minute"

# Listing and single-key reads
KEY_READ_RATE_LIMIT = "120/minute"
