"""Programmatic uvicorn entry point.

Reads host and port from the loaded config (127.0.0.1:3000 by default).

Usage:
    python -m accesskeys.run
    accesskeys                 # via pyproject.toml [project.scripts]
"""

from __future__ import annotations

import uvicorn

from accesskeys.config import load_config

# Maximum concurrent connections; HTTP 503 beyond this.
UVICORN_LIMIT_CONCURRENCY: int = 100

UVICORN_BACKLOG: int = 50

UVICORN_TIMEOUT_KEEP_ALIVE: int = 5


def main() -> None:
    """Start the service.

    Raises:
        SystemExit: Propagated from load_config() on config errors.
    """
    config = load_config()

    uvicorn.run(
        "accesskeys.main:app",
        host=config.api.host,
        port=config.api.port,
        limit_concurrency=UVICORN_LIMIT_CONCURRENCY,
        backlog=UVICORN_BACKLOG,
        timeout_keep_alive=UVICORN_TIMEOUT_KEEP_ALIVE,
    )


if __name__ == "__main__":
    main()
