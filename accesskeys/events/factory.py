"""Event recorder factory - backend selection and initialization.

Backend selection (``events.provider`` in config.yaml):
  - sqlite (default) → LocalSQLiteRecorder at ``events.path``
  - memory           → InMemoryRecorder
  - null             → NullEventRecorder (audit trail disabled)

PRAGMA version guard:
  LocalSQLiteRecorder.initialize() raises RuntimeError on an incompatible
  schema; the lifespan propagates it and startup is refused.
"""

from __future__ import annotations

from accesskeys.config import Config
from accesskeys.events.protocol import EventRecorder, NullEventRecorder
from accesskeys.utils.logger import get_logger

logger = get_logger(__name__)


async def create_event_recorder(config: Config) -> EventRecorder:
    provider = config.events.provider

    if provider == "null":
        logger.warning("event_recorder_selected", backend="NullEventRecorder")
        return NullEventRecorder()

    if provider == "memory":
        from accesskeys.events.memory_backend import InMemoryRecorder

        logger.info("event_recorder_selected", backend="InMemoryRecorder")
        return InMemoryRecorder()

    if provider == "sqlite":
        from accesskeys.events.sqlite_backend import LocalSQLiteRecorder

        recorder = LocalSQLiteRecorder(db_path=config.events.path)
        await recorder.initialize()
        logger.info(
            "event_recorder_selected",
            backend="LocalSQLiteRecorder",
            db_path=recorder.db_path,
        )
        return recorder

    raise ValueError(f"Unknown event recorder provider: {provider}")
