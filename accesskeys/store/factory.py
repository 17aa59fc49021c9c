"""Key store factory - backend selection and initialization.

Backend selection (``store.provider`` in config.yaml):
  - sqlite (default) → SQLiteKeyStore at ``store.path``
  - memory           → InMemoryKeyStore (nothing survives a restart)

``store.path`` already reflects the ACCESSKEYS_KEYS_DB_PATH override applied
by load_config().
"""

from __future__ import annotations

from accesskeys.config import Config
from accesskeys.store.protocol import KeyStore
from accesskeys.utils.logger import get_logger

logger = get_logger(__name__)


async def create_key_store(config: Config) -> KeyStore:
    """Create and initialize the configured KeyStore.

    Raises:
        RuntimeError: SQLiteKeyStore found an incompatible schema version.
                      Propagated to the lifespan so startup is refused.
        ValueError:   Unknown provider (load_config() rejects these earlier).
    """
    provider = config.store.provider

    if provider == "memory":
        from accesskeys.store.memory_store import InMemoryKeyStore

        logger.info("key_store_selected", backend="InMemoryKeyStore")
        return InMemoryKeyStore()

    if provider == "sqlite":
        from accesskeys.store.sqlite_store import SQLiteKeyStore

        store = SQLiteKeyStore(db_path=config.store.path)
        await store.initialize()
        logger.info("key_store_selected", backend="SQLiteKeyStore", db_path=store.db_path)
        return store

    raise ValueError(f"Unknown key store provider: {provider}")
