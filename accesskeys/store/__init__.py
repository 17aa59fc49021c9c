"""Access key persistence package.

    from accesskeys.store import KeyStore, RetrieveQueryParams

Layout:
    protocol.py      - KeyStore Protocol + RetrieveQueryParams
    sqlite_store.py  - SQLiteKeyStore
    memory_store.py  - InMemoryKeyStore
    factory.py       - create_key_store()
"""

from accesskeys.store.memory_store import InMemoryKeyStore
from accesskeys.store.protocol import KeyStore, RetrieveQueryParams
from accesskeys.store.sqlite_store import SQLiteKeyStore

__all__ = [
    "KeyStore",
    "RetrieveQueryParams",
    "InMemoryKeyStore",
    "SQLiteKeyStore",
]
