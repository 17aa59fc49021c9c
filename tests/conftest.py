"""Root test configuration for the access key service.

Shared fixtures:
  - memory_store / recorder     - in-memory backends for lifecycle tests
  - manager / query_service     - core services wired to those backends

Every test starts with an empty rate limiter and with no config-related
environment variables leaking in from the developer's shell.
"""

from __future__ import annotations

import pytest

from accesskeys.events.memory_backend import InMemoryRecorder
from accesskeys.keys.manager import KeyLifecycleManager
from accesskeys.keys.query import KeyQueryService
from accesskeys.store.memory_store import InMemoryKeyStore


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Reset the in-memory rate limiter storage between tests.

    Prevents test-to-test rate limit bleed where multiple tests hitting the
    same endpoint within the same minute would trigger a 429.
    """
    from accesskeys.api.limiter import limiter

    limiter.reset()


@pytest.fixture(autouse=True)
def isolate_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "ACCESSKEYS_CONFIG",
        "ACCESSKEYS_PORT",
        "ACCESSKEYS_KEYS_DB_PATH",
        "ACCESSKEYS_EVENTS_DB_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def memory_store() -> InMemoryKeyStore:
    return InMemoryKeyStore()


@pytest.fixture
def recorder() -> InMemoryRecorder:
    return InMemoryRecorder()


@pytest.fixture
def manager(memory_store: InMemoryKeyStore, recorder: InMemoryRecorder) -> KeyLifecycleManager:
    return KeyLifecycleManager(memory_store, recorder)


@pytest.fixture
def query_service(memory_store: InMemoryKeyStore) -> KeyQueryService:
    return KeyQueryService(memory_store)
