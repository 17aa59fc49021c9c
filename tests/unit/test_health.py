"""Unit tests for GET /health and the application lifespan.

  #1: 503 before app.state.ready = True
  #2: 200 with store/events status and providers after ready
  #3: degraded (200) when only the event recorder is unhealthy
  #4: 503 with status=error when the key store is unhealthy
  #5: lifespan opens the configured backends and closes them on shutdown
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.testclient import TestClient

from accesskeys.config import Config, EventsConfig, StoreConfig
from accesskeys.events.memory_backend import InMemoryRecorder
from accesskeys.events.sqlite_backend import LocalSQLiteRecorder
from accesskeys.main import create_app
from accesskeys.store.memory_store import InMemoryKeyStore
from accesskeys.store.sqlite_store import SQLiteKeyStore


def _ready_app(store: InMemoryKeyStore, recorder: InMemoryRecorder):
    app = create_app()
    app.state.config = Config(
        store=StoreConfig(provider="memory"),
        events=EventsConfig(provider="memory"),
    )
    app.state.key_store = store
    app.state.event_recorder = recorder
    app.state.ready = True
    return app


async def _get_health(app) -> tuple[int, dict]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health")
    return response.status_code, response.json()


class TestHealth:
    async def test_503_before_ready(self) -> None:
        status, body = await _get_health(create_app())

        assert status == 503
        assert body["error"]["status"] == "starting"

    async def test_ok_after_ready(self) -> None:
        status, body = await _get_health(_ready_app(InMemoryKeyStore(), InMemoryRecorder()))

        assert status == 200
        assert body == {
            "status": "ok",
            "store": "healthy",
            "events": "healthy",
            "store_provider": "memory",
            "events_provider": "memory",
        }

    async def test_degraded_when_recorder_down(self) -> None:
        recorder = InMemoryRecorder()
        recorder.health_check = AsyncMock(return_value=False)  # type: ignore[method-assign]

        status, body = await _get_health(_ready_app(InMemoryKeyStore(), recorder))

        assert status == 200
        assert body["status"] == "degraded"
        assert body["events"] == "error"

    async def test_error_when_store_down(self) -> None:
        store = InMemoryKeyStore()
        store.health_check = AsyncMock(return_value=False)  # type: ignore[method-assign]

        status, body = await _get_health(_ready_app(store, InMemoryRecorder()))

        assert status == 503
        assert body["status"] == "error"
        assert body["store"] == "error"


class TestLifespan:
    def test_backends_opened_and_closed(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "version: 1\n"
            f"store:\n  provider: sqlite\n  path: {tmp_path / 'keys.db'}\n"
            f"events:\n  provider: sqlite\n  path: {tmp_path / 'events.db'}\n"
        )
        monkeypatch.setenv("ACCESSKEYS_CONFIG", str(config_path))
        app = create_app()

        with TestClient(app) as client:
            assert app.state.ready is True
            assert isinstance(app.state.key_store, SQLiteKeyStore)
            assert isinstance(app.state.event_recorder, LocalSQLiteRecorder)

            created = client.post(
                "/api/project/7/keys",
                json={"name": "aws", "type": "aws", "project_id": 7, "secret": "AKIA"},
            )
            assert created.status_code == 204
            assert client.get("/health").json()["status"] == "ok"

        assert app.state.ready is False
        assert (tmp_path / "keys.db").exists()
        assert (tmp_path / "events.db").exists()
