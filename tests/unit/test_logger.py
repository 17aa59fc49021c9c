"""Unit tests for accesskeys/utils/logger.py and accesskeys/utils/ulid.py."""

from __future__ import annotations

import structlog

from accesskeys.utils.logger import (
    REDACTED_VALUE,
    bind_request_context,
    clear_request_context,
    get_logger,
    redact_secrets,
)
from accesskeys.utils.ulid import generate_ulid


class TestRequestContext:
    def teardown_method(self) -> None:
        clear_request_context()

    def test_bound_request_id_merged_into_events(self) -> None:
        bind_request_context("01HZY5K3R7A0000000000000AB")

        event = structlog.contextvars.merge_contextvars(
            None, "info", {"event": "access_key_created"}  # type: ignore[arg-type]
        )

        assert event["request_id"] == "01HZY5K3R7A0000000000000AB"

    def test_rebinding_replaces_previous_request(self) -> None:
        bind_request_context("first")
        bind_request_context("second")

        assert structlog.contextvars.get_contextvars() == {"request_id": "second"}

    def test_cleared_context_has_no_request_id(self) -> None:
        bind_request_context("01HZY5K3R7A0000000000000AB")
        clear_request_context()

        event = structlog.contextvars.merge_contextvars(
            None, "info", {"event": "access_key_created"}  # type: ignore[arg-type]
        )

        assert "request_id" not in event


class TestRedactSecrets:
    def test_secret_fields_replaced(self) -> None:
        event = redact_secrets(
            None,  # type: ignore[arg-type]
            "info",
            {"event": "x", "secret": "-----BEGIN KEY-----", "private_key": "AAAA", "key_id": 3},
        )

        assert event["secret"] == REDACTED_VALUE
        assert event["private_key"] == REDACTED_VALUE
        assert event["key_id"] == 3

    def test_event_without_secret_untouched(self) -> None:
        event = {"event": "access_key_created", "project_id": 7}
        assert redact_secrets(None, "info", dict(event)) == event  # type: ignore[arg-type]


def test_get_logger_accepts_keyword_context() -> None:
    get_logger("accesskeys.tests").info("access_key_created", project_id=7, key_id=1)


class TestGenerateUlid:
    def test_length_and_alphabet(self) -> None:
        value = generate_ulid()
        assert len(value) == 26
        assert value == value.upper()
        assert not set(value) & set("ILOU")

    def test_unique(self) -> None:
        assert len({generate_ulid() for _ in range(100)}) == 100
