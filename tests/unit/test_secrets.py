"""Unit tests for accesskeys/keys/secrets.py."""

from __future__ import annotations

import pytest

from accesskeys.keys.secrets import SECRET_TERMINATOR, normalize_secret


class TestNormalizeSecret:
    def test_appends_single_newline(self) -> None:
        assert normalize_secret("KEY") == "KEY\n"

    @pytest.mark.parametrize(
        "raw",
        ["KEY\n", "KEY\n\n", "KEY  ", "KEY \r\n", "KEY\t\n \n"],
    )
    def test_trailing_whitespace_collapses_to_one_newline(self, raw: str) -> None:
        assert normalize_secret(raw) == "KEY\n"

    def test_idempotent(self) -> None:
        once = normalize_secret("-----BEGIN KEY-----\nAAAA\n-----END KEY-----\n\n")
        assert normalize_secret(once) == once

    def test_interior_newlines_preserved(self) -> None:
        pem = "-----BEGIN KEY-----\nAAAA\nBBBB\n-----END KEY-----"
        assert normalize_secret(pem) == pem + "\n"

    def test_leading_whitespace_preserved(self) -> None:
        assert normalize_secret("  KEY") == "  KEY\n"

    def test_result_ends_with_exactly_one_terminator(self) -> None:
        result = normalize_secret("KEY\n\n\n")
        assert result.endswith(SECRET_TERMINATOR)
        assert not result.endswith(SECRET_TERMINATOR * 2)
