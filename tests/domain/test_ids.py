"""Tests for id generation."""

from __future__ import annotations

from formctl.domain.ids import ID_LENGTH, generate_id, validate_id


class TestIds:
    def test_length_and_alphabet(self) -> None:
        value = generate_id()
        assert len(value) == ID_LENGTH
        assert validate_id(value)

    def test_unique(self) -> None:
        assert len({generate_id() for _ in range(200)}) == 200

    def test_rejects_foreign_ids(self) -> None:
        assert not validate_id("field_1")
        assert not validate_id("ABCDEF0123456789")
