"""Tests for query resolution from conversation turns."""

import pytest

from groundchat.domain.errors import EmptyQuery, ValidationError
from groundchat.domain.models import Turn
from groundchat.domain.services.query_resolution import last_user_content, resolve_query


class TestResolveQuery:
    def test_latest_user_turn_wins(self) -> None:
        """The most recent user turn drives retrieval, trimmed."""
        turns = [
            {"role": "user", "content": "Which companies use X?"},
            {"role": "assistant", "content": "A and B."},
            {"role": "user", "content": "  Which of these is listed?  "},
        ]
        assert resolve_query(turns, question="ignored") == "Which of these is listed?"

    def test_trailing_assistant_turn_is_skipped(self) -> None:
        turns = [Turn("user", "What is X?"), Turn("assistant", "X is a company.")]
        assert resolve_query(turns) == "What is X?"

    def test_blank_last_user_turn_falls_through_to_question(self) -> None:
        """An older user turn never replaces a blank newer one."""
        turns = [
            {"role": "user", "content": "older question"},
            {"role": "user", "content": "   "},
        ]
        assert resolve_query(turns, question=" direct ") == "direct"

    def test_legacy_message_field_is_last_fallback(self) -> None:
        assert resolve_query([], question="  ", message=" legacy ") == "legacy"
        assert resolve_query(None, message="legacy") == "legacy"

    def test_no_user_turn_uses_question(self) -> None:
        turns = [{"role": "assistant", "content": "Hello!"}]
        assert resolve_query(turns, question="Q?") == "Q?"

    @pytest.mark.parametrize(
        "turns,question,message",
        [
            ([], None, None),
            (None, "", "   "),
            ([{"role": "user", "content": None}], None, None),
            ([{"role": "assistant", "content": "only me"}], None, ""),
        ],
    )
    def test_empty_query_raises(self, turns, question, message) -> None:
        with pytest.raises(EmptyQuery):
            resolve_query(turns, question=question, message=message)

    def test_empty_query_is_validation_error(self) -> None:
        """EmptyQuery is user-correctable, hence a ValidationError."""
        with pytest.raises(ValidationError):
            resolve_query([])


def test_last_user_content_ignores_malformed_items() -> None:
    turns = [None, {"content": "no role"}, {"role": "user", "content": 42}]
    assert last_user_content(turns) == "42"
