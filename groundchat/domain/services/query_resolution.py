# groundchat/domain/services/query_resolution.py
# Pure domain service: picks the text that drives retrieval for this turn.
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from groundchat.domain.errors import EmptyQuery
from groundchat.domain.models import Turn


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _as_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def last_user_content(messages: Sequence[Turn | Mapping[str, Any]] | None) -> str:
    """Trimmed content of the most recent user turn, or "" if there is none.

    Only the latest user turn is considered; an older user turn never
    stands in for a blank newer one.
    """
    for item in reversed(messages or ()):
        if item is not None and _field(item, "role") == "user":
            return _as_text(_field(item, "content"))
    return ""


def resolve_query(
    messages: Sequence[Turn | Mapping[str, Any]] | None,
    question: str | None = None,
    message: str | None = None,
) -> str:
    """Return the query for retrieval or raise EmptyQuery.

    Order: latest user turn, then `question`, then the legacy `message` field.
    """
    for candidate in (last_user_content(messages), _as_text(question), _as_text(message)):
        if candidate:
            return candidate
    raise EmptyQuery("question (or message) is required")
