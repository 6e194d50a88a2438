# groundchat/domain/services/history.py
# Pure domain service: bounds the conversation history that enters a prompt.
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from groundchat.domain.models import Turn

HISTORY_ROLES = ("user", "assistant")
DEFAULT_MAX_TURNS = 60
DEFAULT_MAX_CHARS = 4000


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def normalize_history(
    messages: Sequence[Turn | Mapping[str, Any]] | None,
    max_turns: int = DEFAULT_MAX_TURNS,
    max_chars: int = DEFAULT_MAX_CHARS,
) -> list[Turn]:
    """
    Sanitize prior turns for the prompt.

    - keeps only user/assistant turns, in conversation order
    - truncates each content to `max_chars` characters
    - drops turns that are blank after trimming (content itself stays verbatim)
    - keeps the most recent `max_turns` survivors; `max_turns <= 0` keeps none
    """
    if max_turns <= 0:
        return []

    cleaned: list[Turn] = []
    for item in messages or ():
        if item is None:
            continue
        role = _field(item, "role")
        if role not in HISTORY_ROLES:
            continue
        raw = _field(item, "content")
        content = ("" if raw is None else str(raw))[:max_chars]
        if not content.strip():
            continue
        cleaned.append(Turn(role=role, content=content))

    return cleaned[-max_turns:]
