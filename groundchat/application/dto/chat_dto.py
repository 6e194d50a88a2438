# groundchat/application/dto/chat_dto.py
from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from groundchat.domain.models import Turn

DEFAULT_TOP_K = 20
MAX_TOP_K = 60


def clamp_top_k(value: Any, default: int = DEFAULT_TOP_K, k_max: int = MAX_TOP_K) -> int:
    """Clamp a requested result count into [1, k_max].

    Missing or non-numeric values fall back to `default`; fractions are floored.
    """
    try:
        k = float(default if value is None else value)
    except (TypeError, ValueError):
        k = float(default)
    if not math.isfinite(k):
        k = float(default)
    return max(1, min(int(math.floor(k)), k_max))


@dataclass(frozen=True)
class ChatRequest:
    """
    DTO for one chat request.

    - question: standalone question (used when no user turn carries text)
    - message:  legacy single-message field, last fallback
    - messages: conversation turns, oldest first (Turn objects or role/content mappings)
    - top_k:    requested evidence count; clamped by the use case
    """

    question: str | None = None
    message: str | None = None
    messages: Sequence[Turn | Mapping[str, Any]] = field(default_factory=tuple)
    top_k: float | None = None
