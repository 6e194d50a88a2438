# groundchat/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class Turn:
    """One recorded conversation message, owned by the caller."""

    role: Role
    content: str


@dataclass(frozen=True)
class EvidenceRecord:
    """
    Canonical passage retrieved for a single request.

    - text:      passage text, never empty once it reaches the prompt
    - source:    source identifier (url, path, ...); empty means unattributed
    - relevance: similarity reported by the search backend
    """

    text: str
    source: str
    relevance: float = 0.0


@dataclass(frozen=True)
class ChatMessage:
    role: str  # "system" | "user" | "assistant"
    content: str


@dataclass(frozen=True)
class AssembledPrompt:
    """Ordered role-tagged blocks: policy, history..., final user block."""

    messages: tuple[ChatMessage, ...]

    @property
    def system(self) -> ChatMessage:
        return self.messages[0]

    @property
    def history(self) -> tuple[ChatMessage, ...]:
        return self.messages[1:-1]

    @property
    def final(self) -> ChatMessage:
        return self.messages[-1]


@dataclass(frozen=True)
class Reference:
    """Citation aligned with the [#i] index of the evidence digest."""

    source: str
    score: float


@dataclass(frozen=True)
class AnswerResult:
    answer: str
    references: list[Reference]
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "references": [{"source": r.source, "score": r.score} for r in self.references],
            "meta": dict(self.meta),
        }
