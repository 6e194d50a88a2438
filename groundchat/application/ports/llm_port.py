from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from groundchat.domain.models import ChatMessage

__all__ = ["ChatMessage", "LLMPort", "LLMResponse"]


@dataclass(frozen=True)
class LLMResponse:
    text: str
    finish_reason: str = "stop"
    usage_tokens: int | None = None


@runtime_checkable
class LLMPort(Protocol):
    def chat(
        self,
        messages: Sequence[ChatMessage],
        model: str | None = None,
        temperature: float = 0.2,
        max_tokens: int | None = None,
        timeout: float | None = None,
    ) -> LLMResponse: ...
