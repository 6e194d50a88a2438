from collections.abc import Sequence
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any, cast

from groundchat.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from groundchat.domain.errors import SynthesisFailure


@dataclass
class OpenAIChatAdapter(LLMPort):
    api_key: str
    model: str = "gpt-4.1-mini"
    base_url: str | None = None  # e.g. "http://localhost:8000/v1" for vLLM
    _client: Any | None = field(default=None, init=False, repr=False)

    def _ensure_client(self) -> Any:
        # Defer import of OpenAI to chat() to avoid hard dependency in tests
        if self._client is None:
            module = import_module("openai")
            self._client = module.OpenAI(api_key=self.api_key, base_url=self.base_url or None)
        return self._client

    def chat(
        self,
        messages: Sequence[ChatMessage],
        model: str | None = None,
        temperature: float = 0.2,
        max_tokens: int | None = None,
        timeout: float | None = None,
    ) -> LLMResponse:
        try:
            client = self._ensure_client()
            payload: Any = [{"role": m.role, "content": m.content} for m in messages]
            kwargs: dict[str, Any] = {
                "model": model or self.model,
                "messages": cast(Any, payload),
                "temperature": temperature,
            }
            if max_tokens is not None:
                kwargs["max_tokens"] = max_tokens
            if timeout is not None:
                kwargs["timeout"] = timeout
            resp: Any = client.chat.completions.create(**kwargs)
            if not resp.choices:
                return LLMResponse(text="", finish_reason="empty")
            choice = resp.choices[0]
            usage = getattr(resp, "usage", None)
            return LLMResponse(
                text=(choice.message.content if choice.message else None) or "",
                finish_reason=choice.finish_reason or "stop",
                usage_tokens=getattr(usage, "total_tokens", None),
            )
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise SynthesisFailure(f"{type(ex).__name__}: {ex}") from ex
