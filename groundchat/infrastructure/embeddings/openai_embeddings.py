from dataclasses import dataclass, field
from importlib import import_module
from typing import Any

from groundchat.application.ports.embedding_port import EmbeddingPort
from groundchat.domain.errors import EmbeddingFailure


@dataclass
class OpenAIEmbeddingAdapter(EmbeddingPort):
    api_key: str
    model: str = "text-embedding-3-small"
    base_url: str | None = None  # None: SDK default endpoint
    _client: Any | None = field(default=None, init=False, repr=False)

    def _ensure_client(self) -> Any:
        # Defer import of OpenAI to first use to keep composition free of I/O
        if self._client is None:
            module = import_module("openai")
            self._client = module.OpenAI(api_key=self.api_key, base_url=self.base_url or None)
        return self._client

    def embed_query(self, text: str, timeout: float | None = None) -> list[float]:
        try:
            client = self._ensure_client()
            kwargs: dict[str, Any] = {"model": self.model, "input": text}
            if timeout is not None:
                kwargs["timeout"] = timeout
            resp: Any = client.embeddings.create(**kwargs)
            return [float(x) for x in resp.data[0].embedding]
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise EmbeddingFailure(f"{type(ex).__name__}: {ex}") from ex
