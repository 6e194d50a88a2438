from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingPort(Protocol):
    def embed_query(self, text: str, timeout: float | None = None) -> list[float]: ...
