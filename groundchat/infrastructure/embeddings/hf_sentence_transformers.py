from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, cast

from groundchat.application.ports.embedding_port import EmbeddingPort
from groundchat.domain.errors import EmbeddingFailure

# Lazy import for testability (allow monkeypatching fake SentenceTransformer)
SentenceTransformer: Any | None
try:  # pragma: no cover - exercised via tests with monkeypatch
    from sentence_transformers import SentenceTransformer as _SentenceTransformer
except Exception:  # noqa: BLE001
    SentenceTransformer = None
else:  # pragma: no cover - exercised in integration
    SentenceTransformer = _SentenceTransformer

E5_QUERY_INSTRUCTION = "Instruct: Retrieve relevant passages for the query.\nQuery: "


@dataclass
class HFEmbeddingAdapter(EmbeddingPort):
    """Local Sentence-Transformers query embeddings (e.g. multilingual E5).

    The corpus must have been embedded with the same model; `query_instruction`
    is prepended to every query the way instruct-style models expect.
    """

    model_name: str = "intfloat/multilingual-e5-large-instruct"
    device: str = "cpu"  # switch to "cuda" when available
    query_instruction: str = E5_QUERY_INSTRUCTION
    local_files_only: bool = False  # support offline deployments
    _model: Any | None = None

    def _ensure_model(self) -> Any:
        if self._model is not None:
            return self._model
        if SentenceTransformer is None:
            raise EmbeddingFailure("sentence-transformers not installed.")
        try:
            self._model = SentenceTransformer(
                self.model_name,
                device=self.device,
                local_files_only=self.local_files_only,
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingFailure(
                f"Failed to load embedding model '{self.model_name}': {ex}"
            ) from ex
        return self._model

    def embed_query(self, text: str, timeout: float | None = None) -> list[float]:
        # Local inference: the deadline is enforced by the caller around this call
        model = self._ensure_model()
        try:
            raw_vector = model.encode(
                f"{self.query_instruction}{text}",
                normalize_embeddings=True,
                convert_to_numpy=True,
                show_progress_bar=False,
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingFailure(f"{type(ex).__name__}: {ex}") from ex
        vector = cast(Sequence[float], raw_vector)
        return [float(x) for x in vector]
