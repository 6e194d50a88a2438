from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any

from groundchat.application.ports.similarity_search_port import SimilaritySearchPort
from groundchat.domain.errors import RetrievalFailure


@dataclass
class QdrantSearchAdapter(SimilaritySearchPort):
    """Similarity search against a Qdrant collection; payloads become rows."""

    url: str = "http://localhost:6333"
    collection: str = "documents"
    api_key: str | None = None
    _cli: Any | None = field(default=None, init=False, repr=False)

    @property
    def name(self) -> str:
        return f"qdrant:{self.collection}"

    def _ensure_client(self) -> Any:
        if self._cli is None:
            try:
                client_mod = import_module("qdrant_client")
            except Exception as ex:  # pragma: no cover
                raise RetrievalFailure("qdrant-client not available; install runtime deps") from ex
            self._cli = client_mod.QdrantClient(url=self.url, api_key=self.api_key or None)
        return self._cli

    def search(
        self,
        query_vector: Sequence[float],
        limit: int,
        threshold: float | None = None,
        timeout: float | None = None,
    ) -> list[Mapping[str, Any]]:
        cli = self._ensure_client()
        kwargs: dict[str, Any] = {
            "collection_name": self.collection,
            "query": list(query_vector),
            "limit": limit,
            "with_payload": True,
        }
        if threshold is not None:
            kwargs["score_threshold"] = threshold
        if timeout is not None:
            kwargs["timeout"] = max(1, int(timeout))
        try:
            rs: Any = cli.query_points(**kwargs)
        except Exception as ex:  # noqa: BLE001
            raise RetrievalFailure(f"qdrant search on '{self.collection}' failed: {ex}") from ex
        return [{**(p.payload or {}), "id": str(p.id), "score": p.score} for p in rs.points]
