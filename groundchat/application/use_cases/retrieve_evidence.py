# groundchat/application/use_cases/retrieve_evidence.py
from __future__ import annotations

import logging

from groundchat.application.deadline import Deadline, remaining_or_none
from groundchat.application.ports.embedding_port import EmbeddingPort
from groundchat.application.ports.similarity_search_port import SimilaritySearchPort
from groundchat.domain.errors import EmbeddingFailure, RetrievalFailure
from groundchat.domain.models import EvidenceRecord
from groundchat.domain.services.evidence import normalize_rows

logger = logging.getLogger(__name__)


def _check(deadline: Deadline | None, stage: str) -> None:
    if deadline is not None:
        deadline.check(stage)


class RetrieveEvidence:
    """
    Query text -> embedding -> similarity search -> canonical evidence.

    Backend ordering is trusted as-is (no re-ranking, no deduplication).
    Failures are fatal for the request; nothing is retried.
    """

    def __init__(
        self,
        embedding: EmbeddingPort,
        search: SimilaritySearchPort,
        threshold: float = 0.0,
    ) -> None:
        self.embedding = embedding
        self.search = search
        self.threshold = threshold

    @property
    def backend_name(self) -> str:
        return self.search.name

    @property
    def effective_threshold(self) -> float:
        """Threshold actually sent to the backend; 0.0 means disabled."""
        return self.threshold if self.threshold > 0 else 0.0

    def execute(
        self, query: str, top_k: int, deadline: Deadline | None = None
    ) -> list[EvidenceRecord]:
        # 1) Embed query
        _check(deadline, "embedding")
        try:
            vector = self.embedding.embed_query(query, timeout=remaining_or_none(deadline))
        except Exception as ex:
            _check(deadline, "embedding")
            if isinstance(ex, EmbeddingFailure):
                raise
            raise EmbeddingFailure(f"{type(ex).__name__}: {ex}") from ex
        _check(deadline, "embedding")
        if not vector:
            raise EmbeddingFailure("embedding backend returned an empty vector")

        # 2) Similarity search
        threshold = self.effective_threshold or None
        try:
            rows = self.search.search(
                vector,
                limit=top_k,
                threshold=threshold,
                timeout=remaining_or_none(deadline),
            )
        except Exception as ex:
            _check(deadline, "retrieval")
            if isinstance(ex, RetrievalFailure):
                raise
            raise RetrievalFailure(f"{self.backend_name} search failed: {ex}") from ex
        _check(deadline, "retrieval")

        # 3) Normalize rows, drop passages without text
        records = normalize_rows(rows or [])
        logger.debug(
            "retrieved %d rows (%d with text) from %s",
            len(rows or []),
            len(records),
            self.backend_name,
        )
        return records
