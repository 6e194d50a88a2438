"""Tests for the RetrieveEvidence use case."""

from collections.abc import Mapping, Sequence
from typing import Any

import pytest

from groundchat.application.use_cases.retrieve_evidence import RetrieveEvidence
from groundchat.domain.errors import EmbeddingFailure, RetrievalFailure
from groundchat.domain.models import EvidenceRecord


class StubEmbedding:
    def __init__(self, vector: list[float] | None = None, error: Exception | None = None) -> None:
        self.vector = [0.1, 0.2] if vector is None else vector
        self.error = error
        self.timeouts: list[float | None] = []

    def embed_query(self, text: str, timeout: float | None = None) -> list[float]:
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        return self.vector


class StubSearch:
    name = "match_chunks"

    def __init__(self, rows: Any = None, error: Exception | None = None) -> None:
        self.rows = rows
        self.error = error
        self.kwargs: dict[str, Any] = {}

    def search(
        self,
        query_vector: Sequence[float],
        limit: int,
        threshold: float | None = None,
        timeout: float | None = None,
    ) -> list[Mapping[str, Any]]:
        self.kwargs = {"vector": list(query_vector), "limit": limit, "threshold": threshold}
        if self.error is not None:
            raise self.error
        return self.rows


class TestRetrieveEvidence:
    def test_normalizes_and_filters_rows(self) -> None:
        rows = [
            {"content": "A", "source": "s1", "similarity": 0.9},
            {"content": " ", "source": "s2", "similarity": 0.8},
            {"body": "B", "similarity": 0.7},
        ]
        uc = RetrieveEvidence(StubEmbedding(), StubSearch(rows=rows))

        records = uc.execute("q", top_k=5)

        assert records == [EvidenceRecord("A", "s1", 0.9), EvidenceRecord("B", "", 0.7)]

    def test_vector_and_limit_forwarded(self) -> None:
        search = StubSearch(rows=[])
        RetrieveEvidence(StubEmbedding(vector=[0.5, 0.5]), search).execute("q", top_k=7)
        assert search.kwargs == {"vector": [0.5, 0.5], "limit": 7, "threshold": None}

    @pytest.mark.parametrize("threshold,sent", [(0.0, None), (-1.0, None), (0.35, 0.35)])
    def test_threshold_only_when_positive(self, threshold: float, sent: float | None) -> None:
        search = StubSearch(rows=[])
        uc = RetrieveEvidence(StubEmbedding(), search, threshold=threshold)

        uc.execute("q", top_k=3)

        assert search.kwargs["threshold"] == sent
        assert uc.effective_threshold == (sent or 0.0)

    def test_none_rows_mean_no_evidence(self) -> None:
        assert RetrieveEvidence(StubEmbedding(), StubSearch(rows=None)).execute("q", 3) == []

    def test_no_timeout_without_deadline(self) -> None:
        embedding = StubEmbedding()
        RetrieveEvidence(embedding, StubSearch(rows=[])).execute("q", 3)
        assert embedding.timeouts == [None]

    def test_embedding_error_is_wrapped(self) -> None:
        search = StubSearch(rows=[])
        uc = RetrieveEvidence(StubEmbedding(error=ConnectionError("no route")), search)

        with pytest.raises(EmbeddingFailure) as info:
            uc.execute("q", 3)
        assert str(info.value) == "ConnectionError: no route"
        assert search.kwargs == {}

    def test_embedding_domain_error_passes_through(self) -> None:
        original = EmbeddingFailure("RateLimitError: slow down")
        uc = RetrieveEvidence(StubEmbedding(error=original), StubSearch(rows=[]))

        with pytest.raises(EmbeddingFailure) as info:
            uc.execute("q", 3)
        assert info.value is original

    def test_empty_vector_is_a_failure(self) -> None:
        uc = RetrieveEvidence(StubEmbedding(vector=[]), StubSearch(rows=[]))
        with pytest.raises(EmbeddingFailure):
            uc.execute("q", 3)

    def test_search_error_names_backend(self) -> None:
        uc = RetrieveEvidence(StubEmbedding(), StubSearch(error=ValueError("function not found")))

        with pytest.raises(RetrievalFailure) as info:
            uc.execute("q", 3)
        assert str(info.value) == "match_chunks search failed: function not found"
