"""Contract tests for similarity search adapters using fake client modules."""

import sys
import threading
import types

import pytest

from groundchat.domain.errors import RetrievalFailure
from groundchat.infrastructure.search.qdrant_search import QdrantSearchAdapter
from groundchat.infrastructure.search.supabase_rpc import SupabaseRPCSearchAdapter


class FakeRPCCall:
    def __init__(self, client, name, params):
        self.client = client
        self.name = name
        self.params = params

    def execute(self):
        self.client.calls.append((self.name, self.params))
        if self.client.block is not None:
            self.client.block.wait(5)
        if self.client.error is not None:
            raise self.client.error
        return types.SimpleNamespace(data=self.client.data)


class FakeSupabaseClient:
    def __init__(self, url, key, options):
        self.url = url
        self.key = key
        self.options = options
        self.calls = []
        self.data = []
        self.error = None
        self.block = None

    def rpc(self, name, params):
        return FakeRPCCall(self, name, params)


class FakeAPIError(Exception):
    def __init__(self, message):
        super().__init__({"message": message, "code": "42501"})
        self.message = message


@pytest.fixture
def fake_supabase(monkeypatch):
    module = types.ModuleType("supabase")
    module.created = []

    def create_client(url, key, options=None):
        client = FakeSupabaseClient(url, key, options)
        module.created.append(client)
        return client

    module.create_client = create_client
    module.ClientOptions = lambda **kw: kw
    monkeypatch.setitem(sys.modules, "supabase", module)
    return module


class TestSupabaseRPCSearchAdapter:
    def test_client_is_lazy_and_session_not_persisted(self, fake_supabase) -> None:
        adapter = SupabaseRPCSearchAdapter(url="https://x.supabase.co", key="k")
        assert fake_supabase.created == []

        adapter.search([0.1, 0.2], limit=3)

        client = fake_supabase.created[0]
        assert client.options == {"persist_session": False}

    def test_params_without_threshold(self, fake_supabase) -> None:
        adapter = SupabaseRPCSearchAdapter(url="u", key="k", rpc_name="match_chunks")
        adapter.search((0.1, 0.2), limit=20)

        name, params = fake_supabase.created[0].calls[0]
        assert name == "match_chunks"
        assert params == {"query_embedding": [0.1, 0.2], "match_count": 20}

    def test_threshold_passed_unmodified(self, fake_supabase) -> None:
        adapter = SupabaseRPCSearchAdapter(url="u", key="k")
        adapter.search([0.1], limit=5, threshold=0.78)

        _, params = fake_supabase.created[0].calls[0]
        assert params["match_threshold"] == 0.78

    def test_rows_returned_as_is(self, fake_supabase) -> None:
        adapter = SupabaseRPCSearchAdapter(url="u", key="k")
        adapter.search([0.1], limit=1)  # creates client
        rows = [{"content": "A", "similarity": 0.9}, {"content": "B", "similarity": 0.8}]
        fake_supabase.created[0].data = rows

        assert adapter.search([0.1], limit=2) == rows

    def test_none_data_is_empty(self, fake_supabase) -> None:
        adapter = SupabaseRPCSearchAdapter(url="u", key="k")
        adapter.search([0.1], limit=1)
        fake_supabase.created[0].data = None
        assert adapter.search([0.1], limit=1) == []

    def test_error_carries_rpc_name_and_backend_message(self, fake_supabase) -> None:
        adapter = SupabaseRPCSearchAdapter(url="u", key="k", rpc_name="match_documents")
        adapter.search([0.1], limit=1)
        fake_supabase.created[0].error = FakeAPIError("permission denied for function")

        with pytest.raises(RetrievalFailure) as info:
            adapter.search([0.1], limit=1)
        assert str(info.value) == (
            "supabase.rpc(match_documents) failed: permission denied for function"
        )

    def test_client_wide_timeout_option(self, fake_supabase) -> None:
        adapter = SupabaseRPCSearchAdapter(url="u", key="k", timeout_s=60.0)
        adapter.search([0.1], limit=1)

        assert fake_supabase.created[0].options == {
            "persist_session": False,
            "postgrest_client_timeout": 60.0,
        }

    def test_per_call_timeout_abandons_hung_rpc(self, fake_supabase) -> None:
        adapter = SupabaseRPCSearchAdapter(url="u", key="k")
        client = adapter._ensure_client()
        release = threading.Event()
        client.block = release

        try:
            with pytest.raises(RetrievalFailure, match=r"match_documents\) timed out"):
                adapter.search([0.1], limit=1, timeout=0.05)
        finally:
            release.set()

    def test_per_call_timeout_returns_rows_in_time(self, fake_supabase) -> None:
        adapter = SupabaseRPCSearchAdapter(url="u", key="k")
        adapter._ensure_client().data = [{"content": "A"}]

        assert adapter.search([0.1], limit=1, timeout=5.0) == [{"content": "A"}]

    def test_name_is_rpc_name(self) -> None:
        assert SupabaseRPCSearchAdapter(url="u", key="k", rpc_name="match_chunks").name == (
            "match_chunks"
        )


class FakePoint:
    def __init__(self, id, payload, score):
        self.id = id
        self.payload = payload
        self.score = score


class FakeQdrantClient:
    instances: list["FakeQdrantClient"] = []

    def __init__(self, url, api_key=None):
        self.url = url
        self.api_key = api_key
        self.kwargs = {}
        self.error = None
        FakeQdrantClient.instances.append(self)

    def query_points(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return types.SimpleNamespace(
            points=[
                FakePoint(1, {"text": "A", "source": "doc1"}, 0.93),
                FakePoint("p2", None, 0.5),
            ]
        )


@pytest.fixture
def fake_qdrant(monkeypatch):
    FakeQdrantClient.instances = []
    module = types.ModuleType("qdrant_client")
    module.QdrantClient = FakeQdrantClient
    monkeypatch.setitem(sys.modules, "qdrant_client", module)
    return FakeQdrantClient


class TestQdrantSearchAdapter:
    def test_payload_rows_with_score(self, fake_qdrant) -> None:
        adapter = QdrantSearchAdapter(url="http://q:6333", collection="kb")

        rows = adapter.search([0.1, 0.2], limit=4)

        assert rows == [
            {"text": "A", "source": "doc1", "id": "1", "score": 0.93},
            {"id": "p2", "score": 0.5},
        ]
        kwargs = fake_qdrant.instances[0].kwargs
        assert kwargs["collection_name"] == "kb"
        assert kwargs["limit"] == 4
        assert "score_threshold" not in kwargs

    def test_threshold_and_timeout(self, fake_qdrant) -> None:
        adapter = QdrantSearchAdapter(collection="kb")
        adapter.search([0.1], limit=1, threshold=0.4, timeout=2.7)

        kwargs = fake_qdrant.instances[0].kwargs
        assert kwargs["score_threshold"] == 0.4
        assert kwargs["timeout"] == 2

    def test_error_is_retrieval_failure(self, fake_qdrant) -> None:
        adapter = QdrantSearchAdapter(collection="kb")
        adapter._ensure_client().error = RuntimeError("collection kb not found")

        with pytest.raises(RetrievalFailure, match="collection kb not found"):
            adapter.search([0.1], limit=1)

    def test_name(self) -> None:
        assert QdrantSearchAdapter(collection="kb").name == "qdrant:kb"
