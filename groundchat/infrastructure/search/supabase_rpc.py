"""Similarity search through a Postgres function exposed by Supabase (pgvector).

The function (`match_documents`, `match_chunks`, ...) receives
`query_embedding`, `match_count` and, only when a threshold is configured,
`match_threshold`; deployments whose function lacks that parameter simply
leave the threshold unset.

The Supabase client only takes a client-wide PostgREST timeout, so a
per-call `timeout` is enforced by waiting on the RPC from a worker thread.
A call abandoned that way keeps running in the background until the
client-wide timeout (`timeout_s`) ends it.
"""

from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any

from groundchat.application.ports.similarity_search_port import SimilaritySearchPort
from groundchat.domain.errors import RetrievalFailure


@dataclass
class SupabaseRPCSearchAdapter(SimilaritySearchPort):
    url: str
    key: str
    rpc_name: str = "match_documents"
    timeout_s: float | None = None  # client-wide PostgREST timeout
    max_workers: int = 4
    _client: Any | None = field(default=None, init=False, repr=False)
    _executor: ThreadPoolExecutor | None = field(default=None, init=False, repr=False)

    @property
    def name(self) -> str:
        return self.rpc_name

    def _ensure_client(self) -> Any:
        if self._client is None:
            try:
                module = import_module("supabase")
            except Exception as ex:  # pragma: no cover
                raise RetrievalFailure("supabase not available; install runtime deps") from ex
            opts: dict[str, Any] = {"persist_session": False}
            if self.timeout_s is not None:
                opts["postgrest_client_timeout"] = self.timeout_s
            self._client = module.create_client(
                self.url, self.key, options=module.ClientOptions(**opts)
            )
        return self._client

    def _ensure_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="supabase-rpc"
            )
        return self._executor

    def _call(self, client: Any, params: dict[str, Any], timeout: float | None) -> Any:
        if timeout is None:
            return client.rpc(self.rpc_name, params).execute()
        future = self._ensure_executor().submit(
            lambda: client.rpc(self.rpc_name, params).execute()
        )
        try:
            return future.result(timeout=max(timeout, 0.0))
        except TimeoutError as ex:
            future.cancel()
            raise RetrievalFailure(
                f"supabase.rpc({self.rpc_name}) timed out after {timeout:.1f}s"
            ) from ex

    def search(
        self,
        query_vector: Sequence[float],
        limit: int,
        threshold: float | None = None,
        timeout: float | None = None,
    ) -> list[Mapping[str, Any]]:
        client = self._ensure_client()
        params: dict[str, Any] = {
            "query_embedding": list(query_vector),
            "match_count": limit,
        }
        if threshold is not None:
            params["match_threshold"] = threshold
        try:
            resp: Any = self._call(client, params, timeout)
        except RetrievalFailure:
            raise
        except Exception as ex:  # noqa: BLE001
            # Row-level security, missing grants and unknown function names all land here
            detail = getattr(ex, "message", None) or str(ex)
            raise RetrievalFailure(f"supabase.rpc({self.rpc_name}) failed: {detail}") from ex

        data = getattr(resp, "data", None)
        if data is None:
            return []
        if isinstance(data, Mapping):
            return [data]
        return list(data)
