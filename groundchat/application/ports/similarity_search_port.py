from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SimilaritySearchPort(Protocol):
    """Nearest-neighbour search over the corpus.

    Rows are loosely typed mappings; field names differ between backends and
    are resolved by the domain normalizer. Rows come back best match first.
    """

    @property
    def name(self) -> str:
        """Backend identifier reported in answer metadata (e.g. the RPC name)."""
        ...

    def search(
        self,
        query_vector: Sequence[float],
        limit: int,
        threshold: float | None = None,
        timeout: float | None = None,
    ) -> list[Mapping[str, Any]]: ...
