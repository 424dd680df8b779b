from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from support_rag.domain.models import RetrievedChunk

__all__ = ["RetrievedChunk", "VectorIndexPort"]


@runtime_checkable
class VectorIndexPort(Protocol):
    """Read side of the knowledge index, partitioned by scope (guild).

    ``search`` returns scored hits, best first.
    """

    async def has_data(self, scope_key: str) -> bool: ...

    async def search(
        self, scope_key: str, query_vector: Sequence[float], k: int = 5
    ) -> list[RetrievedChunk]: ...
