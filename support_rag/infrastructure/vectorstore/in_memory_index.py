from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from support_rag.application.ports.vector_index_port import RetrievedChunk, VectorIndexPort
from support_rag.domain.errors import DimensionMismatchError, VectorStoreError
from support_rag.domain.models import DocumentChunk
from support_rag.domain.similarity import cosine
from support_rag.domain.types import Vector


@dataclass(frozen=True)
class _Entry:
    id: str
    text: str
    vector: Vector
    metadata: dict[str, Any]


def chunk_id(chunk: DocumentChunk) -> str:
    return f"{chunk.metadata.source.path}#{chunk.metadata.chunk_index}"


def _payload(chunk: DocumentChunk) -> dict[str, Any]:
    m = chunk.metadata
    return {
        "source_name": m.source.name,
        "source_path": m.source.path,
        "source_type": m.source.type,
        "chunk_index": m.chunk_index,
        "total_chunks": m.total_chunks,
        "tags": sorted(m.tags),
        "hash": m.hash,
    }


@dataclass
class InMemoryVectorIndex(VectorIndexPort):
    """Brute-force cosine index, partitioned by scope key.

    Each scope records the length of its first vector; later vectors of a
    different length are rejected with ``DimensionMismatchError``.
    Re-adding a source replaces its previous chunks.
    """

    _entries: dict[str, list[_Entry]] = field(default_factory=dict, init=False)
    _dims: dict[str, int] = field(default_factory=dict, init=False)

    def add_chunks(self, scope_key: str, chunks: Iterable[DocumentChunk]) -> int:
        chunks = [c for c in chunks if c.embedding is not None]
        if not chunks:
            return 0
        dim = self._dims.get(scope_key, len(chunks[0].embedding or ()))
        for c in chunks:
            if len(c.embedding or ()) != dim:
                raise DimensionMismatchError(dim, len(c.embedding or ()))

        replaced = {c.metadata.source.path for c in chunks}
        kept = [e for e in self._entries.get(scope_key, []) if e.metadata["source_path"] not in replaced]
        kept.extend(
            _Entry(id=chunk_id(c), text=c.content, vector=tuple(c.embedding or ()), metadata=_payload(c))
            for c in chunks
        )
        self._entries[scope_key] = kept
        self._dims[scope_key] = dim
        return len(chunks)

    def delete_source(self, scope_key: str, source_path: str) -> int:
        before = self._entries.get(scope_key, [])
        after = [e for e in before if e.metadata["source_path"] != source_path]
        self._entries[scope_key] = after
        if not after:
            self._entries.pop(scope_key, None)
            self._dims.pop(scope_key, None)
        return len(before) - len(after)

    def dimensions(self, scope_key: str) -> int | None:
        return self._dims.get(scope_key)

    async def has_data(self, scope_key: str) -> bool:
        return bool(self._entries.get(scope_key))

    async def search(
        self, scope_key: str, query_vector: Sequence[float], k: int = 5
    ) -> list[RetrievedChunk]:
        if k <= 0:
            raise VectorStoreError("k must be > 0")
        entries = self._entries.get(scope_key, [])
        if not entries:
            return []
        dim = self._dims[scope_key]
        if len(query_vector) != dim:
            raise DimensionMismatchError(dim, len(query_vector))
        scored = [
            RetrievedChunk(
                id=e.id,
                text=e.text,
                vector=e.vector,
                metadata=dict(e.metadata),
                score=cosine(query_vector, e.vector),
            )
            for e in entries
        ]
        scored.sort(key=lambda c: c.score or 0.0, reverse=True)
        return scored[:k]
