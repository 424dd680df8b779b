import asyncio
from collections.abc import Sequence

import pytest

from support_rag.application.services.embedding_generator import EmbeddingGenerator
from support_rag.application.services.retrieval import KnowledgeRetriever, render_context
from support_rag.domain.errors import RetrievalError, VectorStoreError
from support_rag.domain.models import RankedChunk, RetrievedChunk


class FakeBackend:
    def embed_query(self, text: str) -> list[float]:
        return [1.0, 0.0]

    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        return [[1.0, 0.0] for _ in texts]


class FakeIndex:
    def __init__(self, hits: list[RetrievedChunk] | None = None, error: Exception | None = None):
        self.hits = hits or []
        self.error = error
        self.queries: list[tuple[str, int]] = []

    async def has_data(self, scope_key: str) -> bool:
        return bool(self.hits) or self.error is not None

    async def search(self, scope_key: str, query_vector, k: int = 5) -> list[RetrievedChunk]:
        self.queries.append((scope_key, k))
        if self.error is not None:
            raise self.error
        return self.hits[:k]


def _hit(id_: str, score: float, text: str = "") -> RetrievedChunk:
    return RetrievedChunk(id=id_, text=text or f"text {id_}", vector=None, metadata={}, score=score)


def _retriever(index: FakeIndex, top_k: int = 5) -> KnowledgeRetriever:
    return KnowledgeRetriever(EmbeddingGenerator(FakeBackend()), index, top_k=top_k)


def test_empty_scope_skips_search() -> None:
    index = FakeIndex()
    assert asyncio.run(_retriever(index).retrieve("q", "g1")) == []
    assert index.queries == []


def test_hits_are_ranked_and_capped() -> None:
    index = FakeIndex([_hit("a", 0.1), _hit("b", 0.9), _hit("c", 0.5)])
    ranked = asyncio.run(_retriever(index, top_k=2).retrieve("q", "g1"))

    assert index.queries == [("g1", 2)]
    assert [(r.rank, r.chunk.id) for r in ranked] == [(1, "b"), (2, "a")]


@pytest.mark.parametrize(
    "error", [VectorStoreError("down"), ConnectionError("connection reset"), RuntimeError("boom")]
)
def test_store_failure_is_mapped(error: Exception) -> None:
    index = FakeIndex(error=error)
    with pytest.raises(RetrievalError) as exc:
        asyncio.run(_retriever(index).retrieve("q", "g1"))
    assert exc.value.__cause__ is error


def test_render_context_blocks() -> None:
    ranked = [
        RankedChunk(chunk=_hit("a", 0.9, "Refunds take 5 days."), rank=1),
        RankedChunk(chunk=_hit("b", 0.8, "Invoices are monthly."), rank=2),
    ]
    assert render_context(ranked) == (
        "[Context 1]\nRefunds take 5 days.\n\n[Context 2]\nInvoices are monthly."
    )


def test_render_context_empty() -> None:
    assert render_context([]) is None
