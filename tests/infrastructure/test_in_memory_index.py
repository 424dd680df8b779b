import asyncio
from datetime import UTC, datetime

import pytest

from support_rag.domain.errors import DimensionMismatchError, VectorStoreError
from support_rag.domain.models import ChunkMetadata, DocumentChunk, SourceInfo
from support_rag.infrastructure.vectorstore.in_memory_index import InMemoryVectorIndex, chunk_id

NOW = datetime(2024, 1, 1, tzinfo=UTC)


def _chunk(text: str, vec, path: str = "docs/faq.md", index: int = 0) -> DocumentChunk:
    meta = ChunkMetadata(
        source=SourceInfo(name=path.rsplit("/", 1)[-1], path=path, type="md"),
        created_at=NOW,
        updated_at=NOW,
        tags=frozenset({"faq"}),
        chunk_index=index,
        total_chunks=3,
        word_count=len(text.split()),
        char_count=len(text),
    )
    return DocumentChunk(content=text, metadata=meta, embedding=None if vec is None else tuple(vec))


def test_search_orders_by_cosine_and_respects_k() -> None:
    index = InMemoryVectorIndex()
    index.add_chunks(
        "g1",
        [
            _chunk("north", (1.0, 0.0), index=0),
            _chunk("diagonal", (1.0, 1.0), index=1),
            _chunk("east", (0.0, 1.0), index=2),
        ],
    )

    hits = asyncio.run(index.search("g1", [1.0, 0.1], k=2))

    assert [h.text for h in hits] == ["north", "diagonal"]
    assert hits[0].score > hits[1].score
    assert hits[0].id == "docs/faq.md#0"
    assert hits[0].metadata["source_path"] == "docs/faq.md"
    assert hits[0].metadata["tags"] == ["faq"]


def test_scopes_are_isolated() -> None:
    index = InMemoryVectorIndex()
    index.add_chunks("g1", [_chunk("a", (1.0, 0.0))])

    assert asyncio.run(index.has_data("g1")) is True
    assert asyncio.run(index.has_data("g2")) is False
    assert asyncio.run(index.search("g2", [1.0, 0.0])) == []


def test_chunks_without_embedding_are_skipped() -> None:
    index = InMemoryVectorIndex()
    assert index.add_chunks("g1", [_chunk("raw", None)]) == 0
    assert asyncio.run(index.has_data("g1")) is False


def test_mixed_dimensions_rejected() -> None:
    index = InMemoryVectorIndex()
    index.add_chunks("g1", [_chunk("a", (1.0, 0.0))])

    with pytest.raises(DimensionMismatchError) as exc:
        index.add_chunks("g1", [_chunk("b", (1.0, 0.0, 0.0), path="other.md")])
    assert (exc.value.expected, exc.value.actual) == (2, 3)

    with pytest.raises(DimensionMismatchError):
        asyncio.run(index.search("g1", [1.0, 0.0, 0.0]))


def test_readding_source_replaces_chunks() -> None:
    index = InMemoryVectorIndex()
    index.add_chunks("g1", [_chunk("old", (1.0, 0.0)), _chunk("keep", (0.0, 1.0), path="b.md")])
    index.add_chunks("g1", [_chunk("new", (1.0, 0.0))])

    texts = {h.text for h in asyncio.run(index.search("g1", [1.0, 0.0], k=10))}
    assert texts == {"new", "keep"}


def test_delete_source_resets_dimensions_when_empty() -> None:
    index = InMemoryVectorIndex()
    index.add_chunks("g1", [_chunk("a", (1.0, 0.0))])
    assert index.dimensions("g1") == 2

    assert index.delete_source("g1", "docs/faq.md") == 1
    assert index.dimensions("g1") is None
    # a different model may be used afterwards
    index.add_chunks("g1", [_chunk("a", (1.0, 0.0, 0.0))])
    assert index.dimensions("g1") == 3


def test_invalid_k() -> None:
    with pytest.raises(VectorStoreError):
        asyncio.run(InMemoryVectorIndex().search("g1", [1.0], k=0))


def test_chunk_id_uses_path_and_index() -> None:
    assert chunk_id(_chunk("x", (1.0,), path="memory://notes.txt", index=4)) == "memory://notes.txt#4"
