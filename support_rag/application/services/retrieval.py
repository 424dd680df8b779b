# support_rag/application/services/retrieval.py
from __future__ import annotations

import logging
from collections.abc import Sequence

from support_rag.application.ports.vector_index_port import VectorIndexPort
from support_rag.application.services.embedding_generator import EmbeddingGenerator
from support_rag.domain.errors import RetrievalError
from support_rag.domain.models import RankedChunk
from support_rag.domain.similarity import rank_by_score

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 5


class KnowledgeRetriever:
    """
    Query side of RAG: encode the question with the shared generator, ask the
    index of one scope for the nearest chunks and rank them.

    - retrieve(): [] when the scope has no data
    - infra errors are mapped to RetrievalError
    """

    def __init__(
        self,
        embeddings: EmbeddingGenerator,
        index: VectorIndexPort,
        top_k: int = DEFAULT_TOP_K,
    ) -> None:
        if top_k <= 0:
            raise ValueError("top_k must be > 0")
        self.embeddings = embeddings
        self.index = index
        self.top_k = top_k

    async def retrieve(self, query: str, scope_key: str) -> list[RankedChunk]:
        try:
            if not await self.index.has_data(scope_key):
                return []
        except Exception as ex:
            raise RetrievalError(f"index lookup failed: {ex}") from ex

        try:
            query_vector = await self.embeddings.create(query)
        except Exception as ex:
            raise RetrievalError(f"query embedding failed: {ex}") from ex
        logger.debug("Query embedding has %d dimensions", len(query_vector))

        try:
            hits = await self.index.search(scope_key, query_vector, self.top_k)
        except Exception as ex:
            raise RetrievalError(f"vector search failed: {ex}") from ex

        ranked = rank_by_score(hits, self.top_k)
        logger.debug("Found %d relevant chunks for scope %s", len(ranked), scope_key)
        return ranked


def render_context(chunks: Sequence[RankedChunk]) -> str | None:
    """Format hits as ``[Context N]`` blocks; None when there is nothing to show."""
    blocks = [f"[Context {c.rank}]\n{c.chunk.text}" for c in chunks if c.chunk.text.strip()]
    return "\n\n".join(blocks) if blocks else None
