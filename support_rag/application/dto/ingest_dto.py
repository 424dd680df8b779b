from __future__ import annotations

from dataclasses import dataclass, field

from support_rag.domain.models import DocumentChunk
from support_rag.domain.services.chunking import DEFAULT_SEPARATORS, SplitterParams


@dataclass(frozen=True)
class ProcessingOptions:
    """
    Options for one ingestion run.

    - chunk_size / chunk_overlap: character budget of the splitter
    - tags: copied into every chunk's metadata
    - deduplicate: hash chunks (SHA-256) and drop repeats within one document
    - skip_embedding: emit chunks without vectors
    - max_concurrent_embeddings: size of one settled embedding batch
    """

    chunk_size: int = 500
    chunk_overlap: int = 50
    tags: frozenset[str] = field(default_factory=frozenset)
    deduplicate: bool = False
    skip_embedding: bool = False
    separators: tuple[str, ...] = DEFAULT_SEPARATORS
    max_concurrent_embeddings: int = 5

    def splitter_params(self) -> SplitterParams:
        return SplitterParams(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            separators=self.separators,
        )


@dataclass(frozen=True)
class IngestReport:
    """Outcome of a multi-document run: per-path failures never abort the run."""

    chunks: list[DocumentChunk]
    processed: int
    failed: dict[str, str] = field(default_factory=dict)
