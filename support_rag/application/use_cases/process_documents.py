"""Document ingestion use case: validate, read, split, hash, embed.

Embeddings are generated in batches of ``max_concurrent_embeddings``; a batch
fully settles before the next one starts, so at most that many model calls
are in flight.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections.abc import Sequence
from pathlib import PurePath

from support_rag.application.dto.ingest_dto import IngestReport, ProcessingOptions
from support_rag.application.ports.clock_port import ClockPort
from support_rag.application.ports.document_loader_port import DocumentLoaderPort
from support_rag.application.services.embedding_generator import EmbeddingGenerator
from support_rag.domain.errors import DomainError, EmbeddingError, UnsupportedFormatError
from support_rag.domain.models import ChunkMetadata, DocumentChunk, SourceInfo
from support_rag.domain.services.chunking import count_words, split_text
from support_rag.domain.types import SourceType

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS: dict[str, SourceType] = {".txt": "txt", ".md": "md"}


def source_type_for(path: str) -> SourceType:
    ext = PurePath(path).suffix.lower()
    try:
        return SUPPORTED_EXTENSIONS[ext]
    except KeyError:
        raise UnsupportedFormatError(
            f"Invalid file extension {ext or '<none>'!r}. "
            f"Supported extensions are: {', '.join(SUPPORTED_EXTENSIONS)}"
        ) from None


def content_hash(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class DocumentProcessor:
    def __init__(
        self,
        embeddings: EmbeddingGenerator,
        loader: DocumentLoaderPort,
        clock: ClockPort,
        defaults: ProcessingOptions | None = None,
    ) -> None:
        self.embeddings = embeddings
        self.loader = loader
        self.clock = clock
        self.defaults = defaults or ProcessingOptions()

    # ---------- public API ----------

    async def process_document(
        self, path: str, options: ProcessingOptions | None = None
    ) -> list[DocumentChunk]:
        """Ingest one ``.txt``/``.md`` file.

        Raises:
            UnsupportedFormatError: extension is not supported
            DocumentNotFoundError / DocumentReadError: from the loader
        """
        source_type = source_type_for(path)
        payload = self.loader.load(path)
        source = SourceInfo(name=payload.name, path=payload.source_path, type=source_type)
        return await self._process(payload.text, source, options or self.defaults)

    async def process_text(
        self,
        text: str,
        source_name: str,
        source_type: SourceType,
        options: ProcessingOptions | None = None,
    ) -> list[DocumentChunk]:
        """Ingest in-memory text; the source path is ``memory://<name>.<type>``."""
        if source_type not in SUPPORTED_EXTENSIONS.values():
            raise UnsupportedFormatError(f"unsupported source type {source_type!r}")
        source = SourceInfo(
            name=source_name,
            path=f"memory://{source_name}.{source_type}",
            type=source_type,
        )
        return await self._process(text, source, options or self.defaults)

    async def process_documents(
        self, paths: Sequence[str], options: ProcessingOptions | None = None
    ) -> IngestReport:
        chunks: list[DocumentChunk] = []
        failed: dict[str, str] = {}
        processed = 0
        for path in paths:
            try:
                chunks.extend(await self.process_document(path, options))
                processed += 1
            except DomainError as ex:
                logger.error("Failed to process %s: %s", path, ex)
                failed[path] = str(ex)
        logger.info("Processing complete: %d successful, %d failed", processed, len(failed))
        return IngestReport(chunks=chunks, processed=processed, failed=failed)

    async def get_query_embedding(self, text: str) -> list[float]:
        try:
            return await self.embeddings.create(text)
        except EmbeddingError as ex:
            raise EmbeddingError(f"Failed to create query embedding: {ex}") from ex

    async def get_embedding_dimensions(self) -> int:
        return await self.embeddings.get_expected_dimensions()

    def reset_embedding_cache(self) -> None:
        self.embeddings.reset_dimensions_cache()

    # ---------- internals ----------

    def _build_chunks(
        self, pieces: Sequence[str], source: SourceInfo, options: ProcessingOptions
    ) -> list[DocumentChunk]:
        now = self.clock.now()
        total = len(pieces)
        seen: set[str] = set()
        out: list[DocumentChunk] = []
        for index, piece in enumerate(pieces):
            digest = content_hash(piece) if options.deduplicate else None
            if digest is not None:
                if digest in seen:
                    logger.debug("Skipping duplicate chunk %d of %s", index, source.path)
                    continue
                seen.add(digest)
            meta = ChunkMetadata(
                source=source,
                created_at=now,
                updated_at=now,
                tags=frozenset(options.tags),
                chunk_index=index,
                total_chunks=total,
                word_count=count_words(piece),
                char_count=len(piece),
                hash=digest,
            )
            out.append(DocumentChunk(content=piece, metadata=meta))
        return out

    async def _embed_one(self, chunk: DocumentChunk, expected: int | None) -> DocumentChunk | None:
        index = chunk.metadata.chunk_index
        try:
            vector = await self.embeddings.create(chunk.content)
        except EmbeddingError as ex:
            logger.error("Failed to create embedding for chunk %d: %s", index, ex)
            return None
        if expected is not None and len(vector) != expected:
            logger.warning(
                "Embedding dimension mismatch for chunk %d: expected %d, got %d",
                index,
                expected,
                len(vector),
            )
        return DocumentChunk(content=chunk.content, metadata=chunk.metadata, embedding=tuple(vector))

    async def _process(
        self, text: str, source: SourceInfo, options: ProcessingOptions
    ) -> list[DocumentChunk]:
        if options.max_concurrent_embeddings <= 0:
            raise ValueError("max_concurrent_embeddings must be > 0")
        pieces = split_text(text, options.splitter_params())
        chunks = self._build_chunks(pieces, source, options)
        if options.skip_embedding or not chunks:
            return chunks

        expected = await self.embeddings.get_expected_dimensions()
        logger.info("Using embedding model with %d dimensions", expected)

        out: list[DocumentChunk] = []
        size = options.max_concurrent_embeddings
        for start in range(0, len(chunks), size):
            batch = chunks[start : start + size]
            results = await asyncio.gather(*(self._embed_one(c, expected) for c in batch))
            out.extend(r for r in results if r is not None)
        logger.info("Embedded %d of %d chunks from %s", len(out), len(chunks), source.path)
        return out
