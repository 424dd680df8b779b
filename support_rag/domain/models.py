# support_rag/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .types import Role, SourceType, Vector


@dataclass(frozen=True)
class SourceInfo:
    name: str
    path: str
    type: SourceType


@dataclass(frozen=True)
class ChunkMetadata:
    """
    Metadata attached to every chunk produced by the document processor.

    - chunk_index / total_chunks: position within the split of one source
      (counted before deduplication, so chunk_index < total_chunks always holds)
    - hash: SHA-256 of the content, only present when deduplication was requested
    """

    source: SourceInfo
    created_at: datetime
    updated_at: datetime
    tags: frozenset[str]
    chunk_index: int
    total_chunks: int
    word_count: int
    char_count: int
    hash: str | None = None


@dataclass(frozen=True)
class DocumentChunk:
    content: str
    metadata: ChunkMetadata
    embedding: Vector | None = None


@dataclass(frozen=True)
class RetrievedChunk:
    """
    Immutable domain entity that represents a retrieved passage/chunk.

    - id:        stable identifier for the chunk (source path + chunk index)
    - text:      the visible chunk text
    - vector:    the stored embedding vector or None if the index does not return it
    - metadata:  immutable metadata mapping (source, tags, chunk_index, ...)
    - score:     similarity score set by retrieval (None if unset)
    """

    id: str
    text: str
    vector: Vector | None
    metadata: Mapping[str, Any]
    score: float | None = None


@dataclass(frozen=True)
class RankedChunk:
    """A retrieved chunk with its 1-based position in the result list."""

    chunk: RetrievedChunk
    rank: int


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


@dataclass(frozen=True)
class ConversationKey:
    """A conversation is owned by one user inside one guild."""

    guild_id: str
    user_id: str


@dataclass(frozen=True)
class ChatbotConfig:
    api_key: str
    base_url: str
    model_name: str
    chatbot_name: str
    response_type: str
    guild_id: str
    channel_id: str


@dataclass(frozen=True)
class EscalationCategory:
    id: str
    name: str


@dataclass(frozen=True)
class EscalationOutcome:
    success: bool
    resource_ref: str | None = None
    ticket_number: int | None = None
    error: str | None = None


@dataclass(frozen=True)
class PendingToolConfirmation:
    id: str
    category_id: str
    category_name: str
    user_message: str
    guild_id: str
    channel_id: str
    user_id: str
    tool_message: str
    created_at: datetime
