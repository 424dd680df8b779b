"""Application ports package.

Re-exports the interfaces the services and use cases depend on.
"""

from support_rag.application.ports.chatbot_config_port import ChatbotConfigProvider
from support_rag.application.ports.clock_port import ClockPort
from support_rag.application.ports.confirmation_store_port import PendingConfirmationStore
from support_rag.application.ports.document_loader_port import DocumentLoaderPort, DocumentPayload
from support_rag.application.ports.embedding_port import EmbeddingPort
from support_rag.application.ports.escalation_port import (
    EscalationCategoryProvider,
    EscalationExecutor,
)
from support_rag.application.ports.history_port import HistoryStorePort
from support_rag.application.ports.llm_port import ChatMessage, LLMCompletion, LLMPort, ToolCall
from support_rag.application.ports.vector_index_port import RetrievedChunk, VectorIndexPort

__all__ = [
    "ChatbotConfigProvider",
    "ClockPort",
    "PendingConfirmationStore",
    "DocumentLoaderPort",
    "DocumentPayload",
    "EmbeddingPort",
    "EscalationCategoryProvider",
    "EscalationExecutor",
    "HistoryStorePort",
    "LLMPort",
    "ChatMessage",
    "LLMCompletion",
    "ToolCall",
    "RetrievedChunk",
    "VectorIndexPort",
]
