from datetime import timedelta

from support_rag.application.dto.ingest_dto import ProcessingOptions
from support_rag.application.ports.chatbot_config_port import ChatbotConfigProvider
from support_rag.application.ports.clock_port import ClockPort
from support_rag.application.ports.embedding_port import EmbeddingPort
from support_rag.application.ports.escalation_port import (
    EscalationCategoryProvider,
    EscalationExecutor,
)
from support_rag.application.ports.vector_index_port import VectorIndexPort
from support_rag.application.services.conversation import ConversationHistory
from support_rag.application.services.embedding_generator import EmbeddingGenerator
from support_rag.application.services.llm_client import RetryingLLMClient
from support_rag.application.services.retrieval import KnowledgeRetriever
from support_rag.application.use_cases.chat_service import ChatbotService, LLMFactory
from support_rag.application.use_cases.process_documents import DocumentProcessor
from support_rag.config.settings import AppSettings
from support_rag.domain.models import ChatbotConfig
from support_rag.infrastructure.embeddings.sentence_transformers_adapter import (
    SentenceTransformersEmbeddingAdapter,
)
from support_rag.infrastructure.llm.openai_chat_adapter import OpenAIChatAdapter
from support_rag.infrastructure.memory.confirmation_store import InMemoryConfirmationStore
from support_rag.infrastructure.memory.history_store import InMemoryHistoryStore
from support_rag.infrastructure.parsing.text_loader import PlainTextLoaderAdapter
from support_rag.infrastructure.time.system_clock import SystemClock

__all__ = [
    "build_chatbot_config",
    "build_chatbot_service",
    "build_clock",
    "build_document_processor",
    "build_embedding",
    "build_embedding_generator",
    "build_llm_factory",
    "build_processing_options",
]


def build_embedding(settings: AppSettings) -> EmbeddingPort:
    return SentenceTransformersEmbeddingAdapter(
        model_name=settings.embedding_model,
        device=settings.embedding_device,
    )


def build_embedding_generator(
    settings: AppSettings, backend: EmbeddingPort | None = None
) -> EmbeddingGenerator:
    """One generator per process: ingestion and queries must share its dimension cache."""
    return EmbeddingGenerator(
        backend or build_embedding(settings),
        model_name=settings.embedding_model,
        max_retries=settings.embedding_max_retries,
        retry_delay=settings.embedding_retry_delay_s,
    )


def build_clock() -> ClockPort:
    """Build clock adapter for time operations.

    Note:
        Tests should inject FakeClock or similar test doubles instead.
    """
    return SystemClock()


def build_processing_options(settings: AppSettings, **overrides: object) -> ProcessingOptions:
    base = {
        "chunk_size": settings.chunk_size,
        "chunk_overlap": settings.chunk_overlap,
        "max_concurrent_embeddings": settings.max_concurrent_embeddings,
    }
    base.update({k: v for k, v in overrides.items() if v is not None})
    return ProcessingOptions(**base)  # type: ignore[arg-type]


def build_document_processor(
    settings: AppSettings, embeddings: EmbeddingGenerator | None = None
) -> DocumentProcessor:
    return DocumentProcessor(
        embeddings=embeddings or build_embedding_generator(settings),
        loader=PlainTextLoaderAdapter(),
        clock=build_clock(),
        defaults=build_processing_options(settings),
    )


def build_llm_factory(settings: AppSettings) -> LLMFactory:
    """Return a factory that caches one retrying client per (base_url, api_key)."""
    cache: dict[tuple[str, str], RetryingLLMClient] = {}

    def factory(config: ChatbotConfig) -> RetryingLLMClient:
        key = (config.base_url, config.api_key)
        if key not in cache:
            cache[key] = RetryingLLMClient(
                OpenAIChatAdapter(
                    base_url=config.base_url,
                    api_key=config.api_key,
                    timeout=settings.llm_timeout_s,
                ),
                max_retries=settings.llm_max_retries,
                base_delay=settings.llm_retry_base_delay_s,
            )
        return cache[key]

    return factory


def build_chatbot_config(settings: AppSettings) -> ChatbotConfig:
    return ChatbotConfig(
        api_key=settings.chatbot_api_key,
        base_url=settings.chatbot_base_url,
        model_name=settings.chatbot_model,
        chatbot_name=settings.chatbot_name,
        response_type=settings.chatbot_response_type,
        guild_id=settings.chatbot_guild_id,
        channel_id=settings.chatbot_channel_id,
    )


def build_chatbot_service(
    settings: AppSettings,
    *,
    categories: EscalationCategoryProvider,
    executor: EscalationExecutor,
    configs: ChatbotConfigProvider,
    index: VectorIndexPort | None = None,
    embeddings: EmbeddingGenerator | None = None,
    llm_factory: LLMFactory | None = None,
    clock: ClockPort | None = None,
) -> ChatbotService:
    retriever = None
    if index is not None:
        retriever = KnowledgeRetriever(
            embeddings or build_embedding_generator(settings),
            index,
            top_k=settings.retrieval_top_k,
        )
    return ChatbotService(
        llm_factory=llm_factory or build_llm_factory(settings),
        history=ConversationHistory(InMemoryHistoryStore(), settings.history_max_length),
        confirmations=InMemoryConfirmationStore(),
        categories=categories,
        executor=executor,
        configs=configs,
        clock=clock or build_clock(),
        retriever=retriever,
        confirmation_ttl=timedelta(seconds=settings.confirmation_ttl_s),
        segment_max_length=settings.segment_max_length,
        max_tokens=settings.llm_max_tokens,
    )
