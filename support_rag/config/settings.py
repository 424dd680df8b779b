"""Application settings with environment-driven configuration.

Einzige Stelle mit Env; alle anderen Schichten bekommen Werte injiziert.
"""

import os
from dataclasses import dataclass, field


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables.

    This is the ONLY place where environment variables are read.
    All other layers receive settings via dependency injection.
    """

    # ===== Embedding Configuration =====
    embedding_model: str = field(
        default_factory=lambda: os.getenv(
            "EMBEDDING_MODEL", "sentence-transformers/all-MiniLM-L6-v2"
        )
    )
    embedding_device: str = field(default_factory=lambda: os.getenv("EMBEDDING_DEVICE", "cpu"))
    # Supported: "cpu" | "cuda" | "mps"

    embedding_max_retries: int = field(
        default_factory=lambda: int(os.getenv("EMBEDDING_MAX_RETRIES", "3"))
    )
    # total attempts per text, not additional retries
    embedding_retry_delay_s: float = field(
        default_factory=lambda: float(os.getenv("EMBEDDING_RETRY_DELAY_S", "1.0"))
    )

    # ===== Ingestion Configuration =====
    chunk_size: int = field(default_factory=lambda: int(os.getenv("CHUNK_SIZE", "500")))
    chunk_overlap: int = field(default_factory=lambda: int(os.getenv("CHUNK_OVERLAP", "50")))
    max_concurrent_embeddings: int = field(
        default_factory=lambda: int(os.getenv("MAX_CONCURRENT_EMBEDDINGS", "5"))
    )

    # ===== Retrieval Configuration =====
    retrieval_top_k: int = field(default_factory=lambda: int(os.getenv("RETRIEVAL_TOP_K", "5")))

    # ===== LLM Configuration =====
    llm_max_retries: int = field(default_factory=lambda: int(os.getenv("LLM_MAX_RETRIES", "3")))
    llm_retry_base_delay_s: float = field(
        default_factory=lambda: float(os.getenv("LLM_RETRY_BASE_DELAY_S", "1.0"))
    )
    llm_timeout_s: float = field(default_factory=lambda: float(os.getenv("LLM_TIMEOUT_S", "60")))
    llm_max_tokens: int = field(default_factory=lambda: int(os.getenv("LLM_MAX_TOKENS", "2000")))

    # ===== Chat Configuration =====
    history_max_length: int = field(
        default_factory=lambda: int(os.getenv("HISTORY_MAX_LENGTH", "20"))
    )
    confirmation_ttl_s: float = field(
        default_factory=lambda: float(os.getenv("CONFIRMATION_TTL_S", "300"))
    )
    segment_max_length: int = field(
        default_factory=lambda: int(os.getenv("SEGMENT_MAX_LENGTH", "2000"))
    )

    # ===== Local chatbot (CLI) =====
    chatbot_api_key: str = field(default_factory=lambda: os.getenv("CHATBOT_API_KEY", "EMPTY"))
    chatbot_base_url: str = field(
        default_factory=lambda: os.getenv("CHATBOT_BASE_URL", "https://api.openai.com/v1")
    )
    chatbot_model: str = field(default_factory=lambda: os.getenv("CHATBOT_MODEL", "gpt-4o-mini"))
    chatbot_name: str = field(default_factory=lambda: os.getenv("CHATBOT_NAME", "Assistant"))
    chatbot_response_type: str = field(
        default_factory=lambda: os.getenv("CHATBOT_RESPONSE_TYPE", "")
    )
    chatbot_guild_id: str = field(default_factory=lambda: os.getenv("CHATBOT_GUILD_ID", "local"))
    chatbot_channel_id: str = field(
        default_factory=lambda: os.getenv("CHATBOT_CHANNEL_ID", "cli")
    )

    # ===== Logging =====
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    log_quiet_third_party: bool = field(
        default_factory=lambda: _flag("LOG_QUIET_THIRD_PARTY", "true")
    )
