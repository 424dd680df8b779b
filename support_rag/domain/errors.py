"""Domain errors (typed).

Unified error family for the application layer, without infrastructure leaks.
Every error carries a ``user_message`` that the transport may show verbatim.
"""


class DomainError(Exception):
    """Base class for domain-specific errors."""

    user_message = "An unexpected error occurred. Please try again later."


class ValidationError(DomainError):
    """Invalid input/domain state."""


# ---------- Document ingestion ----------


class DocumentError(DomainError):
    """Document loading/parsing failed."""

    user_message = "The document could not be processed."


class UnsupportedFormatError(DocumentError):
    """Source type is not one of the supported formats."""

    user_message = "Unsupported file type. Supported extensions are: .txt, .md"


class DocumentNotFoundError(DocumentError):
    """Source file does not exist."""


class DocumentReadError(DocumentError):
    """Source file exists but could not be read."""


# ---------- Embeddings / retrieval ----------


class EmbeddingError(DomainError):
    """Embedding backend failed or is misconfigured (after retries)."""


class DimensionMismatchError(DomainError):
    """Vector length differs from the dimensionality recorded for the model/index."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"expected {expected} dimensions, got {actual}")


class VectorStoreError(DomainError):
    """Vector index backend failed or is misconfigured."""


class RetrievalError(DomainError):
    """Generic retrieval failure (after infra errors were mapped)."""


# ---------- LLM ----------


class LLMError(DomainError):
    """LLM backend failed or is misconfigured."""

    user_message = "Sorry, I couldn't generate a response right now. Please try again."


class LLMRateLimited(LLMError):
    """Provider answered HTTP 429."""

    def __init__(self, detail: str = "", status: int = 429) -> None:
        self.status = status
        super().__init__(detail or "rate limited")


class LLMServerError(LLMError):
    """Provider answered HTTP 5xx."""

    def __init__(self, detail: str = "", status: int = 500) -> None:
        self.status = status
        super().__init__(detail or f"server error ({status})")


class LLMTimeout(LLMError):
    """The HTTP call to the provider timed out. Never retried."""


class LLMUnavailable(LLMError):
    """Retryable failures persisted past the retry budget."""

    def __init__(self, attempts: int, detail: str = "") -> None:
        self.attempts = attempts
        super().__init__(f"LLM unavailable after {attempts} attempts: {detail}")


class ToolSelectionAmbiguous(LLMError):
    """Model selected a tool whose arguments match no known category."""


# ---------- Confirmation handshake ----------


class ConfirmationError(DomainError):
    """Pending confirmation could not be resolved."""


class ConfirmationExpired(ConfirmationError):
    user_message = "Ticket creation request has expired or is invalid."


class ConfirmationForbidden(ConfirmationError):
    user_message = "You can only confirm your own ticket creation requests."


class EscalationExecutionFailed(DomainError):
    """Escalation collaborator reported failure or raised."""

    user_message = "An error occurred while creating the ticket."
