from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from support_rag.domain.models import ChatMessage

__all__ = ["ChatMessage", "LLMCompletion", "LLMPort", "ToolCall"]


@dataclass(frozen=True)
class ToolCall:
    id: str
    name: str
    arguments: str  # raw JSON string as sent by the provider


@dataclass(frozen=True)
class LLMCompletion:
    content: str | None
    tool_calls: tuple[ToolCall, ...] = field(default_factory=tuple)
    finish_reason: str = "stop"


class LLMPort(Protocol):
    """One chat completion call against an OpenAI-compatible endpoint.

    Adapters translate transport failures into ``LLMError`` subclasses
    (``LLMRateLimited``, ``LLMServerError``, ``LLMTimeout``) and never retry
    on their own; retrying is the job of ``RetryingLLMClient``.
    """

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        model: str,
        *,
        tools: Sequence[Mapping[str, Any]] | None = None,
        tool_choice: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMCompletion: ...
