from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, cast

import openai

from support_rag.application.ports.llm_port import ChatMessage, LLMCompletion, LLMPort, ToolCall
from support_rag.domain.errors import LLMError, LLMRateLimited, LLMServerError, LLMTimeout


@dataclass
class OpenAIChatAdapter(LLMPort):
    """Async chat completions against any OpenAI-compatible endpoint.

    The SDK's own retries are disabled; 429/5xx surface as domain errors and
    ``RetryingLLMClient`` decides what to repeat.
    """

    base_url: str  # e.g. "https://api.openai.com/v1"
    api_key: str = "EMPTY"
    timeout: float = 60.0

    def __post_init__(self) -> None:
        self._client: openai.AsyncOpenAI | None = None

    def _get_client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            self._client = openai.AsyncOpenAI(
                base_url=self.base_url,
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        model: str,
        *,
        tools: Sequence[Mapping[str, Any]] | None = None,
        tool_choice: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMCompletion:
        payload: Any = [{"role": m.role, "content": m.content} for m in messages]
        options: dict[str, Any] = {}
        if tools:
            options["tools"] = list(tools)
            if tool_choice is not None:
                options["tool_choice"] = tool_choice
        if max_tokens is not None:
            options["max_tokens"] = max_tokens
        if temperature is not None:
            options["temperature"] = temperature

        try:
            resp: Any = await self._get_client().chat.completions.create(
                model=model,
                messages=cast(Any, payload),
                **options,
            )
        except openai.APITimeoutError as ex:
            raise LLMTimeout(f"LLM request timed out after {self.timeout}s") from ex
        except openai.RateLimitError as ex:
            raise LLMRateLimited(str(ex), status=ex.status_code) from ex
        except openai.APIStatusError as ex:
            if ex.status_code >= 500:
                raise LLMServerError(str(ex), status=ex.status_code) from ex
            raise LLMError(f"LLM request rejected ({ex.status_code}): {ex}") from ex
        except openai.OpenAIError as ex:
            # Translate external errors to domain-specific errors
            raise LLMError(f"LLM communication failed: {ex}") from ex

        if not resp.choices:
            raise LLMError("No response from LLM")
        choice = resp.choices[0]
        calls = tuple(
            ToolCall(id=tc.id, name=tc.function.name, arguments=tc.function.arguments or "")
            for tc in (choice.message.tool_calls or [])
            if getattr(tc, "function", None) is not None
        )
        return LLMCompletion(
            content=choice.message.content,
            tool_calls=calls,
            finish_reason=choice.finish_reason or "stop",
        )
