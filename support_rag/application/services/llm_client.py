"""Generic chat-completion client with exponential backoff.

Knows nothing about tools or RAG; it only decides whether a failed call is
worth repeating.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from support_rag.application.ports.llm_port import ChatMessage, LLMCompletion, LLMPort
from support_rag.domain.errors import LLMRateLimited, LLMServerError, LLMUnavailable

logger = logging.getLogger(__name__)

_RETRYABLE = (LLMRateLimited, LLMServerError)


class RetryingLLMClient:
    """Retries 429 and 5xx with ``base_delay * 2 ** (attempt - 1)``.

    With ``max_retries=3`` a persistently failing backend is called four
    times before ``LLMUnavailable`` is raised. Timeouts and every other
    error propagate on the first occurrence.
    """

    def __init__(
        self,
        port: LLMPort,
        *,
        max_retries: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.port = port
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._sleep = sleep

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.base_delay),
            retry=retry_if_exception_type(_RETRYABLE),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
            reraise=False,
        )

    async def invoke(
        self, messages: Sequence[ChatMessage], model: str, **options: Any
    ) -> LLMCompletion:
        try:
            return await self._retrying()(self.port.complete, messages, model, **options)
        except RetryError as ex:
            last = ex.last_attempt
            cause = last.exception()
            raise LLMUnavailable(last.attempt_number, str(cause)) from cause
