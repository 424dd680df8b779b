"""Embedding generator with retry and lazy dimensionality detection.

Wraps a synchronous ``EmbeddingPort`` for use from async code. One instance
is shared by ingestion and query encoding so both sides agree on the vector
length.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from tenacity import AsyncRetrying, RetryError, before_sleep_log, stop_after_attempt, wait_fixed

from support_rag.application.ports.embedding_port import EmbeddingPort
from support_rag.domain.errors import EmbeddingError

logger = logging.getLogger(__name__)

FALLBACK_DIMENSIONS = 384
_SAMPLE_TEXT = "test"


class EmbeddingGenerator:
    """
    - create(): ``max_retries`` attempts in total, fixed ``retry_delay`` between them
    - get_expected_dimensions(): embeds a sample text once and caches the length;
      falls back to 384 (logged) so indexing keeps working in degraded mode
    """

    def __init__(
        self,
        backend: EmbeddingPort,
        *,
        model_name: str = "",
        max_retries: int = 3,
        retry_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        self.backend = backend
        self.model_name = model_name
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep = sleep
        self._dimensions: int | None = None

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_fixed(self.retry_delay),
            before_sleep=before_sleep_log(logger, logging.INFO),
            sleep=self._sleep,
            reraise=False,
        )

    async def _embed(self, text: str) -> list[float]:
        vector = await asyncio.to_thread(self.backend.embed_query, text)
        if not vector:
            raise EmbeddingError("backend returned an empty vector")
        return [float(x) for x in vector]

    async def create(self, text: str, *, skip_dimension_cache: bool = False) -> list[float]:
        try:
            vector = await self._retrying()(self._embed, text)
        except RetryError as ex:
            cause = ex.last_attempt.exception()
            raise EmbeddingError(
                f"Failed to generate embeddings after {self.max_retries} attempts: {cause}"
            ) from cause

        if self._dimensions is None and not skip_dimension_cache:
            self._dimensions = len(vector)
        return vector

    async def get_expected_dimensions(self) -> int:
        if self._dimensions is not None:
            return self._dimensions
        try:
            sample = await self.create(_SAMPLE_TEXT, skip_dimension_cache=True)
            self._dimensions = len(sample)
        except EmbeddingError:
            logger.warning(
                "Could not detect dimensions for model %s, defaulting to %d",
                self.model_name or "<unknown>",
                FALLBACK_DIMENSIONS,
            )
            self._dimensions = FALLBACK_DIMENSIONS
        return self._dimensions

    def get_cached_dimensions(self) -> int | None:
        return self._dimensions

    def reset_dimensions_cache(self) -> None:
        """Forget the detected length, e.g. after switching models."""
        self._dimensions = None
