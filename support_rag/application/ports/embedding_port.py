from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingPort(Protocol):
    """Synchronous text-to-vector model.

    Implementations may block (model load, CPU/GPU inference); callers in
    async code run them through ``asyncio.to_thread``.
    """

    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]: ...
    def embed_query(self, text: str) -> list[float]: ...
