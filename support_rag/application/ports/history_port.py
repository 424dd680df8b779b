from collections.abc import Sequence
from typing import Protocol

from support_rag.domain.models import ChatMessage, ConversationKey
from support_rag.domain.types import Role


class HistoryStorePort(Protocol):
    """Per-conversation message log, oldest first.

    Stores are usually database-backed, so every method is awaited.
    """

    async def add_message(self, key: ConversationKey, role: Role, content: str) -> None: ...

    async def add_exchange(
        self, key: ConversationKey, user_content: str, assistant_content: str
    ) -> None:
        """Append a user message and its assistant reply as one write.

        Either both messages are stored or neither is.
        """
        ...

    async def get_history(self, key: ConversationKey) -> Sequence[ChatMessage]: ...

    async def trim(self, key: ConversationKey, max_length: int) -> None:
        """Drop the oldest messages until at most ``max_length`` remain."""
        ...

    async def clear(self, key: ConversationKey, keep_system: bool = True) -> None: ...
