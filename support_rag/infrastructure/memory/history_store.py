from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field

from support_rag.application.ports.history_port import HistoryStorePort
from support_rag.domain.models import ChatMessage, ConversationKey
from support_rag.domain.types import Role


@dataclass
class InMemoryHistoryStore(HistoryStorePort):
    _log: defaultdict[ConversationKey, list[ChatMessage]] = field(
        default_factory=lambda: defaultdict(list), init=False
    )

    async def add_message(self, key: ConversationKey, role: Role, content: str) -> None:
        self._log[key].append(ChatMessage(role=role, content=content))

    async def add_exchange(
        self, key: ConversationKey, user_content: str, assistant_content: str
    ) -> None:
        pair = [
            ChatMessage(role="user", content=user_content),
            ChatMessage(role="assistant", content=assistant_content),
        ]
        self._log[key].extend(pair)

    async def get_history(self, key: ConversationKey) -> Sequence[ChatMessage]:
        return list(self._log.get(key, ()))

    async def trim(self, key: ConversationKey, max_length: int) -> None:
        messages = self._log.get(key)
        if messages and len(messages) > max_length:
            del messages[: len(messages) - max_length]

    async def clear(self, key: ConversationKey, keep_system: bool = True) -> None:
        if keep_system:
            kept = [m for m in self._log.get(key, ()) if m.role == "system"]
            if kept:
                self._log[key] = kept
                return
        self._log.pop(key, None)
