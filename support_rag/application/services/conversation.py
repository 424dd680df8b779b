"""Conversation history wrapper.

Adds the trim-after-write policy on top of a ``HistoryStorePort`` and
serialises writes per conversation so a user/assistant pair is never
interleaved with another pair of the same conversation.
"""

from __future__ import annotations

import asyncio
import weakref

from support_rag.application.ports.history_port import HistoryStorePort
from support_rag.domain.models import ChatMessage, ConversationKey

DEFAULT_MAX_HISTORY = 20


class ConversationHistory:
    def __init__(self, store: HistoryStorePort, max_length: int = DEFAULT_MAX_HISTORY) -> None:
        if max_length <= 0:
            raise ValueError("max_length must be > 0")
        self.store = store
        self.max_length = max_length
        # entries disappear once no coroutine holds or waits on the lock
        self._locks: weakref.WeakValueDictionary[ConversationKey, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock(self, key: ConversationKey) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def messages(
        self, key: ConversationKey, *, include_system: bool = False
    ) -> list[ChatMessage]:
        history = list(await self.store.get_history(key))
        if include_system:
            return history
        return [m for m in history if m.role != "system"]

    async def append_exchange(self, key: ConversationKey, user_text: str, assistant_text: str) -> None:
        async with self._lock(key):
            await self.store.add_exchange(key, user_text, assistant_text)
            await self.store.trim(key, self.max_length)

    async def clear(self, key: ConversationKey, *, keep_system: bool = False) -> None:
        async with self._lock(key):
            await self.store.clear(key, keep_system)
