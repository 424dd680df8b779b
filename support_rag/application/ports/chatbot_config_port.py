from typing import Protocol

from support_rag.domain.models import ChatbotConfig


class ChatbotConfigProvider(Protocol):
    async def get_by_channel(self, channel_id: str) -> ChatbotConfig | None: ...
