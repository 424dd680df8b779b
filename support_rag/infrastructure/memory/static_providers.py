"""In-process collaborators for local runs of the chatbot (CLI, demos)."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from support_rag.application.ports.chatbot_config_port import ChatbotConfigProvider
from support_rag.application.ports.escalation_port import (
    EscalationCategoryProvider,
    EscalationExecutor,
)
from support_rag.domain.models import ChatbotConfig, EscalationCategory, EscalationOutcome

logger = logging.getLogger(__name__)


@dataclass
class StaticCategoryProvider(EscalationCategoryProvider):
    """Same categories for every scope."""

    categories: Sequence[EscalationCategory] = ()

    @classmethod
    def from_names(cls, names: Sequence[str]) -> StaticCategoryProvider:
        return cls(
            categories=tuple(
                EscalationCategory(id=f"cat-{i}", name=n) for i, n in enumerate(names, 1)
            )
        )

    async def list_enabled(self, scope_key: str) -> Sequence[EscalationCategory]:
        return list(self.categories)


@dataclass
class StaticConfigProvider(ChatbotConfigProvider):
    configs: Mapping[str, ChatbotConfig] = field(default_factory=dict)

    async def get_by_channel(self, channel_id: str) -> ChatbotConfig | None:
        return self.configs.get(channel_id)


@dataclass
class LoggingEscalationExecutor(EscalationExecutor):
    """Numbers tickets sequentially and only logs them."""

    start: int = 1

    def __post_init__(self) -> None:
        self._numbers = itertools.count(self.start)

    async def create(
        self,
        scope_key: str,
        category_id: str,
        initial_message: str,
        *,
        user_id: str,
    ) -> EscalationOutcome:
        number = next(self._numbers)
        ref = f"ticket-{number:04d}"
        logger.info(
            "Ticket #%d (%s) opened in %s for user %s: %s",
            number,
            category_id,
            scope_key,
            user_id,
            initial_message,
        )
        return EscalationOutcome(success=True, resource_ref=ref, ticket_number=number)
