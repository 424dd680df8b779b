from collections.abc import Sequence
from typing import Protocol

from support_rag.domain.models import EscalationCategory, EscalationOutcome


class EscalationCategoryProvider(Protocol):
    async def list_enabled(self, scope_key: str) -> Sequence[EscalationCategory]: ...


class EscalationExecutor(Protocol):
    """Creates the escalation (ticket) once the user confirmed it."""

    async def create(
        self,
        scope_key: str,
        category_id: str,
        initial_message: str,
        *,
        user_id: str,
    ) -> EscalationOutcome: ...
