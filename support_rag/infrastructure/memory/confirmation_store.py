from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from support_rag.application.ports.confirmation_store_port import PendingConfirmationStore
from support_rag.domain.models import PendingToolConfirmation


@dataclass
class InMemoryConfirmationStore(PendingConfirmationStore):
    """Process-local map keyed by confirmation id; one per service instance."""

    _records: dict[str, PendingToolConfirmation] = field(default_factory=dict, init=False)

    def put(self, record: PendingToolConfirmation) -> None:
        self._records[record.id] = record

    def get(self, confirmation_id: str) -> PendingToolConfirmation | None:
        return self._records.get(confirmation_id)

    def pop(self, confirmation_id: str) -> PendingToolConfirmation | None:
        return self._records.pop(confirmation_id, None)

    def snapshot(self) -> Mapping[str, PendingToolConfirmation]:
        return dict(self._records)

    def replace_all(self, records: Mapping[str, PendingToolConfirmation]) -> None:
        self._records = dict(records)

    def __len__(self) -> int:
        return len(self._records)
