from collections.abc import Mapping
from typing import Protocol

from support_rag.domain.models import PendingToolConfirmation


class PendingConfirmationStore(Protocol):
    """Registry of escalations that wait for the user's yes/no.

    ``pop`` removes and returns in one step, so a record is consumed at most
    once. ``snapshot``/``replace_all`` let the caller run a pure eviction
    sweep and write the survivors back.
    """

    def put(self, record: PendingToolConfirmation) -> None: ...

    def get(self, confirmation_id: str) -> PendingToolConfirmation | None: ...

    def pop(self, confirmation_id: str) -> PendingToolConfirmation | None: ...

    def snapshot(self) -> Mapping[str, PendingToolConfirmation]: ...

    def replace_all(self, records: Mapping[str, PendingToolConfirmation]) -> None: ...
