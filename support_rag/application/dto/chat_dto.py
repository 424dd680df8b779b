# support_rag/application/dto/chat_dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DirectAnswer:
    """Grounded reply, already split into transport-sized segments."""

    text: str
    segments: list[str]


@dataclass(frozen=True)
class ConfirmationRequest:
    """
    Proposed escalation waiting for the user's yes/no.

    - confirmation_id: handle for ``resolve`` / ``wait_for_resolution``
    - explanation: the model's summary of why a ticket helps
    - user_message_preview: original message, cut at 100 chars
    """

    confirmation_id: str
    category_id: str
    category_name: str
    explanation: str
    user_message_preview: str
    expires_at: datetime


ChatReply = DirectAnswer | ConfirmationRequest


@dataclass(frozen=True)
class ResolutionOutcome:
    success: bool
    message: str
    resource_ref: str | None = None
