from __future__ import annotations

from collections.abc import Container, Mapping
from datetime import datetime, timedelta

from ..models import PendingToolConfirmation

CONFIRMATION_PREFIX = "ticket_confirm"
DEFAULT_TTL = timedelta(minutes=5)


def is_expired(
    record: PendingToolConfirmation, now: datetime, ttl: timedelta = DEFAULT_TTL
) -> bool:
    return now - record.created_at > ttl


def evict_expired(
    now: datetime,
    records: Mapping[str, PendingToolConfirmation],
    ttl: timedelta = DEFAULT_TTL,
) -> dict[str, PendingToolConfirmation]:
    """Return the records that are still alive at ``now``; the input is not modified."""
    return {key: rec for key, rec in records.items() if not is_expired(rec, now, ttl)}


def make_confirmation_id(user_id: str, now: datetime, taken: Container[str] = ()) -> str:
    """Build ``<prefix>_<user_id>_<epoch millis>``.

    If the id is already taken (same user, same millisecond) the timestamp
    part is bumped until it is free.
    """
    millis = int(now.timestamp() * 1000)
    candidate = f"{CONFIRMATION_PREFIX}_{user_id}_{millis}"
    while candidate in taken:
        millis += 1
        candidate = f"{CONFIRMATION_PREFIX}_{user_id}_{millis}"
    return candidate
