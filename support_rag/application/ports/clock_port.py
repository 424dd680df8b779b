from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Port for reading the current time.

    Confirmation records are stamped and expired against this clock, so tests
    can move time forward without sleeping.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return current UTC datetime."""
        ...
