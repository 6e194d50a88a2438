from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Port for time-related operations (request deadlines, latency)."""

    @abstractmethod
    def now(self) -> datetime:
        """Return current UTC datetime."""
        ...
