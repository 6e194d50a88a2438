# groundchat/application/deadline.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from groundchat.application.ports.clock_port import ClockPort
from groundchat.domain.errors import DeadlineExceeded


@dataclass(frozen=True)
class Deadline:
    """Externally supplied request deadline, checked at every external call."""

    expires_at: datetime
    clock: ClockPort

    @classmethod
    def after(cls, seconds: float, clock: ClockPort) -> Deadline:
        return cls(expires_at=clock.now() + timedelta(seconds=seconds), clock=clock)

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, (self.expires_at - self.clock.now()).total_seconds())

    def expired(self) -> bool:
        return self.clock.now() >= self.expires_at

    def check(self, stage: str) -> None:
        if self.expired():
            raise DeadlineExceeded(f"request deadline exceeded at {stage}")


def remaining_or_none(deadline: Deadline | None) -> float | None:
    return None if deadline is None else deadline.remaining()
