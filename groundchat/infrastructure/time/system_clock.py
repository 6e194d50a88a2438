"""System clock adapter providing real UTC time.

This is the production implementation of ClockPort.
For tests, inject a fake clock instead.
"""

from __future__ import annotations

from datetime import UTC, datetime

from groundchat.application.ports.clock_port import ClockPort


class SystemClock(ClockPort):
    """Production clock adapter returning real system time in UTC."""

    def now(self) -> datetime:  # pragma: no cover - trivial
        """Return current system time in UTC timezone."""
        return datetime.now(UTC)
