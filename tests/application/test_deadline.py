"""Tests for request deadlines."""

from datetime import UTC, datetime, timedelta

import pytest

from groundchat.application.deadline import Deadline, remaining_or_none
from groundchat.application.ports.clock_port import ClockPort
from groundchat.domain.errors import DeadlineExceeded


class FakeClock(ClockPort):
    def __init__(self) -> None:
        self.current = datetime(2026, 1, 1, tzinfo=UTC)

    def now(self) -> datetime:
        return self.current


def test_remaining_counts_down_and_never_goes_negative() -> None:
    clock = FakeClock()
    deadline = Deadline.after(10, clock)

    assert deadline.remaining() == 10.0
    clock.current += timedelta(seconds=4)
    assert deadline.remaining() == 6.0
    clock.current += timedelta(seconds=30)
    assert deadline.remaining() == 0.0


def test_check_raises_once_expired() -> None:
    clock = FakeClock()
    deadline = Deadline.after(1, clock)

    deadline.check("embedding")
    clock.current += timedelta(seconds=1)

    with pytest.raises(DeadlineExceeded, match="synthesis"):
        deadline.check("synthesis")


def test_remaining_or_none() -> None:
    assert remaining_or_none(None) is None
    assert remaining_or_none(Deadline.after(5, FakeClock())) == 5.0
