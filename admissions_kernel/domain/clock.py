"""
Time source for the admissions engine.

Inquiry, application, admission, enrollment, rejection and withdrawal
dates, and the year in temporary ids and student codes, all come from
an injected ``Clock``.  ``SystemClock`` is the only place that reads
the wall clock.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone

DEFAULT_TEST_TIME = datetime(2024, 1, 15, 9, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Aware UTC datetime."""

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    A clock that only moves when told to.

    Starts at 2024-01-15 09:00 UTC unless ``fixed_time`` is given.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._current = fixed_time or DEFAULT_TEST_TIME

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = time

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)

    def tick(self) -> datetime:
        """Move one second forward and return the new time."""
        self.advance()
        return self._current
