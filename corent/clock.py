"""Injectable time sources."""

from datetime import date, datetime
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell today's date."""

    def today(self) -> date: ...


class SystemClock:
    """Clock backed by the wall-clock time."""

    def today(self) -> date:
        return date.today()


class FixedClock:
    """Clock frozen at a given date, for tests and replays."""

    def __init__(self, current: date | datetime) -> None:
        if isinstance(current, datetime):
            current = current.date()
        self.current = current

    def today(self) -> date:
        return self.current

    def advance_to(self, current: date) -> None:
        """Move the clock to another date."""
        self.current = current
