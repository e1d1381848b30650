"""Calendar month periods used as the granularity of obligations."""

import calendar
from dataclasses import dataclass
from datetime import date

from corent.exceptions import InvalidInputError

FRENCH_MONTHS = (
    "janvier",
    "février",
    "mars",
    "avril",
    "mai",
    "juin",
    "juillet",
    "août",
    "septembre",
    "octobre",
    "novembre",
    "décembre",
)


@dataclass(frozen=True, order=True)
class Period:
    """A (year, month) pair."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise InvalidInputError(f"Invalid month: {self.month}")

    @classmethod
    def of(cls, day: date) -> "Period":
        """Period containing ``day``."""
        if not isinstance(day, date):
            raise InvalidInputError(f"Expected a date, got {type(day).__name__}")
        return cls(day.year, day.month)

    @classmethod
    def parse(cls, value: str) -> "Period":
        """Parse a ``YYYY-MM`` string."""
        try:
            year, month = value.split("-")
            return cls(int(year), int(month))
        except ValueError as e:
            raise InvalidInputError(f"Invalid period: {value!r}") from e

    @property
    def length(self) -> int:
        """Number of days in the month."""
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return date(self.year, self.month, self.length)

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month

    def day(self, day_of_month: int) -> date:
        """Date of ``day_of_month`` in this period.

        Days past the end of the month are clamped to its last day, so a
        billing day of 31 falls on February 28th (or 29th).
        """
        if day_of_month < 1:
            raise InvalidInputError(f"Invalid day of month: {day_of_month}")
        return date(self.year, self.month, min(day_of_month, self.length))

    def shift(self, months: int) -> "Period":
        index = self.year * 12 + (self.month - 1) + months
        return Period(index // 12, index % 12 + 1)

    def next(self) -> "Period":
        return self.shift(1)

    def previous(self) -> "Period":
        return self.shift(-1)

    def label(self) -> str:
        """French label, e.g. ``juin 2024``."""
        return f"{FRENCH_MONTHS[self.month - 1]} {self.year}"

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def last_periods(current: Period, count: int) -> list[Period]:
    """The ``count`` periods ending with ``current``, oldest first."""
    return [current.shift(offset) for offset in range(-count + 1, 1)]
