"""Calendar-month payroll periods."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from payroll_core.errors import InvalidPeriod

DEFAULT_MIN_YEAR = 2000
DEFAULT_MAX_YEAR = 2100


@dataclass(frozen=True)
class Period:
    """Inclusive instant range covering one calendar month.

    ``month`` is 0-based (0 = January) to match the request format.
    """

    month: int
    year: int
    start: datetime
    end: datetime

    @property
    def next_start(self) -> datetime:
        """First instant of the following month."""
        return datetime.combine(self.end.date() + timedelta(days=1), time.min)

    @property
    def label(self) -> str:
        return f"{calendar.month_name[self.month + 1]} {self.year}"

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


def resolve_period(
    month: int,
    year: int,
    min_year: int = DEFAULT_MIN_YEAR,
    max_year: int = DEFAULT_MAX_YEAR,
) -> Period:
    """Map a (0-based month, year) pair to its inclusive calendar range.

    Raises:
        InvalidPeriod: If month is not in 0..11 or year is outside
            [min_year, max_year].
    """
    for name, value in (("month", month), ("year", year)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidPeriod(month, year, f"{name} must be an integer")

    if not 0 <= month <= 11:
        raise InvalidPeriod(month, year, "month must be between 0 and 11")
    if not min_year <= year <= max_year:
        raise InvalidPeriod(
            month, year, f"year must be between {min_year} and {max_year}"
        )

    last_day = calendar.monthrange(year, month + 1)[1]
    start = datetime(year, month + 1, 1)
    end = datetime.combine(start.replace(day=last_day).date(), time.max)
    return Period(month=month, year=year, start=start, end=end)


def period_for_instant(instant: datetime) -> Period:
    """Resolve the calendar month containing an instant."""
    return resolve_period(
        instant.month - 1,
        instant.year,
        min_year=instant.year,
        max_year=instant.year,
    )
