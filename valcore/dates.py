"""
Date collaborators: periods, frequencies, day counters and calendars.

These are read-only helpers consumed by curves and indexes. They are kept
deliberately small:
- ``Period`` supports ``date + Period`` / ``date - Period``; month and year
  steps clip to the end of the target month (31 Mar - 1M = 28/29 Feb).
- Day counters compute year fractions only (no compounding conventions).
- Calendars answer business-day questions and advance by business days;
  there is no schedule generation or roll-convention support.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from dateutil.relativedelta import relativedelta


class TimeUnit(Enum):
    DAYS = "D"
    WEEKS = "W"
    MONTHS = "M"
    YEARS = "Y"


class Frequency(Enum):
    """Number of periods per year."""

    ANNUAL = 1
    SEMIANNUAL = 2
    QUARTERLY = 4
    MONTHLY = 12


@dataclass(frozen=True)
class Period:
    """A length of time such as 3 months; combine with dates via + and -."""

    length: int
    unit: TimeUnit

    def __neg__(self) -> "Period":
        return Period(-self.length, self.unit)

    def __radd__(self, other: object) -> date:
        if not isinstance(other, date):
            return NotImplemented
        if self.unit is TimeUnit.DAYS:
            return other + timedelta(days=self.length)
        if self.unit is TimeUnit.WEEKS:
            return other + timedelta(weeks=self.length)
        if self.unit is TimeUnit.MONTHS:
            return other + relativedelta(months=self.length)
        return other + relativedelta(years=self.length)

    def __rsub__(self, other: object) -> date:
        if not isinstance(other, date):
            return NotImplemented
        return other + (-self)

    def __str__(self) -> str:
        return f"{self.length}{self.unit.value}"


def inflation_period(d: date, frequency: Frequency) -> tuple[date, date]:
    """Return the first and last day of the inflation period containing ``d``."""
    months = 12 // frequency.value
    start_month = ((d.month - 1) // months) * months + 1
    start = date(d.year, start_month, 1)
    end = start + relativedelta(months=months) - timedelta(days=1)
    return start, end


# ---------------------------------------------------------------------------
# Day counters
# ---------------------------------------------------------------------------


class DayCounter(ABC):
    """Year-fraction convention."""

    name: str = ""

    def day_count(self, d1: date, d2: date) -> int:
        return (d2 - d1).days

    @abstractmethod
    def year_fraction(self, d1: date, d2: date) -> float:
        ...

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Actual365Fixed(DayCounter):
    name = "Actual/365 (Fixed)"

    def year_fraction(self, d1: date, d2: date) -> float:
        return self.day_count(d1, d2) / 365.0


class Actual360(DayCounter):
    name = "Actual/360"

    def year_fraction(self, d1: date, d2: date) -> float:
        return self.day_count(d1, d2) / 360.0


# ---------------------------------------------------------------------------
# Calendars
# ---------------------------------------------------------------------------


def easter_sunday(year: int) -> date:
    """Gregorian Easter Sunday (anonymous Gregorian algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


class Calendar(ABC):
    """Business-day oracle."""

    name: str = ""

    @abstractmethod
    def is_business_day(self, d: date) -> bool:
        ...

    def is_holiday(self, d: date) -> bool:
        return not self.is_business_day(d)

    @staticmethod
    def is_weekend(d: date) -> bool:
        return d.weekday() >= 5

    def adjust(self, d: date) -> date:
        """Roll forward to the next business day."""
        while not self.is_business_day(d):
            d += timedelta(days=1)
        return d

    def advance(self, d: date, business_days: int) -> date:
        """Move by a number of business days; zero adjusts ``d`` forward."""
        if business_days == 0:
            return self.adjust(d)
        step = timedelta(days=1 if business_days > 0 else -1)
        remaining = abs(business_days)
        while remaining > 0:
            d += step
            if self.is_business_day(d):
                remaining -= 1
        return d

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class NullCalendar(Calendar):
    """Every day is a business day."""

    name = "Null"

    def is_business_day(self, d: date) -> bool:
        return True


class WeekendsOnly(Calendar):
    name = "Weekends only"

    def is_business_day(self, d: date) -> bool:
        return not self.is_weekend(d)


class TARGET(Calendar):
    """
    TARGET (euro settlement) calendar.

    Holidays: Saturdays and Sundays, New Year's Day, Good Friday and Easter
    Monday (since 2000), Labour Day (since 2000), Christmas Day, Day of
    Goodwill (since 2000), and 31 December in 1998, 1999 and 2001.
    """

    name = "TARGET"

    def is_business_day(self, d: date) -> bool:
        if self.is_weekend(d):
            return False
        y, m, day = d.year, d.month, d.day
        if m == 1 and day == 1:
            return False
        if m == 12 and day == 25:
            return False
        if y >= 2000:
            easter = easter_sunday(y)
            if d in (easter - timedelta(days=2), easter + timedelta(days=1)):
                return False
            if (m == 5 and day == 1) or (m == 12 and day == 26):
                return False
        if m == 12 and day == 31 and y in (1998, 1999, 2001):
            return False
        return True
