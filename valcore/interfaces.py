"""
Protocol-based read interfaces for the collaborators the valuation core
consumes but does not own.

Using typing.Protocol keeps the core open to external curve and calendar
implementations: anything with the right methods can be linked into a
handle, as long as it is also an ``Observable`` so that dependents can
register for invalidation.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, Union, runtime_checkable

DateOrTime = Union[date, float]


@runtime_checkable
class BusinessDayCalendar(Protocol):
    """Answers whether a date is a business day."""

    def is_business_day(self, d: date) -> bool:
        ...


@runtime_checkable
class YearFractionConvention(Protocol):
    """Turns a pair of dates into a year fraction."""

    def year_fraction(self, d1: date, d2: date) -> float:
        ...


@runtime_checkable
class YieldCurve(Protocol):
    """Discount curve consumed by indexes and pricers."""

    def reference_date(self) -> date:
        ...

    def day_counter(self) -> YearFractionConvention:
        ...

    def discount(self, d_or_t: DateOrTime) -> float:
        """Discount factor to a date or a time (year fraction)."""
        ...

    def zero_rate(self, d_or_t: DateOrTime) -> float:
        """Continuously compounded zero rate to a date or time."""
        ...


@runtime_checkable
class BlackVolSurface(Protocol):
    """Black volatility as a function of time and strike."""

    def reference_date(self) -> date:
        ...

    def black_vol(self, d_or_t: DateOrTime, strike: float) -> float:
        ...
