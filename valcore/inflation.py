"""
Zero-coupon inflation term structures.

A zero inflation curve gives, for each future inflation period, the annual
zero-coupon inflation rate z such that I(d) = I(base) * (1 + z) ** t, with t
measured from the curve's base date (the last period with a published
fixing) to the start of the period containing d.
"""

from __future__ import annotations

from datetime import date

from valcore.curves import TermStructure, _interpolate
from valcore.dates import Calendar, DayCounter, Frequency, inflation_period


class ZeroInflationTermStructure(TermStructure):
    """Base for zero inflation curves: subclasses implement ``zero_rate_impl``."""

    def __init__(
        self,
        base_date: date,
        day_counter: DayCounter | None = None,
        frequency: Frequency = Frequency.MONTHLY,
        reference_date: date | None = None,
        calendar: Calendar | None = None,
        settlement_days: int = 0,
    ) -> None:
        super().__init__(day_counter, reference_date, calendar, settlement_days)
        self._base_date = inflation_period(base_date, frequency)[0]
        self._frequency = frequency

    def base_date(self) -> date:
        """Start of the period of the last fixing known to the curve."""
        return self._base_date

    def frequency(self) -> Frequency:
        return self._frequency

    def time_from_base(self, d: date) -> float:
        start = inflation_period(d, self._frequency)[0]
        return self.day_counter().year_fraction(self._base_date, start)

    def zero_rate(self, d: date) -> float:
        """Zero inflation rate for the period containing ``d``."""
        return self.zero_rate_impl(self.time_from_base(d))

    def zero_rate_impl(self, t: float) -> float:
        raise NotImplementedError


class ZeroInflationCurve(ZeroInflationTermStructure):
    """
    Zero inflation rates at pillar dates, linearly interpolated in time from
    the base date; flat outside the pillars.
    """

    def __init__(
        self,
        base_date: date,
        dates: list[date],
        rates: list[float],
        day_counter: DayCounter | None = None,
        frequency: Frequency = Frequency.MONTHLY,
        reference_date: date | None = None,
        calendar: Calendar | None = None,
    ) -> None:
        if len(dates) != len(rates):
            raise ValueError("dates and rates must have the same length")
        if not dates:
            raise ValueError("curve has no pillars")
        for i in range(1, len(dates)):
            if dates[i] <= dates[i - 1]:
                raise ValueError("dates must be strictly increasing")
        super().__init__(
            base_date, day_counter, frequency, reference_date, calendar
        )
        self.dates = list(dates)
        self.rates = list(rates)
        self._times = [self.time_from_base(d) for d in self.dates]

    def zero_rate_impl(self, t: float) -> float:
        return _interpolate(self._times, self.rates, t)
