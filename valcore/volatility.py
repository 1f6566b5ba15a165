"""Black volatility term structures (annualized, non-negative)."""

from __future__ import annotations

import math
from datetime import date

from valcore.curves import TermStructure, _interpolate
from valcore.dates import Calendar, DayCounter
from valcore.handles import Handle, as_handle
from valcore.interfaces import DateOrTime
from valcore.observable import Observable

_MIN_TIME = 1.0e-8


class BlackVolTermStructure(TermStructure):
    """
    Black volatility by time and strike.

    Subclasses override either ``black_vol_impl`` or
    ``black_variance_impl``; each default is written in terms of the other.
    """

    def black_vol(self, d_or_t: DateOrTime, strike: float) -> float:
        return self.black_vol_impl(self._to_time(d_or_t), strike)

    def black_variance(self, d_or_t: DateOrTime, strike: float) -> float:
        return self.black_variance_impl(self._to_time(d_or_t), strike)

    def black_vol_impl(self, t: float, strike: float) -> float:
        t = max(t, _MIN_TIME)
        return math.sqrt(self.black_variance_impl(t, strike) / t)

    def black_variance_impl(self, t: float, strike: float) -> float:
        vol = self.black_vol_impl(t, strike)
        return vol * vol * t


class BlackConstantVol(BlackVolTermStructure):
    """Flat volatility, optionally driven by a quote."""

    def __init__(
        self,
        volatility: Handle | Observable | float,
        day_counter: DayCounter | None = None,
        reference_date: date | None = None,
        calendar: Calendar | None = None,
        settlement_days: int = 0,
    ) -> None:
        super().__init__(day_counter, reference_date, calendar, settlement_days)
        self._volatility = as_handle(volatility, name="volatility")
        self.register_with(self._volatility)

    def black_vol_impl(self, t: float, strike: float) -> float:
        vol = self._volatility.value()
        if vol < 0.0:
            raise ValueError(f"negative volatility ({vol}) given")
        return vol


class BlackVarianceCurve(BlackVolTermStructure):
    """
    Strike-independent volatility term structure.

    Interpolates total variance linearly in time from zero at the reference
    date through each pillar; beyond the last pillar the volatility is held
    flat.
    """

    def __init__(
        self,
        reference_date: date,
        dates: list[date],
        volatilities: list[float],
        day_counter: DayCounter | None = None,
        calendar: Calendar | None = None,
    ) -> None:
        if len(dates) != len(volatilities):
            raise ValueError("dates and volatilities must have the same length")
        if not dates:
            raise ValueError("curve has no pillars")
        if dates[0] <= reference_date:
            raise ValueError("first pillar must be after the reference date")
        for i in range(1, len(dates)):
            if dates[i] <= dates[i - 1]:
                raise ValueError("dates must be strictly increasing")
        if any(vol < 0.0 for vol in volatilities):
            raise ValueError("volatilities must be non-negative")
        super().__init__(day_counter, reference_date=reference_date, calendar=calendar)
        self.dates = list(dates)
        self.volatilities = list(volatilities)
        self._times = [0.0] + [self.time_from_reference(d) for d in self.dates]
        self._variances = [0.0] + [
            vol * vol * t for vol, t in zip(self.volatilities, self._times[1:])
        ]
        for i in range(1, len(self._variances)):
            if self._variances[i] < self._variances[i - 1]:
                raise ValueError("variance must be non-decreasing")

    def black_variance_impl(self, t: float, strike: float) -> float:
        times, variances = self._times, self._variances
        if t >= times[-1]:
            # flat vol past the last pillar
            return variances[-1] * t / times[-1]
        return _interpolate(times, variances, t)
