"""
Term structures: reference-date handling and yield curves.

This module keeps curve math minimal and explicit:
- Times are **year fractions** from the curve's reference date, measured
  with the curve's own day counter.
- Rates are **continuously compounded zero rates**.
- ``ZeroCurve`` interpolates **linearly in zero rates** between pillar dates
  and extrapolates flat.

Every term structure is both observable and an observer: curves built on
quotes or on other curves re-notify their own dependents when an input
changes. A curve built without a fixed reference date floats with the
global evaluation date.
"""

from __future__ import annotations

import bisect
import math
from datetime import date

from valcore.dates import Actual365Fixed, Calendar, DayCounter, NullCalendar
from valcore.errors import RangeError
from valcore.handles import Handle, as_handle
from valcore.interfaces import DateOrTime
from valcore.observable import Observable, Observer
from valcore.settings import settings

_ZERO_TIME_STEP = 1.0e-4


def _interpolate(times: list[float], values: list[float], t: float) -> float:
    """Linear in ``t`` between pillars, flat outside them."""
    if t <= times[0]:
        return values[0]
    if t >= times[-1]:
        return values[-1]
    i = bisect.bisect_right(times, t) - 1
    t0, t1 = times[i], times[i + 1]
    v0, v1 = values[i], values[i + 1]
    return v0 + (v1 - v0) * (t - t0) / (t1 - t0)


class TermStructure(Observable, Observer):
    """
    Base for anything that maps dates to market quantities.

    The reference date is either
    - fixed (``reference_date`` given),
    - floating (``settlement_days`` given): the evaluation date advanced by
      that many business days of ``calendar``, or
    - supplied by a subclass overriding ``reference_date()``.
    """

    def __init__(
        self,
        day_counter: DayCounter | None = None,
        reference_date: date | None = None,
        calendar: Calendar | None = None,
        settlement_days: int | None = None,
    ) -> None:
        super().__init__()
        self._day_counter = day_counter or Actual365Fixed()
        self._calendar = calendar or NullCalendar()
        self._fixed_reference_date = reference_date
        self._settlement_days = None if reference_date is not None else settlement_days
        self._moving_reference_date: date | None = None
        if self._settlement_days is not None:
            self.register_with(settings)

    def reference_date(self) -> date:
        if self._fixed_reference_date is not None:
            return self._fixed_reference_date
        if self._settlement_days is None:
            raise NotImplementedError(
                f"{type(self).__name__} must provide its reference date"
            )
        if self._moving_reference_date is None:
            self._moving_reference_date = self._calendar.advance(
                settings.evaluation_date, self._settlement_days
            )
        return self._moving_reference_date

    def day_counter(self) -> DayCounter:
        return self._day_counter

    def calendar(self) -> Calendar:
        return self._calendar

    def settlement_days(self) -> int | None:
        return self._settlement_days

    def max_date(self) -> date | None:
        """Last date the structure can be queried for; None means unbounded."""
        return None

    def time_from_reference(self, d: date) -> float:
        return self.day_counter().year_fraction(self.reference_date(), d)

    def _to_time(self, d_or_t: DateOrTime) -> float:
        if isinstance(d_or_t, date):
            max_date = self.max_date()
            if max_date is not None and d_or_t > max_date:
                raise RangeError(
                    f"date ({d_or_t}) is past max curve date ({max_date})"
                )
            t = self.time_from_reference(d_or_t)
        else:
            t = float(d_or_t)
        if t < 0.0:
            raise RangeError(
                f"negative time ({t}) given: request precedes reference date "
                f"{self.reference_date()}"
            )
        return t

    def update(self) -> None:
        if self._settlement_days is not None:
            self._moving_reference_date = None
        self.notify_observers()


class YieldTermStructure(TermStructure):
    """Discount curve: subclasses implement ``discount_impl(t)``."""

    def discount(self, d_or_t: DateOrTime) -> float:
        return self.discount_impl(self._to_time(d_or_t))

    def zero_rate(self, d_or_t: DateOrTime) -> float:
        r"""
        Continuously compounded zero rate.

        r(t) = -ln(DF(t)) / t, using a small positive t at the reference date.
        """
        t = self._to_time(d_or_t)
        if t == 0.0:
            t = _ZERO_TIME_STEP
        return -math.log(self.discount_impl(t)) / t

    def forward_rate(self, d1: DateOrTime, d2: DateOrTime) -> float:
        """Continuously compounded forward rate between two dates or times."""
        t1 = self._to_time(d1)
        t2 = self._to_time(d2)
        if t2 < t1:
            raise RangeError(f"forward end ({d2}) precedes forward start ({d1})")
        if t2 == t1:
            t2 = t1 + _ZERO_TIME_STEP
        return math.log(self.discount_impl(t1) / self.discount_impl(t2)) / (t2 - t1)

    def discount_impl(self, t: float) -> float:
        raise NotImplementedError


class ZeroYieldStructure(YieldTermStructure):
    """Yield curve defined by its zero rates: DF(t) = exp(-z(t) * t)."""

    def discount_impl(self, t: float) -> float:
        return math.exp(-self.zero_yield_impl(t) * t)

    def zero_rate(self, d_or_t: DateOrTime) -> float:
        return self.zero_yield_impl(self._to_time(d_or_t))

    def zero_yield_impl(self, t: float) -> float:
        raise NotImplementedError


class FlatForward(ZeroYieldStructure):
    """
    Flat continuously compounded curve driven by a quote.

    Example:
        rate = SimpleQuote(0.03)
        curve = FlatForward(rate, Actual365Fixed())
        rate.set_value(0.035)  # everything observing ``curve`` goes stale
    """

    def __init__(
        self,
        forward: Handle | Observable | float,
        day_counter: DayCounter | None = None,
        reference_date: date | None = None,
        calendar: Calendar | None = None,
        settlement_days: int = 0,
    ) -> None:
        super().__init__(day_counter, reference_date, calendar, settlement_days)
        self._forward = as_handle(forward, name="forward rate")
        self.register_with(self._forward)

    def zero_yield_impl(self, t: float) -> float:
        return self._forward.value()


class ZeroCurve(ZeroYieldStructure):
    """
    Zero rate curve with linear interpolation between pillar dates.

    - ``dates[0]`` is the reference date.
    - ``rates[i]`` is the CC zero rate at ``dates[i]``.
    - Flat extrapolation before the first and after the last pillar.
    """

    def __init__(
        self,
        dates: list[date],
        rates: list[float],
        day_counter: DayCounter | None = None,
        calendar: Calendar | None = None,
    ) -> None:
        if len(dates) != len(rates):
            raise ValueError("dates and rates must have the same length")
        if not dates:
            raise ValueError("curve has no pillars")
        for i in range(1, len(dates)):
            if dates[i] <= dates[i - 1]:
                raise ValueError("dates must be strictly increasing")
        super().__init__(day_counter, reference_date=dates[0], calendar=calendar)
        self.dates = list(dates)
        self.rates = list(rates)
        self._times = [self.time_from_reference(d) for d in self.dates]

    def zero_yield_impl(self, t: float) -> float:
        return _interpolate(self._times, self.rates, t)


class QuantoTermStructure(ZeroYieldStructure):
    r"""
    Quanto-adjusted dividend curve for a foreign equity paid in another
    currency.

    z(t) = q(t) + r_quanto(t) - r_domestic(t) + rho * sigma_eq(t, K) * sigma_fx(t, X)

    where q is the equity dividend yield, r_quanto the rate of the payment
    currency, r_domestic the equity's own currency rate, K the equity strike
    and X the FX level at which FX vol is read. Used as the dividend curve of
    an equity index re-based on the quanto-currency curve, it yields the
    forward S * exp((r_domestic - q - rho * sigma_eq * sigma_fx) * t).

    Reference date and day counter follow the quanto-currency curve.
    """

    def __init__(
        self,
        dividend_curve: Handle,
        quanto_currency_curve: Handle,
        domestic_curve: Handle,
        equity_volatility: Handle,
        strike: float,
        fx_volatility: Handle,
        fx_level: float,
        correlation: float,
    ) -> None:
        super().__init__()
        self._dividend_curve = dividend_curve
        self._quanto_currency_curve = quanto_currency_curve
        self._domestic_curve = domestic_curve
        self._equity_volatility = equity_volatility
        self._strike = strike
        self._fx_volatility = fx_volatility
        self._fx_level = fx_level
        self._correlation = correlation
        for handle in (
            dividend_curve,
            quanto_currency_curve,
            domestic_curve,
            equity_volatility,
            fx_volatility,
        ):
            self.register_with(handle)

    def reference_date(self) -> date:
        return self._quanto_currency_curve.current_link().reference_date()

    def day_counter(self) -> DayCounter:
        return self._quanto_currency_curve.current_link().day_counter()

    def calendar(self) -> Calendar:
        return self._quanto_currency_curve.current_link().calendar()

    def zero_yield_impl(self, t: float) -> float:
        quanto_adjustment = (
            self._correlation
            * self._equity_volatility.current_link().black_vol(t, self._strike)
            * self._fx_volatility.current_link().black_vol(t, self._fx_level)
        )
        return (
            self._dividend_curve.current_link().zero_rate(t)
            + self._quanto_currency_curve.current_link().zero_rate(t)
            - self._domestic_curve.current_link().zero_rate(t)
            + quanto_adjustment
        )
