"""Equity index: spot, rate and dividend curves give the forward level."""

from __future__ import annotations

from datetime import date

from valcore.errors import ConfigurationError, MissingFixingError, RangeError
from valcore.handles import Handle, as_handle
from valcore.indexes.base import Index
from valcore.indexes.fixings import TimeSeries
from valcore.interfaces import BusinessDayCalendar, YieldCurve
from valcore.observable import Observable
from valcore.settings import settings


class EquityIndex(Index):
    """
    Equity (or equity-like) index.

    Forecast level:

        I(d) = S * D_div(d) / D_rate(d)

    where S is the spot quote (or, without one, the historical fixing at
    the rate curve's reference date), D_rate the discount factor of the
    index currency and D_div the dividend discount factor (1 without a
    dividend curve).

    Example:
        index = EquityIndex(
            "EUROSTOXX50",
            interest_rate_curve=FlatForward(0.03, Actual365Fixed()),
            dividend_curve=FlatForward(0.01, Actual365Fixed()),
            spot=SimpleQuote(4500.0),
        )
        index.fixing(date(2025, 6, 30))
    """

    def __init__(
        self,
        name: str,
        fixing_calendar: BusinessDayCalendar | None = None,
        currency: str | None = None,
        interest_rate_curve: Handle | Observable | None = None,
        dividend_curve: Handle | Observable | None = None,
        spot: Handle | Observable | float | None = None,
        fixings: TimeSeries | None = None,
    ) -> None:
        super().__init__(name, fixing_calendar, fixings)
        self._currency = currency
        self._interest = as_handle(interest_rate_curve)
        self._dividend = as_handle(dividend_curve)
        self._spot = as_handle(spot)
        self.register_with(self._interest)
        self.register_with(self._dividend)
        self.register_with(self._spot)

    @property
    def currency(self) -> str | None:
        return self._currency

    def equity_interest_rate_curve(self) -> Handle:
        return self._interest

    def equity_dividend_curve(self) -> Handle:
        return self._dividend

    def spot(self) -> Handle:
        return self._spot

    def fixing(self, d: date, forecast_todays_fixing: bool = False) -> float:
        if not self.is_valid_fixing_date(d):
            raise RangeError(f"Fixing date {d} is not valid for {self.name}")
        today = settings.evaluation_date
        if d > today or (d == today and forecast_todays_fixing):
            return self.forecast_fixing(d)
        result = self.past_fixing(d)
        if result is not None:
            return result
        if d < today or settings.enforces_todays_historic_fixings:
            raise MissingFixingError(self.name, d)
        return self.forecast_fixing(d)

    def forecast_fixing(self, d: date) -> float:
        if self._interest.empty():
            raise ConfigurationError(
                f"null interest rate term structure set to this instance of {self.name}"
            )
        rate_curve: YieldCurve = self._interest.current_link()
        base_date = rate_curve.reference_date()
        if d < base_date:
            raise RangeError(f"Fixing date {d} is before base date {base_date}")

        if not self._spot.empty():
            spot = self._spot.value()
        else:
            spot = self.past_fixing(base_date)
            if spot is None:
                raise ConfigurationError(
                    f"Cannot forecast {self.name}, missing both spot and historical index"
                )

        forward = spot / rate_curve.discount(d)
        if not self._dividend.empty():
            forward *= self._dividend.current_link().discount(d)
        return forward

    def clone(
        self,
        interest_rate_curve: Handle | Observable | None,
        dividend_curve: Handle | Observable | None,
        spot: Handle | Observable | float | None,
    ) -> "EquityIndex":
        """Same index and same fixing history, bound to other market data."""
        return EquityIndex(
            self.name,
            self.fixing_calendar,
            self._currency,
            interest_rate_curve,
            dividend_curve,
            spot,
            fixings=self._fixings,
        )
