"""Zero-coupon inflation (price) indexes such as EU HICP or UK RPI."""

from __future__ import annotations

from datetime import date, timedelta

from valcore.dates import Calendar, Frequency, Period, TimeUnit, inflation_period
from valcore.errors import ConfigurationError, MissingFixingError, RangeError
from valcore.handles import Handle, as_handle
from valcore.indexes.base import Index
from valcore.indexes.fixings import TimeSeries
from valcore.observable import Observable
from valcore.settings import settings


class ZeroInflationIndex(Index):
    """
    Price index published once per inflation period.

    - Fixings are stored at the start of their period; any date inside the
      period can be used to add or read them.
    - A period's fixing is expected to be published ``availability_lag``
      after the period starts. Periods before that are read from the
      historical store only; later periods are forecast from the zero
      inflation curve.
    - ``inception_date``, when given, is the first period with a fixing;
      earlier observations raise ``RangeError``.
    """

    def __init__(
        self,
        name: str,
        frequency: Frequency = Frequency.MONTHLY,
        availability_lag: Period = Period(1, TimeUnit.MONTHS),
        zero_inflation_curve: Handle | Observable | None = None,
        revised: bool = False,
        currency: str | None = None,
        inception_date: date | None = None,
        fixing_calendar: Calendar | None = None,
        fixings: TimeSeries | None = None,
    ) -> None:
        super().__init__(name, fixing_calendar, fixings)
        self._frequency = frequency
        self._availability_lag = availability_lag
        self._revised = revised
        self._currency = currency
        self._inception_date = (
            inflation_period(inception_date, frequency)[0] if inception_date else None
        )
        self._curve = as_handle(zero_inflation_curve)
        self.register_with(self._curve)

    @property
    def frequency(self) -> Frequency:
        return self._frequency

    @property
    def availability_lag(self) -> Period:
        return self._availability_lag

    @property
    def revised(self) -> bool:
        return self._revised

    @property
    def currency(self) -> str | None:
        return self._currency

    @property
    def inception_date(self) -> date | None:
        return self._inception_date

    def zero_inflation_term_structure(self) -> Handle:
        return self._curve

    def is_valid_fixing_date(self, d: date) -> bool:
        return True

    def _fixing_key(self, d: date) -> date:
        return inflation_period(d, self._frequency)[0]

    def last_fixing_date(self) -> date | None:
        return self._fixings.last_date()

    def check_inception(self, d: date) -> None:
        if self._inception_date is not None and self._fixing_key(d) < self._inception_date:
            raise RangeError(
                f"Observation date {d} precedes {self.name} inception ({self._inception_date})"
            )

    def needs_forecast(self, fixing_date: date) -> bool:
        """True if the fixing for ``fixing_date``'s period must be forecast."""
        today = settings.evaluation_date
        today_minus_lag = today - self._availability_lag
        historical_fixing_known = self._fixing_key(today_minus_lag) - timedelta(days=1)
        latest_needed = self._fixing_key(fixing_date)
        if latest_needed <= historical_fixing_known:
            return False
        if latest_needed > today:
            return True
        # may or may not have been published yet
        return not self.has_historical_fixing(latest_needed)

    def fixing(self, d: date, forecast_todays_fixing: bool = False) -> float:
        self.check_inception(d)
        if not self.needs_forecast(d):
            start = self._fixing_key(d)
            value = self.past_fixing(start)
            if value is None:
                raise MissingFixingError(self.name, start)
            return value
        return self.forecast_fixing(d)

    def forecast_fixing(self, d: date) -> float:
        r"""
        I(d) = I(base) * (1 + z) ** t

        with z the curve's zero rate for d's period and t the year fraction
        from the curve's base date to the start of that period.
        """
        if self._curve.empty():
            raise ConfigurationError(
                f"null zero inflation term structure set to this instance of {self.name}"
            )
        curve = self._curve.current_link()
        base_date = curve.base_date()
        base_fixing = self.past_fixing(base_date)
        if base_fixing is None:
            raise MissingFixingError(self.name, base_date)
        start = self._fixing_key(d)
        zero = curve.zero_rate(start)
        t = curve.time_from_base(start)
        return base_fixing * (1.0 + zero) ** t

    def clone(self, zero_inflation_curve: Handle | Observable | None) -> "ZeroInflationIndex":
        """Same index and fixing history, forecast from another curve."""
        return ZeroInflationIndex(
            self.name,
            self._frequency,
            self._availability_lag,
            zero_inflation_curve,
            self._revised,
            self._currency,
            self._inception_date,
            self.fixing_calendar,
            fixings=self._fixings,
        )
