"""
Zero-coupon inflation cash flows and lagged index observation.

Inflation indexes are published with a delay, so contracts observe the index
at ``date - observation_lag``. The observed value is either the fixing of the
period containing that observation date (flat) or a linear interpolation
between that period's fixing and the next one.
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum

from valcore.cashflows.indexed import IndexedCashFlow
from valcore.dates import Period, inflation_period
from valcore.indexes.inflation import ZeroInflationIndex


class CPIInterpolation(Enum):
    """How an inflation index is read at a date inside a period."""

    AS_INDEX = "as_index"  # same as FLAT for zero inflation indexes
    FLAT = "flat"
    LINEAR = "linear"


def lagged_fixing(
    index: ZeroInflationIndex,
    d: date,
    observation_lag: Period,
    interpolation: CPIInterpolation,
) -> float:
    r"""
    Index value observed at ``d`` with the given lag.

    FLAT: I(p) where p is the period containing d - lag.

    LINEAR: I(p) + (I(p+1) - I(p)) * w, where w is the position of ``d``
    (not of the lagged date) inside its own period:

        w = (d - start(d)) / (end(d) + 1 - start(d))

    When ``d`` is the first day of its period the weight is zero and the
    next period's fixing is not needed.
    """
    observation_date = d - observation_lag
    fixing_start, fixing_end = inflation_period(observation_date, index.frequency)
    if interpolation in (CPIInterpolation.AS_INDEX, CPIInterpolation.FLAT):
        return index.fixing(fixing_start)

    interpolation_start, interpolation_end = inflation_period(d, index.frequency)
    i0 = index.fixing(fixing_start)
    if d == interpolation_start:
        return i0
    i1 = index.fixing(fixing_end + timedelta(days=1))
    period_days = (interpolation_end + timedelta(days=1) - interpolation_start).days
    weight = (d - interpolation_start).days / period_days
    return i0 + (i1 - i0) * weight


class ZeroInflationCashFlow(IndexedCashFlow):
    """
    Pays notional * I(end) / I(start) (or that ratio minus one), where both
    index values are lagged observations read with ``interpolation``.

    ``base_date``/``fixing_date`` are the lagged start and end dates.
    Observing before the index inception is rejected at construction.
    """

    def __init__(
        self,
        notional: float,
        index: ZeroInflationIndex,
        interpolation: CPIInterpolation,
        start_date: date,
        end_date: date,
        observation_lag: Period,
        payment_date: date,
        growth_only: bool = False,
    ) -> None:
        super().__init__(
            notional,
            index,
            start_date - observation_lag,
            end_date - observation_lag,
            payment_date,
            growth_only,
        )
        index.check_inception(start_date - observation_lag)
        self._interpolation = interpolation
        self._start_date = start_date
        self._end_date = end_date
        self._observation_lag = observation_lag

    @property
    def zero_inflation_index(self) -> ZeroInflationIndex:
        return self._index

    @property
    def interpolation(self) -> CPIInterpolation:
        return self._interpolation

    @property
    def start_date(self) -> date:
        return self._start_date

    @property
    def end_date(self) -> date:
        return self._end_date

    @property
    def observation_lag(self) -> Period:
        return self._observation_lag

    def base_fixing(self) -> float:
        return lagged_fixing(
            self._index, self._start_date, self._observation_lag, self._interpolation
        )

    def index_fixing(self) -> float:
        return lagged_fixing(
            self._index, self._end_date, self._observation_lag, self._interpolation
        )
