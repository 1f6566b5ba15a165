"""Tests for yield curves, the quanto term structure and volatility surfaces."""

import math
from datetime import date, timedelta

import pytest

from valcore.curves import FlatForward, QuantoTermStructure, ZeroCurve, _interpolate
from valcore.dates import TARGET, Actual365Fixed
from valcore.errors import RangeError
from valcore.handles import Handle
from valcore.interfaces import (
    BlackVolSurface,
    BusinessDayCalendar,
    YearFractionConvention,
    YieldCurve,
)
from valcore.observable import Observer
from valcore.quotes import SimpleQuote
from valcore.settings import settings
from valcore.volatility import BlackConstantVol, BlackVarianceCurve

TODAY = date(2024, 1, 15)
DC = Actual365Fixed()


class Recorder(Observer):
    def __init__(self) -> None:
        super().__init__()
        self.updates = 0

    def update(self) -> None:
        self.updates += 1


def _pillars(*years: int) -> list[date]:
    return [TODAY + timedelta(days=365 * y) for y in years]


def test_interpolate_helper() -> None:
    """Linear between pillars, flat before the first and after the last."""
    times, values = [0.0, 1.0, 3.0], [1.0, 2.0, 6.0]
    assert _interpolate(times, values, -1.0) == 1.0
    assert _interpolate(times, values, 0.5) == 1.5
    assert _interpolate(times, values, 1.0) == 2.0
    assert _interpolate(times, values, 2.0) == 4.0
    assert _interpolate(times, values, 5.0) == 6.0


def test_curve_interpolation_endpoints() -> None:
    """Endpoints: rate at first/last pillar equals stored rate."""
    rates = [0.05, 0.04, 0.035, 0.03]
    curve = ZeroCurve(_pillars(0, 1, 2, 5), rates, DC)
    assert curve.zero_rate(TODAY) == 0.05
    assert curve.zero_rate(_pillars(5)[0]) == 0.03


def test_curve_interpolation_midpoint() -> None:
    """Midpoint: linear interpolation in zero rate between two pillars."""
    curve = ZeroCurve(_pillars(0, 2), [0.04, 0.06], DC)
    assert abs(curve.zero_rate(1.0) - 0.05) < 1e-10


def test_curve_after_last_pillar() -> None:
    """After last pillar: flat at last rate."""
    curve = ZeroCurve(_pillars(0, 1), [0.05, 0.04], DC)
    assert curve.zero_rate(2.0) == 0.04


def test_discount_monotonic_decreasing_positive_rates() -> None:
    """Discount factors decrease when rates are positive."""
    curve = ZeroCurve(_pillars(0, 1, 2, 5), [0.05, 0.04, 0.035, 0.03], DC)
    times = [0.1, 0.5, 1.0, 1.5, 2.0, 3.0, 5.0, 7.0]
    dfs = [curve.discount(t) for t in times]
    for i in range(1, len(dfs)):
        assert dfs[i] < dfs[i - 1]
    assert all(0 < d <= 1 for d in dfs)
    assert curve.discount(0.0) == 1.0


def test_validate_dates_strictly_increasing() -> None:
    """Validation: pillar dates must be strictly increasing."""
    with pytest.raises(ValueError, match="strictly increasing"):
        ZeroCurve([TODAY, TODAY], [0.04, 0.04], DC)


def test_validate_same_length() -> None:
    """Validation: dates and rates same length."""
    with pytest.raises(ValueError, match="same length"):
        ZeroCurve(_pillars(0, 1), [0.04], DC)


def test_negative_time_raises_range_error() -> None:
    """Queries before the reference date are out of range."""
    curve = FlatForward(0.04, DC, reference_date=TODAY)
    with pytest.raises(RangeError, match="negative time"):
        curve.discount(-0.1)
    with pytest.raises(RangeError):
        curve.discount(TODAY - timedelta(days=1))


def test_flat_forward_discount_formula() -> None:
    """DF(d) = exp(-r * t) with t from the curve's day counter."""
    curve = FlatForward(0.03, DC, reference_date=TODAY)
    d = date(2025, 1, 15)
    assert abs(curve.discount(d) - math.exp(-0.03 * 366 / 365)) < 1e-14
    assert curve.zero_rate(d) == 0.03
    assert abs(curve.forward_rate(0.5, 2.0) - 0.03) < 1e-12


def test_flat_forward_follows_quote() -> None:
    """A quote change notifies the curve's observers and moves the discount."""
    rate = SimpleQuote(0.03)
    curve = FlatForward(rate, DC, reference_date=TODAY)
    recorder = Recorder()
    recorder.register_with(curve)
    rate.set_value(0.05)
    assert recorder.updates == 1
    assert abs(curve.discount(1.0) - math.exp(-0.05)) < 1e-14


def test_floating_reference_date_follows_evaluation_date() -> None:
    """Without a fixed reference date the curve moves with settings."""
    curve = FlatForward(0.03, DC)
    recorder = Recorder()
    recorder.register_with(curve)
    assert curve.reference_date() == TODAY
    settings.evaluation_date = date(2024, 2, 1)
    assert recorder.updates == 1
    assert curve.reference_date() == date(2024, 2, 1)


def test_settlement_days_use_calendar() -> None:
    """Settlement days are business days of the curve's calendar."""
    settings.evaluation_date = date(2024, 1, 12)
    curve = FlatForward(0.03, DC, calendar=TARGET(), settlement_days=2)
    assert curve.reference_date() == date(2024, 1, 16)


def test_quanto_term_structure_zero_rate() -> None:
    """z = q + r_quanto - r_domestic + rho * sigma_eq * sigma_fx."""
    quanto_curve = FlatForward(0.02, DC, reference_date=date(2024, 1, 16))
    ts = QuantoTermStructure(
        dividend_curve=Handle(FlatForward(0.01, DC, reference_date=TODAY)),
        quanto_currency_curve=Handle(quanto_curve),
        domestic_curve=Handle(FlatForward(0.03, DC, reference_date=TODAY)),
        equity_volatility=Handle(BlackConstantVol(0.2, DC, reference_date=TODAY)),
        strike=100.0,
        fx_volatility=Handle(BlackConstantVol(0.1, DC, reference_date=TODAY)),
        fx_level=1.0,
        correlation=0.3,
    )
    expected = 0.01 + 0.02 - 0.03 + 0.3 * 0.2 * 0.1
    assert abs(ts.zero_rate(1.0) - expected) < 1e-14
    assert abs(ts.discount(2.0) - math.exp(-expected * 2.0)) < 1e-14
    assert ts.reference_date() == date(2024, 1, 16)
    assert ts.day_counter() == DC


def test_quanto_term_structure_notified_by_inputs() -> None:
    """A change in any underlying curve reaches observers of the quanto curve."""
    domestic_rate = SimpleQuote(0.03)
    ts = QuantoTermStructure(
        Handle(FlatForward(0.01, DC, reference_date=TODAY)),
        Handle(FlatForward(0.02, DC, reference_date=TODAY)),
        Handle(FlatForward(domestic_rate, DC, reference_date=TODAY)),
        Handle(BlackConstantVol(0.2, DC, reference_date=TODAY)),
        100.0,
        Handle(BlackConstantVol(0.1, DC, reference_date=TODAY)),
        1.0,
        0.0,
    )
    recorder = Recorder()
    recorder.register_with(ts)
    domestic_rate.set_value(0.04)
    assert recorder.updates == 1
    assert abs(ts.zero_rate(1.0) - (0.01 + 0.02 - 0.04)) < 1e-14


def test_constant_vol() -> None:
    """Flat vol and variance = vol^2 * t."""
    vol = BlackConstantVol(0.2, DC, reference_date=TODAY)
    assert vol.black_vol(1.0, 100.0) == 0.2
    assert abs(vol.black_variance(2.0, 100.0) - 0.08) < 1e-14
    negative = BlackConstantVol(-0.1, DC, reference_date=TODAY)
    with pytest.raises(ValueError, match="negative volatility"):
        negative.black_vol(1.0, 100.0)


def test_variance_curve_interpolation() -> None:
    """Variance is linear in time between pillars; vol is flat afterwards."""
    curve = BlackVarianceCurve(TODAY, _pillars(1, 2), [0.2, 0.25], DC)
    assert abs(curve.black_vol(1.0, 0.0) - 0.2) < 1e-12
    assert abs(curve.black_vol(2.0, 0.0) - 0.25) < 1e-12
    assert abs(curve.black_variance(1.5, 0.0) - 0.0825) < 1e-12
    assert abs(curve.black_vol(4.0, 0.0) - 0.25) < 1e-12
    assert abs(curve.black_vol(0.5, 0.0) - 0.2) < 1e-12


def test_variance_curve_validation() -> None:
    """Decreasing total variance is rejected."""
    with pytest.raises(ValueError, match="non-decreasing"):
        BlackVarianceCurve(TODAY, _pillars(1, 2), [0.3, 0.2], DC)
    with pytest.raises(ValueError, match="same length"):
        BlackVarianceCurve(TODAY, _pillars(1, 2), [0.3], DC)


def test_structures_satisfy_read_protocols() -> None:
    """Concrete curves and calendars conform to the collaborator protocols."""
    assert isinstance(FlatForward(0.03, DC, reference_date=TODAY), YieldCurve)
    assert isinstance(BlackConstantVol(0.2, DC, reference_date=TODAY), BlackVolSurface)
    assert isinstance(TARGET(), BusinessDayCalendar)
    assert isinstance(DC, YearFractionConvention)
