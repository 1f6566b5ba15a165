"""Quanto-adjusted pricer for equity cash flows settled in another currency."""

from __future__ import annotations

from typing import TYPE_CHECKING

from valcore.curves import FlatForward, QuantoTermStructure
from valcore.errors import ConfigurationError
from valcore.handles import Handle, as_handle
from valcore.observable import Observable
from valcore.pricers.base import EquityCashFlowPricer

if TYPE_CHECKING:
    from valcore.cashflows.indexed import IndexedCashFlow


class EquityQuantoCashFlowPricer(EquityCashFlowPricer):
    """
    Prices the growth of a foreign equity index paid in the quanto currency.

    Hedging such a payoff shifts the equity drift by -rho * sigma_eq * sigma_fx.
    ``price()`` builds a ``QuantoTermStructure`` from the index's dividend and
    rate curves, the quanto-currency curve, both volatilities (equity vol
    read at the forward strike, FX vol at level 1) and the correlation, then
    clones the index onto the quanto-currency curve with that adjusted
    dividend curve and returns I1 / I0 (or I1 / I0 - 1) from the clone.

    With zero correlation or zero volatility the result equals the
    unadjusted index ratio.
    """

    def __init__(
        self,
        quanto_currency_curve: Handle | Observable | None,
        equity_volatility: Handle | Observable | None,
        fx_volatility: Handle | Observable | None,
        correlation: Handle | Observable | float | None,
    ) -> None:
        super().__init__()
        self._quanto_currency_curve = as_handle(
            quanto_currency_curve, name="quanto currency term structure"
        )
        self._equity_volatility = as_handle(
            equity_volatility, name="equity volatility term structure"
        )
        self._fx_volatility = as_handle(fx_volatility, name="FX volatility term structure")
        self._correlation = as_handle(correlation, name="correlation")
        self.register_with(self._quanto_currency_curve)
        self.register_with(self._equity_volatility)
        self.register_with(self._fx_volatility)
        self.register_with(self._correlation)

    def quanto_currency_curve(self) -> Handle:
        return self._quanto_currency_curve

    def equity_volatility(self) -> Handle:
        return self._equity_volatility

    def fx_volatility(self) -> Handle:
        return self._fx_volatility

    def correlation(self) -> Handle:
        return self._correlation

    def _check_market_data(self) -> None:
        required = (
            (self._quanto_currency_curve, "Quanto currency term structure"),
            (self._equity_volatility, "Equity volatility term structure"),
            (self._fx_volatility, "FX volatility term structure"),
            (self._correlation, "Correlation"),
        )
        for handle, label in required:
            if handle.empty():
                raise ConfigurationError(f"{label} handle cannot be empty.")

    def initialize(self, cash_flow: IndexedCashFlow) -> None:
        self._bind(cash_flow)
        self._check_market_data()
        curve_reference = self._quanto_currency_curve.current_link().reference_date()
        equity_vol_reference = self._equity_volatility.current_link().reference_date()
        fx_vol_reference = self._fx_volatility.current_link().reference_date()
        if not curve_reference == equity_vol_reference == fx_vol_reference:
            raise ConfigurationError(
                "Quanto currency term structure, equity and FX volatility need to have "
                f"the same reference date (got {curve_reference}, "
                f"{equity_vol_reference}, {fx_vol_reference})."
            )

    def _dividend_curve(self) -> Handle:
        dividend = self._index.equity_dividend_curve()
        if not dividend.empty():
            return dividend
        curve = self._quanto_currency_curve.current_link()
        return Handle(
            FlatForward(0.0, curve.day_counter(), reference_date=curve.reference_date())
        )

    def price(self) -> float:
        index = self._bound_index()
        self._check_market_data()
        domestic_curve = index.equity_interest_rate_curve()
        if domestic_curve.empty():
            raise ConfigurationError(
                f"null interest rate term structure set to this instance of {index.name}"
            )

        strike = index.fixing(self._fixing_date)
        quanto_curve = QuantoTermStructure(
            self._dividend_curve(),
            self._quanto_currency_curve,
            domestic_curve,
            self._equity_volatility,
            strike,
            self._fx_volatility,
            1.0,
            self._correlation.value(),
        )
        quanto_index = index.clone(
            self._quanto_currency_curve, Handle(quanto_curve), index.spot()
        )

        i0 = quanto_index.fixing(self._base_date)
        i1 = quanto_index.fixing(self._fixing_date)
        return self._payoff(i0, i1)
