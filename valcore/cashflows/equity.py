"""Equity-index-linked cash flows with a pluggable pricer."""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Iterable

from valcore.cashflows.base import CashFlow
from valcore.cashflows.indexed import IndexedCashFlow
from valcore.indexes.base import Index
from valcore.observable import market_data_lock

if TYPE_CHECKING:
    from valcore.pricers.base import EquityCashFlowPricer

logger = logging.getLogger(__name__)


class EquityCashFlow(IndexedCashFlow):
    """
    Indexed cash flow whose amount can be delegated to a pricer.

    Without a pricer the amount is the plain index ratio. With one, the
    amount is ``notional * pricer.price()`` after binding the pricer to this
    cash flow. Swapping the pricer invalidates the cached amount exactly
    like a market-data change.

    Example:
        flow = EquityCashFlow(1_000_000, index, base, fixing, payment)
        flow.set_pricer(EquityQuantoCashFlowPricer(usd_curve, eq_vol, fx_vol, rho))
        flow.amount()
    """

    def __init__(
        self,
        notional: float,
        index: Index,
        base_date: date,
        fixing_date: date,
        payment_date: date,
        growth_only: bool = False,
    ) -> None:
        super().__init__(notional, index, base_date, fixing_date, payment_date, growth_only)
        self._pricer: EquityCashFlowPricer | None = None

    @property
    def pricer(self) -> EquityCashFlowPricer | None:
        return self._pricer

    def set_pricer(self, pricer: EquityCashFlowPricer | None) -> None:
        """Replace the pricer (``None`` reverts to the plain ratio)."""
        with market_data_lock:
            if self._pricer is not None:
                self.unregister_with(self._pricer)
            self._pricer = pricer
            if self._pricer is not None:
                self.register_with(self._pricer)
            logger.debug("Pricer of %s cash flow set to %r", self.index.name, pricer)
            self.update()

    def perform_calculations(self) -> None:
        if self._pricer is None:
            super().perform_calculations()
            return
        # runs under market_data_lock: a shared pricer stays bound to this
        # flow until price() returns
        self._pricer.initialize(self)
        self._amount = self.notional * self._pricer.price()


def set_coupon_pricer(leg: Iterable[CashFlow], pricer: EquityCashFlowPricer | None) -> None:
    """Set ``pricer`` on every equity cash flow of ``leg``; others are skipped."""
    for cash_flow in leg:
        if isinstance(cash_flow, EquityCashFlow):
            cash_flow.set_pricer(pricer)
