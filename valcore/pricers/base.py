"""Base pricer abstract class for equity cash flow pricing strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from valcore.errors import ConfigurationError, RangeError, TypeMismatchError
from valcore.indexes.equity import EquityIndex
from valcore.observable import Observable, Observer

if TYPE_CHECKING:
    from valcore.cashflows.indexed import IndexedCashFlow


class EquityCashFlowPricer(Observable, Observer, ABC):
    """Abstract base class for equity cash flow pricers.

    A pricer turns a cash flow's parameters into the ratio paid per unit of
    notional. ``initialize`` binds it to one cash flow and must precede every
    ``price`` call, so one pricer can be shared by many cash flows. Pricers
    observe their market data and forward notifications to the cash flows
    using them.

    ``required_index`` declares the index capability the pricer works with;
    binding a cash flow on another kind of index raises TypeMismatchError.
    """

    required_index: type = EquityIndex

    def __init__(self) -> None:
        super().__init__()
        self._index: EquityIndex | None = None
        self._base_date = None
        self._fixing_date = None
        self._growth_only = False

    def can_price(self, cash_flow: IndexedCashFlow) -> bool:
        """Return True if the cash flow's index has the required capability."""
        return isinstance(getattr(cash_flow, "index", None), self.required_index)

    def _bind(self, cash_flow: IndexedCashFlow) -> None:
        if not self.can_price(cash_flow):
            raise TypeMismatchError(self.required_index, type(cash_flow.index))
        if cash_flow.fixing_date < cash_flow.base_date:
            raise RangeError(
                f"Fixing date ({cash_flow.fixing_date}) cannot fall before "
                f"base date ({cash_flow.base_date})."
            )
        self._index = cash_flow.index
        self._base_date = cash_flow.base_date
        self._fixing_date = cash_flow.fixing_date
        self._growth_only = cash_flow.growth_only

    def _bound_index(self) -> EquityIndex:
        if self._index is None:
            raise ConfigurationError(
                f"{type(self).__name__} must be initialized with a cash flow before pricing"
            )
        return self._index

    def _payoff(self, i0: float, i1: float) -> float:
        if self._growth_only:
            return i1 / i0 - 1.0
        return i1 / i0

    @abstractmethod
    def initialize(self, cash_flow: IndexedCashFlow) -> None:
        """Bind to ``cash_flow`` and validate the market data."""
        ...

    @abstractmethod
    def price(self) -> float:
        """Amount per unit of notional for the bound cash flow."""
        ...

    def update(self) -> None:
        self.notify_observers()


class EquityIndexRatioPricer(EquityCashFlowPricer):
    """Unadjusted pricer: I(fixing) / I(base) read from the cash flow's own index."""

    def initialize(self, cash_flow: IndexedCashFlow) -> None:
        self._bind(cash_flow)

    def price(self) -> float:
        index = self._bound_index()
        return self._payoff(index.fixing(self._base_date), index.fixing(self._fixing_date))
