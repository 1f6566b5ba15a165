"""Cash flows paying the performance of an index between two dates."""

from __future__ import annotations

from datetime import date

from valcore.cashflows.base import CashFlow
from valcore.indexes.base import Index
from valcore.observable import market_data_lock


class IndexedCashFlow(CashFlow):
    r"""
    Pays notional * I(fixing) / I(base), or notional * (I(fixing) / I(base) - 1)
    when ``growth_only`` is set.

    The amount is cached and recomputed only after the index (or anything
    upstream of it) notifies a change.
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
        super().__init__()
        self._notional = notional
        self._index = index
        self._base_date = base_date
        self._fixing_date = fixing_date
        self._payment_date = payment_date
        self._growth_only = growth_only
        self._amount: float | None = None
        self.register_with(index)

    @property
    def notional(self) -> float:
        return self._notional

    @property
    def index(self) -> Index:
        return self._index

    @property
    def base_date(self) -> date:
        return self._base_date

    @property
    def fixing_date(self) -> date:
        return self._fixing_date

    @property
    def payment_date(self) -> date:
        return self._payment_date

    @property
    def growth_only(self) -> bool:
        return self._growth_only

    def base_fixing(self) -> float:
        return self._index.fixing(self._base_date)

    def index_fixing(self) -> float:
        return self._index.fixing(self._fixing_date)

    def amount(self) -> float:
        with market_data_lock:
            self.calculate()
            return self._amount

    def perform_calculations(self) -> None:
        ratio = self.index_fixing() / self.base_fixing()
        if self._growth_only:
            ratio -= 1.0
        self._amount = self._notional * ratio
