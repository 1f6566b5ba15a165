"""Cash flow base classes."""

from __future__ import annotations

from abc import abstractmethod
from datetime import date

from valcore.observable import LazyObject
from valcore.settings import settings


class CashFlow(LazyObject):
    """
    A payment on a given date.

    Cash flows are lazy objects: anything their amount depends on notifies
    them, and the amount is recomputed on the next request only.
    """

    @property
    @abstractmethod
    def payment_date(self) -> date:
        ...

    @abstractmethod
    def amount(self) -> float:
        ...

    def has_occurred(
        self, ref_date: date | None = None, include_ref_date: bool = False
    ) -> bool:
        """Whether the payment lies in the past of ``ref_date`` (default: today).

        With ``include_ref_date`` a payment on ``ref_date`` itself still
        counts as pending.
        """
        ref = ref_date or settings.evaluation_date
        if include_ref_date:
            return self.payment_date < ref
        return self.payment_date <= ref

    def perform_calculations(self) -> None:
        pass


class SimpleCashFlow(CashFlow):
    """Predetermined amount paid on a given date."""

    def __init__(self, amount: float, payment_date: date) -> None:
        super().__init__()
        self._amount = amount
        self._payment_date = payment_date

    @property
    def payment_date(self) -> date:
        return self._payment_date

    def amount(self) -> float:
        return self._amount
