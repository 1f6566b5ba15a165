"""Cash flows: fixed, index-linked, equity and zero-coupon inflation."""

from valcore.cashflows.base import CashFlow, SimpleCashFlow
from valcore.cashflows.equity import EquityCashFlow, set_coupon_pricer
from valcore.cashflows.indexed import IndexedCashFlow
from valcore.cashflows.inflation import (
    CPIInterpolation,
    ZeroInflationCashFlow,
    lagged_fixing,
)

__all__ = [
    "CashFlow",
    "SimpleCashFlow",
    "IndexedCashFlow",
    "EquityCashFlow",
    "set_coupon_pricer",
    "ZeroInflationCashFlow",
    "CPIInterpolation",
    "lagged_fixing",
]
