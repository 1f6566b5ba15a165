"""Pricer implementations for equity-linked cash flows."""

from valcore.pricers.base import EquityCashFlowPricer, EquityIndexRatioPricer
from valcore.pricers.quanto import EquityQuantoCashFlowPricer

__all__ = [
    "EquityCashFlowPricer",
    "EquityIndexRatioPricer",
    "EquityQuantoCashFlowPricer",
]
