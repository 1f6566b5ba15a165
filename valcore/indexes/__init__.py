"""Indexes and their shared historical fixing store."""

from valcore.indexes.base import Index
from valcore.indexes.equity import EquityIndex
from valcore.indexes.fixings import IndexManager, TimeSeries, index_manager
from valcore.indexes.inflation import ZeroInflationIndex

__all__ = [
    "Index",
    "EquityIndex",
    "ZeroInflationIndex",
    "IndexManager",
    "TimeSeries",
    "index_manager",
]
