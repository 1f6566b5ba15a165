"""Valuation core: observable market data, indexes, index-linked cash flows and pricers."""

from valcore.cashflows import (
    CashFlow,
    CPIInterpolation,
    EquityCashFlow,
    IndexedCashFlow,
    SimpleCashFlow,
    ZeroInflationCashFlow,
    lagged_fixing,
    set_coupon_pricer,
)
from valcore.curves import (
    FlatForward,
    QuantoTermStructure,
    TermStructure,
    YieldTermStructure,
    ZeroCurve,
    ZeroYieldStructure,
)
from valcore.dates import (
    TARGET,
    Actual360,
    Actual365Fixed,
    Frequency,
    NullCalendar,
    Period,
    TimeUnit,
    WeekendsOnly,
    inflation_period,
)
from valcore.errors import (
    ConfigurationError,
    DataIntegrityError,
    MissingFixingError,
    RangeError,
    TypeMismatchError,
    ValuationError,
)
from valcore.handles import Handle, RelinkableHandle
from valcore.indexes import EquityIndex, Index, TimeSeries, ZeroInflationIndex, index_manager
from valcore.inflation import ZeroInflationCurve, ZeroInflationTermStructure
from valcore.observable import (
    LazyObject,
    Observable,
    Observer,
    deferred_updates,
    observable_settings,
)
from valcore.pricers import (
    EquityCashFlowPricer,
    EquityIndexRatioPricer,
    EquityQuantoCashFlowPricer,
)
from valcore.quotes import DerivedQuote, Quote, SimpleQuote
from valcore.settings import SavedSettings, settings
from valcore.volatility import BlackConstantVol, BlackVarianceCurve, BlackVolTermStructure

__all__ = [
    # Observation graph
    "Observable",
    "Observer",
    "LazyObject",
    "deferred_updates",
    "observable_settings",
    "settings",
    "SavedSettings",
    # Market data
    "Quote",
    "SimpleQuote",
    "DerivedQuote",
    "Handle",
    "RelinkableHandle",
    # Dates
    "Period",
    "TimeUnit",
    "Frequency",
    "inflation_period",
    "Actual365Fixed",
    "Actual360",
    "NullCalendar",
    "WeekendsOnly",
    "TARGET",
    # Term structures
    "TermStructure",
    "YieldTermStructure",
    "ZeroYieldStructure",
    "FlatForward",
    "ZeroCurve",
    "QuantoTermStructure",
    "BlackVolTermStructure",
    "BlackConstantVol",
    "BlackVarianceCurve",
    "ZeroInflationTermStructure",
    "ZeroInflationCurve",
    # Indexes
    "Index",
    "EquityIndex",
    "ZeroInflationIndex",
    "TimeSeries",
    "index_manager",
    # Cash flows
    "CashFlow",
    "SimpleCashFlow",
    "IndexedCashFlow",
    "EquityCashFlow",
    "set_coupon_pricer",
    "ZeroInflationCashFlow",
    "CPIInterpolation",
    "lagged_fixing",
    # Pricers
    "EquityCashFlowPricer",
    "EquityIndexRatioPricer",
    "EquityQuantoCashFlowPricer",
    # Errors
    "ValuationError",
    "ConfigurationError",
    "MissingFixingError",
    "RangeError",
    "TypeMismatchError",
    "DataIntegrityError",
]

__version__ = "0.1.0"
