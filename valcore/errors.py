"""Exceptions raised by the valuation core.

Every concrete error also derives from the closest builtin so callers that
catch ``ValueError``/``TypeError``/``LookupError`` keep working.
"""


class ValuationError(Exception):
    """Base exception for all valuation-core errors."""

    pass


class ConfigurationError(ValuationError, ValueError):
    """A required market-data dependency is missing or inconsistent.

    Raised for empty handles, unset quotes, missing forecasting curves and
    curves whose reference dates disagree.
    """

    pass


class MissingFixingError(ConfigurationError, LookupError):
    """A historical fixing needed for a valuation is not in the store."""

    def __init__(self, index_name: str, fixing_date):
        self.index_name = index_name
        self.fixing_date = fixing_date
        super().__init__(f"Missing {index_name} fixing for {fixing_date}")


class RangeError(ValuationError, ValueError):
    """A date lies outside the range an operation accepts."""

    pass


class TypeMismatchError(ValuationError, TypeError):
    """A pricer was bound to a cash flow whose index kind it cannot price."""

    def __init__(self, expected: type, actual: type):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{expected.__name__} required, got {actual.__name__}"
        )


class DataIntegrityError(ValuationError, ValueError):
    """Historical fixing data would be corrupted by the requested insertion."""

    pass
