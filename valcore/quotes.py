"""Quotes: single observable market values (rates, vols, spots, correlations)."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

from valcore.errors import ConfigurationError
from valcore.observable import Observable, Observer, market_data_lock

if TYPE_CHECKING:
    from valcore.handles import Handle

logger = logging.getLogger(__name__)


class Quote(Observable, ABC):
    """Observable scalar market value."""

    @abstractmethod
    def value(self) -> float:
        """Current value; raises ConfigurationError when not valid."""
        ...

    @abstractmethod
    def is_valid(self) -> bool:
        ...


class SimpleQuote(Quote):
    """
    Quote whose value is set directly by market-data feed code.

    Example:
        rate = SimpleQuote(0.03, name="USD 1Y")
        rate.set_value(0.031)  # notifies every observer
    """

    def __init__(self, value: float | None = None, name: str | None = None) -> None:
        super().__init__()
        self._value = value
        self.name = name

    def value(self) -> float:
        if self._value is None:
            raise ConfigurationError(f"invalid quote {self.name or ''}".rstrip())
        return self._value

    def is_valid(self) -> bool:
        return self._value is not None

    def set_value(self, value: float | None) -> None:
        """Replace the value and notify observers if it actually changed."""
        with market_data_lock:
            if value == self._value:
                return
            logger.debug("Quote %s: %s -> %s", self.name, self._value, value)
            self._value = value
            self.notify_observers()

    def reset(self) -> None:
        """Invalidate the quote."""
        self.set_value(None)

    def __repr__(self) -> str:
        return f"SimpleQuote({self._value!r}, name={self.name!r})"


class DerivedQuote(Quote, Observer):
    """Quote computed on demand as ``function(source.value())``."""

    def __init__(self, element: Handle, function: Callable[[float], float]) -> None:
        super().__init__()
        self._element = element
        self._function = function
        self.register_with(element)

    def value(self) -> float:
        return self._function(self._element.value())

    def is_valid(self) -> bool:
        return not self._element.empty() and self._element.current_link().is_valid()

    def update(self) -> None:
        self.notify_observers()
