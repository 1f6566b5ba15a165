"""
Handles: observable indirections to optional market-data objects.

A handle lets many consumers share one quote or curve while the thing it
points to is swapped at runtime. Consumers register with the handle, the
handle registers with its link, so a change in either reaches them the same
way. An empty handle fails loudly when used; it never supplies a default.
"""

from __future__ import annotations

import logging
from typing import Generic, TypeVar

from valcore.errors import ConfigurationError
from valcore.observable import Observable, Observer, market_data_lock

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Observable)


class Handle(Observable, Observer, Generic[T]):
    """Shared reference to zero or one observable object.

    ``name`` is only used in error messages, to say which dependency is
    missing.
    """

    def __init__(
        self,
        link: T | None = None,
        register_as_observer: bool = True,
        name: str | None = None,
    ) -> None:
        super().__init__()
        self.name = name
        self._link: T | None = None
        self._is_observer = False
        self._set_link(link, register_as_observer)

    def _set_link(self, link: T | None, register_as_observer: bool) -> bool:
        if link is self._link and register_as_observer == self._is_observer:
            return False
        if self._link is not None and self._is_observer:
            self.unregister_with(self._link)
        self._link = link
        self._is_observer = register_as_observer
        if self._link is not None and self._is_observer:
            self.register_with(self._link)
        return True

    def empty(self) -> bool:
        return self._link is None

    def current_link(self) -> T:
        """Return the linked object; raises ConfigurationError when empty."""
        if self._link is None:
            what = self.name or "market data"
            raise ConfigurationError(f"empty handle: no {what} linked")
        return self._link

    def value(self) -> float:
        """Shortcut for handles to quotes."""
        return self.current_link().value()

    def update(self) -> None:
        self.notify_observers()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._link!r}, name={self.name!r})"


class RelinkableHandle(Handle[T]):
    """Handle whose link can be replaced after construction.

    Example:
        curve = RelinkableHandle(name="discount curve")
        pricer = EquityQuantoCashFlowPricer(curve, ...)
        curve.link_to(FlatForward(0.02, Actual365Fixed()))  # pricer is notified
    """

    def link_to(self, link: T | None, register_as_observer: bool = True) -> None:
        """Point to ``link`` (``None`` empties the handle) and notify."""
        with market_data_lock:
            if self._set_link(link, register_as_observer):
                logger.debug("Handle %s relinked to %r", self.name, link)
                self.notify_observers()


def as_handle(value: object, name: str | None = None) -> Handle:
    """Wrap a constructor argument into a handle.

    Handles pass through unchanged, ``None`` gives an empty handle, numbers
    become a ``SimpleQuote`` and any other observable is linked directly.
    """
    from valcore.quotes import SimpleQuote

    if isinstance(value, Handle):
        return value
    if value is None:
        return Handle(name=name)
    if isinstance(value, (int, float)):
        return Handle(SimpleQuote(float(value), name=name), name=name)
    return Handle(value, name=name)
