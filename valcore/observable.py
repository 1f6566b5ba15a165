"""
Change-notification graph for market-data dependent objects.

Design intent:
- An ``Observable`` keeps only *weak* references to its observers, so being
  registered never keeps an observer alive. Ownership flows the other way:
  an ``Observer`` holds strong references to everything it registered with.
- Notification is synchronous and delivered in registration order. No
  observer may rely on that order.
- ``update()`` never recomputes anything. It marks cached state invalid and,
  when the receiver is itself observable, forwards the notification. Values
  are re-pulled lazily by the next query (see ``LazyObject``).
- Exceptions raised from ``update()`` propagate to whoever triggered the
  notification; they are never swallowed.
"""

from __future__ import annotations

import logging
import threading
import weakref
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)

# Serializes every mutation-plus-notification cascade (quote changes, relinks,
# fixing insertions, evaluation-date moves) against lazy recalculations, so a
# cached result is always computed from a single market state.
market_data_lock = threading.RLock()


class ObservableSettings:
    """Process-wide switch for notification delivery.

    While updates are disabled, notifications are either dropped or, when
    ``deferred`` is requested, collected and delivered once per observer on
    ``enable_updates()``.
    """

    def __init__(self) -> None:
        self._updates_enabled = True
        self._updates_deferred = False
        self._deferred: dict[int, Observer] = {}

    @property
    def updates_enabled(self) -> bool:
        return self._updates_enabled

    @property
    def updates_deferred(self) -> bool:
        return self._updates_deferred

    def disable_updates(self, deferred: bool = False) -> None:
        self._updates_enabled = False
        self._updates_deferred = deferred

    def enable_updates(self) -> None:
        self._updates_enabled = True
        self._updates_deferred = False
        pending = list(self._deferred.values())
        self._deferred.clear()
        if pending:
            logger.debug("Delivering %d deferred notifications", len(pending))
        for observer in pending:
            observer.update()

    def _defer(self, observers: list[Observer]) -> None:
        for observer in observers:
            self._deferred.setdefault(id(observer), observer)

    def _discard(self, observer: Observer) -> None:
        self._deferred.pop(id(observer), None)


observable_settings = ObservableSettings()


@contextmanager
def deferred_updates() -> Iterator[None]:
    """Batch notifications: each affected observer is updated once on exit."""
    observable_settings.disable_updates(deferred=True)
    try:
        yield
    finally:
        observable_settings.enable_updates()


class Observable:
    """Something whose changes other objects can subscribe to.

    Only the *fact* that a change happened is broadcast; observers re-pull
    whatever value they need.
    """

    def __init__(self) -> None:
        super().__init__()
        # id(observer) -> weakref; dict order is registration order
        self._observer_refs: dict[int, weakref.ref] = {}
        self._notifying = False

    def observers(self) -> list[Observer]:
        """Return the live observers in registration order."""
        live: list[Observer] = []
        for key, ref in list(self._observer_refs.items()):
            observer = ref()
            if observer is None:
                self._drop_dead_ref(key, ref)
            else:
                live.append(observer)
        return live

    def _drop_dead_ref(self, key: int, ref: weakref.ref) -> None:
        # the key may already hold a newer observer with a recycled id
        if self._observer_refs.get(key) is ref:
            del self._observer_refs[key]

    def _register_observer(self, observer: Observer) -> bool:
        key = id(observer)
        ref = self._observer_refs.get(key)
        if ref is not None and ref() is observer:
            return False
        self._observer_refs.pop(key, None)
        owner = weakref.ref(self)

        def _on_collect(dead: weakref.ref) -> None:
            observable = owner()
            if observable is not None:
                observable._drop_dead_ref(key, dead)

        self._observer_refs[key] = weakref.ref(observer, _on_collect)
        return True

    def _unregister_observer(self, observer: Observer) -> bool:
        key = id(observer)
        ref = self._observer_refs.get(key)
        if ref is None or ref() is not observer:
            return False
        del self._observer_refs[key]
        if observable_settings.updates_deferred:
            observable_settings._discard(observer)
        return True

    def notify_observers(self) -> None:
        """Synchronously call ``update()`` on every registered observer.

        A notification re-entering an observable that is already notifying
        (a cycle in the graph) is ignored.
        """
        if self._notifying:
            return
        observers = self.observers()
        if not observers:
            return
        if not observable_settings.updates_enabled:
            if observable_settings.updates_deferred:
                observable_settings._defer(observers)
            return
        self._notifying = True
        try:
            for observer in observers:
                observer.update()
        finally:
            self._notifying = False


class Observer(ABC):
    """Something that reacts to notifications from observables."""

    def __init__(self) -> None:
        super().__init__()
        self._observables: dict[int, Observable] = {}

    def register_with(self, observable: Observable | None) -> None:
        """Subscribe to ``observable``; ``None`` is ignored."""
        if observable is None:
            return
        observable._register_observer(self)
        self._observables[id(observable)] = observable

    def unregister_with(self, observable: Observable | None) -> None:
        if observable is None:
            return
        observable._unregister_observer(self)
        self._observables.pop(id(observable), None)

    def unregister_with_all(self) -> None:
        for observable in list(self._observables.values()):
            observable._unregister_observer(self)
        self._observables.clear()

    def observables(self) -> list[Observable]:
        return list(self._observables.values())

    @abstractmethod
    def update(self) -> None:
        """Invalidate local cached state; must not recompute."""
        ...

    def deep_update(self) -> None:
        """Refresh this observer and, where meaningful, its dependencies."""
        self.update()


class LazyObject(Observable, Observer):
    """Observer/observable that caches a computed result behind a dirty flag.

    ``calculate()`` runs ``perform_calculations()`` only when the cache is
    stale; any notification from a dependency marks it stale again and is
    forwarded to this object's own observers.
    """

    def __init__(self) -> None:
        super().__init__()
        self._calculated = False
        self._frozen = False
        self._updating = False
        self._always_forward = True

    def update(self) -> None:
        if self._updating:
            return
        self._updating = True
        try:
            if self._calculated or self._always_forward:
                self._calculated = False
                if not self._frozen:
                    self.notify_observers()
        finally:
            self._updating = False

    def is_calculated(self) -> bool:
        return self._calculated

    def recalculate(self) -> None:
        """Force recomputation, even when frozen, and notify observers."""
        was_frozen = self._frozen
        self._calculated = False
        self._frozen = False
        try:
            self.calculate()
        finally:
            self._frozen = was_frozen
            self.notify_observers()

    def freeze(self) -> None:
        """Keep the current result regardless of notifications."""
        self._frozen = True

    def unfreeze(self) -> None:
        if self._frozen:
            self._frozen = False
            self.update()

    def always_forward_notifications(self) -> None:
        self._always_forward = True

    def forward_first_notification_only(self) -> None:
        """Forward a notification only when a cached result is discarded."""
        self._always_forward = False

    def calculate(self) -> None:
        with market_data_lock:
            if not self._calculated and not self._frozen:
                # set first so a dependency cycle cannot recurse back in here
                self._calculated = True
                try:
                    self.perform_calculations()
                except Exception:
                    self._calculated = False
                    raise

    @abstractmethod
    def perform_calculations(self) -> None:
        """Recompute and store results; called by ``calculate()`` only."""
        ...
