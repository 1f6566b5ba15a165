"""Index base class: named market series with historical and forecast fixings."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable

from valcore.dates import NullCalendar
from valcore.errors import DataIntegrityError
from valcore.indexes.fixings import TimeSeries, index_manager
from valcore.interfaces import BusinessDayCalendar
from valcore.observable import Observable, Observer
from valcore.settings import settings

logger = logging.getLogger(__name__)


class Index(Observable, Observer, ABC):
    """
    Base class for indexes.

    Historical fixings live in a ``TimeSeries`` shared by every index with
    the same name (see ``index_manager``); pass ``fixings`` to share a
    specific store instead. The index observes that store and the global
    settings, so new fixings or a new evaluation date reach its dependents.
    """

    def __init__(
        self,
        name: str,
        fixing_calendar: BusinessDayCalendar | None = None,
        fixings: TimeSeries | None = None,
    ) -> None:
        super().__init__()
        self._name = name
        self._fixing_calendar = fixing_calendar or NullCalendar()
        self._fixings = fixings if fixings is not None else index_manager.history(name)
        self.register_with(self._fixings)
        self.register_with(settings)

    @property
    def name(self) -> str:
        return self._name

    @property
    def fixing_calendar(self) -> BusinessDayCalendar:
        return self._fixing_calendar

    def is_valid_fixing_date(self, d: date) -> bool:
        return self._fixing_calendar.is_business_day(d)

    def add_fixing(self, d: date, value: float, force_overwrite: bool = False) -> None:
        """Store a historical fixing; conflicting values need ``force_overwrite``."""
        self.add_fixings([d], [value], force_overwrite)

    def add_fixings(
        self,
        dates: Iterable[date],
        values: Iterable[float],
        force_overwrite: bool = False,
    ) -> None:
        """Store several fixings at once; nothing is stored if any is rejected."""
        dates = list(dates)
        values = list(values)
        if len(dates) != len(values):
            raise DataIntegrityError(
                f"{len(dates)} dates and {len(values)} values given for {self._name} fixings"
            )
        for d, value in zip(dates, values):
            if not self.is_valid_fixing_date(d):
                raise DataIntegrityError(
                    f"At least one invalid fixing provided for {self._name}: "
                    f"{d} is not a valid fixing date ({value})"
                )
        self._fixings.insert(
            [(self._fixing_key(d), v) for d, v in zip(dates, values)], force_overwrite
        )

    def _fixing_key(self, d: date) -> date:
        return d

    def clear_fixings(self) -> None:
        self._fixings.clear()

    def time_series(self) -> TimeSeries:
        return self._fixings

    def has_historical_fixing(self, d: date) -> bool:
        return self._fixing_key(d) in self._fixings

    def past_fixing(self, d: date) -> float | None:
        """Stored fixing for ``d``, or None."""
        return self._fixings.get(self._fixing_key(d))

    @abstractmethod
    def fixing(self, d: date, forecast_todays_fixing: bool = False) -> float:
        """Historical fixing up to today, forecast beyond."""
        ...

    def update(self) -> None:
        self.notify_observers()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"
