"""
Historical fixing storage.

Fixings are real-world observations, so they are stored once per index name
and shared by every ``Index`` object carrying that name, clones included.
The store is observable: inserting or clearing fixings notifies every index
reading from it.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Iterable, Iterator

from valcore.errors import DataIntegrityError
from valcore.observable import Observable, market_data_lock

logger = logging.getLogger(__name__)


def _same_fixing(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=1e-12, abs_tol=0.0)


class TimeSeries(Observable):
    """Observable date -> value mapping with overwrite protection."""

    def __init__(self, name: str = "") -> None:
        super().__init__()
        self.name = name
        self._values: dict[date, float] = {}

    def __contains__(self, d: object) -> bool:
        return d in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[date]:
        return iter(sorted(self._values))

    def __getitem__(self, d: date) -> float:
        return self._values[d]

    def get(self, d: date) -> float | None:
        return self._values.get(d)

    def items(self) -> list[tuple[date, float]]:
        return sorted(self._values.items())

    def first_date(self) -> date | None:
        return min(self._values) if self._values else None

    def last_date(self) -> date | None:
        return max(self._values) if self._values else None

    def insert(
        self, entries: Iterable[tuple[date, float]], force_overwrite: bool = False
    ) -> None:
        """
        Add values, all or nothing.

        A value differing from one already stored (or from another entry of
        the same batch) for the same date is rejected unless
        ``force_overwrite`` is set. Re-inserting an identical value is a
        no-op.
        """
        with market_data_lock:
            staged: dict[date, float] = {}
            for d, value in entries:
                current = staged.get(d, self._values.get(d))
                if (
                    current is not None
                    and not force_overwrite
                    and not _same_fixing(current, value)
                ):
                    raise DataIntegrityError(
                        f"At least one duplicated fixing provided for {self.name}: "
                        f"({d}, {value}) while {current} value is already present"
                    )
                staged[d] = value

            changed = False
            for d, value in staged.items():
                current = self._values.get(d)
                if current is not None and _same_fixing(current, value):
                    continue
                if current is not None:
                    logger.warning(
                        "Overwriting %s fixing for %s: %s -> %s",
                        self.name, d, current, value,
                    )
                self._values[d] = value
                changed = True
            if changed:
                logger.debug("Stored %d %s fixings", len(staged), self.name)
                self.notify_observers()

    def clear(self) -> None:
        with market_data_lock:
            if not self._values:
                return
            self._values.clear()
            logger.debug("Cleared %s fixings", self.name)
            self.notify_observers()


class IndexManager:
    """
    Registry of fixing histories keyed by (case-insensitive) index name.

    Example:
        index_manager.history("EUROSTOXX50").insert([(date(2024, 1, 2), 4500.0)])
        index_manager.clear_histories()
    """

    def __init__(self) -> None:
        self._histories: dict[str, TimeSeries] = {}

    def history(self, name: str) -> TimeSeries:
        """Return the shared store for ``name``, creating it if needed."""
        key = name.upper()
        series = self._histories.get(key)
        if series is None:
            series = TimeSeries(name)
            self._histories[key] = series
        return series

    def has_history(self, name: str) -> bool:
        series = self._histories.get(name.upper())
        return series is not None and len(series) > 0

    def histories(self) -> list[str]:
        return [key for key, series in self._histories.items() if len(series) > 0]

    def clear_history(self, name: str) -> None:
        series = self._histories.get(name.upper())
        if series is not None:
            series.clear()

    def clear_histories(self) -> None:
        for series in self._histories.values():
            series.clear()


index_manager = IndexManager()
