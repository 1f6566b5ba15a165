"""
Process-wide valuation settings.

- ``evaluation_date`` is "today" for every index and floating term structure.
  Unless set explicitly it comes from ``VALCORE_EVALUATION_DATE`` (ISO date)
  or, failing that, the system date.
- ``enforces_todays_historic_fixings`` decides whether today's fixing must be
  a stored historical value (True) or may be forecast when missing (False).
  Default from ``VALCORE_ENFORCE_TODAYS_HISTORIC_FIXINGS``.

Settings is itself observable: moving the evaluation date notifies every
registered index and term structure.
"""

from __future__ import annotations

import logging
import os
from datetime import date

from valcore.observable import Observable, market_data_lock

logger = logging.getLogger(__name__)

EVALUATION_DATE_ENV = "VALCORE_EVALUATION_DATE"
ENFORCE_TODAYS_FIXINGS_ENV = "VALCORE_ENFORCE_TODAYS_HISTORIC_FIXINGS"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUE_VALUES


def _default_evaluation_date() -> date:
    raw = os.environ.get(EVALUATION_DATE_ENV)
    if raw:
        return date.fromisoformat(raw.strip())
    return date.today()


class Settings(Observable):
    """Global evaluation date and fixing policy."""

    def __init__(self) -> None:
        super().__init__()
        self._evaluation_date: date | None = None
        self._enforces_todays_historic_fixings = _env_flag(ENFORCE_TODAYS_FIXINGS_ENV)

    @property
    def evaluation_date(self) -> date:
        if self._evaluation_date is None:
            return _default_evaluation_date()
        return self._evaluation_date

    @evaluation_date.setter
    def evaluation_date(self, value: date | None) -> None:
        with market_data_lock:
            if value == self._evaluation_date:
                return
            self._evaluation_date = value
            logger.debug("Evaluation date set to %s", value)
            self.notify_observers()

    @property
    def enforces_todays_historic_fixings(self) -> bool:
        return self._enforces_todays_historic_fixings

    @enforces_todays_historic_fixings.setter
    def enforces_todays_historic_fixings(self, value: bool) -> None:
        self._enforces_todays_historic_fixings = bool(value)


settings = Settings()


class SavedSettings:
    """Context manager restoring the global settings on exit.

    Example:
        with SavedSettings():
            settings.evaluation_date = date(2024, 1, 15)
            ...
    """

    def __enter__(self) -> "SavedSettings":
        self._evaluation_date = settings._evaluation_date
        self._enforces = settings.enforces_todays_historic_fixings
        return self

    def __exit__(self, *exc_info: object) -> None:
        settings.evaluation_date = self._evaluation_date
        settings.enforces_todays_historic_fixings = self._enforces
