"""Shared fixtures: a pinned evaluation date and an empty fixing store per test."""

from datetime import date

import pytest

from valcore.indexes import index_manager
from valcore.settings import SavedSettings, settings

TODAY = date(2024, 1, 15)


@pytest.fixture(autouse=True)
def evaluation_date():
    """Pin 'today' and clear global fixing histories around each test."""
    with SavedSettings():
        settings.evaluation_date = TODAY
        yield TODAY
    index_manager.clear_histories()
