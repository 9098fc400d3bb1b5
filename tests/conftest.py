"""
Pytest configuration and shared fixtures for OpenChart tests.
"""
from datetime import datetime, timedelta, timezone

import pytest

from openchart.core.domain.series import Series, TimePoint

BASE_TIME = datetime(2023, 1, 1, tzinfo=timezone.utc)


def build_series(series_id, values, step=timedelta(days=1), start=BASE_TIME, label=None):
    """Evenly spaced series starting at `start`."""
    points = [TimePoint(timestamp=start + i * step, value=v) for i, v in enumerate(values)]
    return Series(id=series_id, label=label or series_id.upper(), points=points)


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def make_series():
    """Factory fixture: make_series("a", [1, 2, 3], step=timedelta(hours=1))."""
    return build_series


@pytest.fixture
def ab_series():
    """Two daily series on 2023-01-01 / 2023-01-02."""
    return [
        build_series("a", [10, 20], label="A"),
        build_series("b", [5, 15], label="B"),
    ]
