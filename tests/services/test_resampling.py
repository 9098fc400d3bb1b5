"""
Tests for point-budget resampling and interval aggregation.
"""
from datetime import timedelta

import pytest

from openchart.core.domain.series import Series, TimePoint
from openchart.core.services.resampling import aggregate_by_interval, resample_to_target_count


@pytest.mark.parametrize("n, target, expected", [
    (10, 3, [0, 3, 6, 9]),
    (10, 4, [0, 2, 4, 6, 8, 9]),
    (11, 5, [0, 2, 4, 6, 8, 10]),
    (1000, 1, [0, 999]),
])
def test_resample_stride_and_endpoints(make_series, n, target, expected):
    series = make_series("a", list(range(n)), step=timedelta(minutes=1))

    resampled = resample_to_target_count(series, target)

    assert resampled.values == expected
    assert resampled.points[0] == series.points[0]
    assert resampled.points[-1] == series.points[-1]


def test_resample_within_budget_returns_same_series(make_series):
    series = make_series("a", [1, 2, 3])
    assert resample_to_target_count(series, 3) is series


def test_resample_sorts_before_sampling(make_series):
    series = make_series("a", list(range(10)))
    shuffled = series.with_points(reversed(series.points))

    resampled = resample_to_target_count(shuffled, 3)

    assert resampled.values == [0, 3, 6, 9]


def test_resample_invalid_target(make_series):
    with pytest.raises(ValueError):
        resample_to_target_count(make_series("a", [1, 2]), 0)


def test_aggregate_daily_sum(make_series, base_time):
    series = make_series("a", [1.0] * 48, step=timedelta(hours=1))

    daily = aggregate_by_interval(series, "day", "sum")

    assert daily.values == [24.0, 24.0]
    assert daily.points[0].timestamp == base_time
    assert daily.points[1].timestamp == base_time + timedelta(days=1)
    assert daily.points[0].metadata["aggregation"] == "sum"
    assert daily.points[0].metadata["interval"] == "day"
    assert daily.points[0].metadata["count"] == 24
    assert len(daily.points[0].metadata["original_metadata"]) == 24


@pytest.mark.parametrize("aggregation, expected", [
    ("sum", 10.0),
    ("average", 2.5),
    ("min", 1.0),
    ("max", 4.0),
    ("count", 4.0),
])
def test_aggregate_reductions(make_series, aggregation, expected):
    series = make_series("a", [1, 2, 3, 4], step=timedelta(minutes=10))

    hourly = aggregate_by_interval(series, "hour", aggregation)

    assert hourly.values == [expected]


def test_aggregate_skips_empty_buckets(base_time):
    series = Series(id="a", label="A", points=[
        TimePoint(base_time, 1.0),
        TimePoint(base_time + timedelta(days=10), 2.0),
    ])

    assert len(aggregate_by_interval(series, "day")) == 2


def test_aggregate_rejects_unknown_names(make_series):
    series = make_series("a", [1, 2])
    with pytest.raises(ValueError):
        aggregate_by_interval(series, "fortnight")
    with pytest.raises(ValueError):
        aggregate_by_interval(series, "day", "median")


def test_aggregate_copies_original_metadata(base_time):
    source = {"origin": "sensor-1"}
    series = Series(id="a", label="A", points=[TimePoint(base_time, 1.0, source)])

    hourly = aggregate_by_interval(series, "hour")
    hourly.points[0].metadata["original_metadata"][0]["origin"] = "changed"

    assert source == {"origin": "sensor-1"}
