"""
Tests for gap detection and missing-data interpolation.
"""
from datetime import timedelta

import pytest

from openchart.core.domain.series import Series, TimePoint
from openchart.core.services.gaps import detect_gaps, interpolate_missing_data

THRESHOLD = 60_000


def _two_points(base_time, delta_ms):
    return Series(id="a", label="A", points=[
        TimePoint(base_time, 1.0),
        TimePoint(base_time + timedelta(milliseconds=delta_ms), 2.0),
    ])


def test_gap_just_above_threshold(base_time):
    gaps = detect_gaps(_two_points(base_time, THRESHOLD + 1), THRESHOLD)

    assert len(gaps) == 1
    assert gaps[0].duration_ms == THRESHOLD + 1
    assert gaps[0].start_time == base_time
    assert gaps[0].series_id == "a"
    assert gaps[0].series_label == "A"


def test_gap_exactly_at_threshold_is_not_a_gap(base_time):
    assert detect_gaps(_two_points(base_time, THRESHOLD), THRESHOLD) == []


def test_detect_gaps_sorts_input(base_time):
    series = Series(id="a", label="A", points=[
        TimePoint(base_time + timedelta(days=5), 3),
        TimePoint(base_time, 1),
        TimePoint(base_time + timedelta(days=1), 2),
    ])

    gaps = detect_gaps(series, 86_400_000)

    assert len(gaps) == 1
    assert gaps[0].start_time == base_time + timedelta(days=1)
    assert gaps[0].end_time == base_time + timedelta(days=5)


def test_detect_gaps_short_series(make_series):
    assert detect_gaps(make_series("a", []), THRESHOLD) == []
    assert detect_gaps(make_series("a", [1]), THRESHOLD) == []


def test_interpolation_none_returns_input(make_series):
    series = make_series("a", [1, 2])
    assert interpolate_missing_data(series, "none") is series


def test_polynomial_interpolation_is_pass_through(base_time):
    series = Series(id="a", label="A", points=[
        TimePoint(base_time + timedelta(days=10), 2.0),
        TimePoint(base_time, 1.0),
    ])

    filled = interpolate_missing_data(series, "polynomial", gap_threshold_ms=86_400_000)

    # Sorted, nothing inserted
    assert filled.values == [1.0, 2.0]


def test_linear_interpolation_fills_gaps(base_time):
    series = Series(id="a", label="A", points=[
        TimePoint(base_time, 0.0),
        TimePoint(base_time + timedelta(days=3), 30.0),
    ])

    filled = interpolate_missing_data(series, "linear", gap_threshold_ms=86_400_000)

    assert filled.values == pytest.approx([0.0, 10.0, 20.0, 30.0])
    assert filled.points[1].timestamp == base_time + timedelta(days=1)
    assert filled.points[1].metadata == {"interpolated": True}
    assert "interpolated" not in filled.points[0].metadata
    assert detect_gaps(filled, 86_400_000) == []


def test_linear_interpolation_uneven_gap(base_time):
    series = Series(id="a", label="A", points=[
        TimePoint(base_time, 0.0),
        TimePoint(base_time + timedelta(hours=60), 5.0),
    ])

    filled = interpolate_missing_data(series, "linear", gap_threshold_ms=86_400_000)

    assert len(filled) == 4
    assert detect_gaps(filled, 86_400_000) == []


def test_linear_interpolation_respects_fill_cap(base_time):
    series = Series(id="a", label="A", points=[
        TimePoint(base_time, 0.0),
        TimePoint(base_time + timedelta(days=10), 10.0),
    ])

    filled = interpolate_missing_data(series, "linear", gap_threshold_ms=86_400_000, max_fill_points=2)

    assert len(filled) == 4


def test_unknown_interpolation_method(make_series):
    with pytest.raises(ValueError):
        interpolate_missing_data(make_series("a", [1, 2]), "cubic")
