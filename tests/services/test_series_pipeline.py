"""
Tests for the SeriesPipeline service.
"""
import math
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from openchart.adapters.cache.memory import InMemoryLayoutCache
from openchart.core.domain.config import ProcessingConfig, StackConfig
from openchart.core.domain.series import Series, TimePoint
from openchart.core.ports.layout_cache import LayoutCache
from openchart.core.services.pipeline import SeriesPipeline, process_series


@pytest.fixture
def mock_cache():
    cache = MagicMock(spec=LayoutCache)
    cache.get.return_value = None
    return cache


def test_process_defaults(ab_series):
    result = process_series(ab_series)

    assert result.is_valid
    assert result.point_count_before == 4
    assert result.point_count_after == 4
    # Exactly one day apart is not a gap under the default threshold
    assert result.gaps == ()
    assert result.resampled is False
    assert result.aggregation_applied is False
    assert result.time_range == (ab_series[0].points[0].timestamp, ab_series[0].points[-1].timestamp)
    assert [s.series_id for s in result.statistics] == ["a", "b"]


def test_process_is_idempotent(make_series):
    series_list = [
        make_series("a", [1, 2, 3, 4, 5, 6, 100] * 50, step=timedelta(hours=7)),
        make_series("b", list(range(300)), step=timedelta(hours=5)),
    ]
    config = ProcessingConfig(max_points=40, interpolation_method="linear")

    assert process_series(series_list, config) == process_series(series_list, config)


def test_process_detects_gaps(base_time):
    series = Series(id="a", label="A", points=[
        TimePoint(base_time, 1.0),
        TimePoint(base_time + timedelta(days=3), 2.0),
        TimePoint(base_time + timedelta(days=4), 3.0),
    ])

    result = process_series([series])

    assert result.gap_count == 1
    assert result.gaps[0].duration_ms == 3 * 86_400_000


def test_process_gap_detection_can_be_disabled(base_time):
    series = Series(id="a", label="A", points=[
        TimePoint(base_time, 1.0),
        TimePoint(base_time + timedelta(days=3), 2.0),
    ])

    assert process_series([series], {"enable_gap_detection": False}).gaps == ()


def test_process_resamples_to_budget(make_series):
    series = make_series("a", list(range(2000)), step=timedelta(minutes=1))

    result = process_series([series], ProcessingConfig(max_points=100))

    processed = result.processed_series[0]
    assert result.resampled is True
    assert len(processed) <= 101
    assert processed.points[0] == series.points[0]
    assert processed.points[-1] == series.points[-1]
    assert result.point_count_after == len(processed)


def test_process_resampling_can_be_disabled(make_series):
    series = make_series("a", list(range(50)), step=timedelta(minutes=1))

    result = process_series([series], ProcessingConfig(max_points=10, enable_data_resampling=False))

    assert len(result.processed_series[0]) == 50


def test_process_aggregates(make_series):
    series = make_series("a", [1.0] * 48, step=timedelta(hours=1))

    result = process_series([series], {"aggregation_interval": "day", "aggregation": "average"})

    assert result.aggregation_applied is True
    assert result.processed_series[0].values == [1.0, 1.0]


def test_process_linear_interpolation(base_time):
    series = Series(id="a", label="A", points=[
        TimePoint(base_time, 0.0),
        TimePoint(base_time + timedelta(days=4), 40.0),
    ])

    result = process_series([series], {"interpolation_method": "linear"})

    # Gaps describe the raw data; the processed series is filled
    assert result.gap_count == 1
    assert result.processed_series[0].values == pytest.approx([0, 10, 20, 30, 40])


def test_process_reports_validation_errors_alongside_output(base_time):
    series = Series(id="a", label="A", points=[
        TimePoint(base_time, 1.0),
        TimePoint(base_time + timedelta(days=1), math.nan),
        TimePoint(base_time + timedelta(days=2), 3.0),
    ])

    result = process_series([series])

    assert not result.is_valid
    assert result.validation_errors == ("Series 0, Point 1: 'value' must be a finite number",)
    assert result.processed_series[0].values == [1.0, 3.0]
    assert result.point_count_before == 3


def test_process_statistics_and_outliers_use_processed_data(make_series):
    series = make_series("a", [1, 2, 3, 4, 5, 6, 100])

    result = process_series([series])

    assert result.statistics[0].count == 7
    assert [o.point.value for o in result.outliers] == [100]


def test_process_empty_input():
    result = process_series([])

    assert result.processed_series == ()
    assert result.time_range is None
    assert result.point_count_before == 0


def test_process_rejects_invalid_config(ab_series):
    with pytest.raises(ValidationError):
        process_series(ab_series, {"max_points": 0})
    with pytest.raises(ValidationError):
        process_series(ab_series, {"unknown_option": True})


def test_process_does_not_mutate_input(base_time):
    series = Series(id="a", label="A", points=[
        TimePoint(base_time + timedelta(days=1), 2.0),
        TimePoint(base_time, 1.0),
    ])

    process_series([series])

    assert series.values == [2.0, 1.0]


def test_cache_miss_stores_result(ab_series, mock_cache):
    pipeline = SeriesPipeline(cache=mock_cache)

    result = pipeline.process(ab_series)

    mock_cache.get.assert_called_once()
    key = mock_cache.get.call_args[0][0]
    mock_cache.set.assert_called_once_with(key, result)


def test_cache_hit_skips_processing(ab_series, mock_cache):
    sentinel = object()
    mock_cache.get.return_value = sentinel
    pipeline = SeriesPipeline(cache=mock_cache)

    assert pipeline.process(ab_series) is sentinel
    mock_cache.set.assert_not_called()


def test_in_memory_cache_reuses_results(ab_series):
    cache = InMemoryLayoutCache()
    pipeline = SeriesPipeline(cache=cache)

    first = pipeline.process(ab_series)
    second = pipeline.process(ab_series)
    other = pipeline.process(ab_series, ProcessingConfig(max_points=1))

    assert first is second
    assert other is not first
    assert len(cache) == 2


def test_pipeline_stack(ab_series):
    pipeline = SeriesPipeline(cache=InMemoryLayoutCache())

    stacked = pipeline.stack(ab_series, StackConfig(order="descending"))
    again = pipeline.stack(ab_series, {"order": "descending"})

    assert [layer.series_id for layer in stacked] == ["a", "b"]
    assert stacked == again
    assert stacked[1].points[1].y1 == 35


def test_pipeline_stack_drops_invalid_points(base_time):
    series = Series(id="a", label="A", points=[TimePoint(base_time, 1.0), TimePoint(base_time, math.inf)])

    (layer,) = SeriesPipeline().stack([series])

    assert [p.value for p in layer.points] == [1.0]
