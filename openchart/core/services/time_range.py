"""
Time Range Service - Derives time domains and date windows from series.
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta

from openchart.common.timeutils import MS_PER_DAY, ensure_utc, to_millis, utcnow
from openchart.core.domain.result import DataDensity
from openchart.core.domain.series import Series

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(hours=24)


def calculate_time_range(
    series_list: Sequence[Series],
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """
    Compute the overall [min, max] timestamp across all series.

    Args:
        series_list: Series to scan (any of them may be empty)
        now: Reference time for the empty fallback (default: current UTC time)

    Returns:
        (min_time, max_time). When every series is empty, returns the
        24-hour window ending at `now`.
    """
    min_point = None
    max_point = None
    for series in series_list:
        for point in series.points:
            ms = point.timestamp_ms
            if min_point is None or ms < min_point[0]:
                min_point = (ms, point.timestamp)
            if max_point is None or ms > max_point[0]:
                max_point = (ms, point.timestamp)

    if min_point is None or max_point is None:
        end = ensure_utc(now) if now is not None else utcnow()
        logger.debug("No points found, falling back to a 24h window")
        return end - DEFAULT_WINDOW, end

    return min_point[1], max_point[1]


def filter_by_date_range(
    series_list: Sequence[Series],
    start: datetime,
    end: datetime,
) -> list[Series]:
    """Keep only points with start <= timestamp <= end (both inclusive)."""
    start_ms = to_millis(start)
    end_ms = to_millis(end)
    return [
        series.with_points(p for p in series.points if start_ms <= p.timestamp_ms <= end_ms)
        for series in series_list
    ]


def calculate_data_density(series_list: Sequence[Series]) -> DataDensity | None:
    """
    Describe how densely the series are sampled.

    Returns None when no series contains a point.
    """
    total_points = sum(len(s.points) for s in series_list)
    if total_points == 0:
        return None

    start, end = calculate_time_range(series_list)
    span_ms = to_millis(end) - to_millis(start)

    interval_sum = 0
    interval_count = 0
    for series in series_list:
        stamps = sorted(p.timestamp_ms for p in series.points)
        for prev, curr in zip(stamps, stamps[1:]):
            interval_sum += curr - prev
            interval_count += 1

    span_days = span_ms / MS_PER_DAY
    return DataDensity(
        total_time_span_ms=span_ms,
        total_points=total_points,
        avg_points_per_series=total_points / (len(series_list) or 1),
        avg_interval_ms=interval_sum / interval_count if interval_count else 0.0,
        # A single instant has no span; report the raw point count
        points_per_day=total_points / span_days if span_days > 0 else float(total_points),
    )
