"""
Time Axis Service - Adaptive tick density and timestamp formatting.

The span boundaries are upper-exclusive: a span exactly equal to a boundary
selects the next-larger bucket.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import pandas as pd

from openchart.common.timeutils import (
    MS_PER_DAY,
    MS_PER_HOUR,
    MS_PER_MINUTE,
    MS_PER_MONTH,
    MS_PER_WEEK,
    MS_PER_YEAR,
    ensure_utc,
    to_millis,
)
from openchart.core.domain.config import AxisConfig, Margins
from openchart.core.domain.result import AxisScale
from openchart.core.domain.series import Series
from openchart.core.services.time_range import calculate_time_range

logger = logging.getLogger(__name__)

# (exclusive upper bound in ms, strftime pattern)
FORMAT_BUCKETS: tuple[tuple[int, str], ...] = (
    (MS_PER_HOUR, "%H:%M:%S"),
    (MS_PER_DAY, "%H:%M"),
    (MS_PER_WEEK, "%m/%d %H:%M"),
    (MS_PER_MONTH, "%m/%d"),
    (MS_PER_YEAR, "%b %d"),
)
FALLBACK_FORMAT = "%Y"

COMPACT_FORMAT_BUCKETS: tuple[tuple[int, str], ...] = (
    (MS_PER_HOUR, "%H:%M"),
    (MS_PER_DAY, "%H:%M"),
    (MS_PER_MONTH, "%m/%d"),
    (MS_PER_YEAR, "%b"),
)

FULL_LABEL_BUCKETS: tuple[tuple[int, str], ...] = (
    (MS_PER_HOUR, "%H:%M:%S"),
    (MS_PER_DAY, "%I:%M %p"),
    (MS_PER_WEEK, "%a %m/%d"),
    (MS_PER_MONTH, "%m/%d"),
    (MS_PER_YEAR, "%b %Y"),
)


@dataclass(frozen=True)
class TimeInterval:
    """A suggested aggregation interval for a time span."""

    interval_ms: int
    format: str
    description: str


def _pick(buckets: Sequence[tuple[int, str]], span_ms: int) -> str:
    for upper, pattern in buckets:
        if span_ms < upper:
            return pattern
    return FALLBACK_FORMAT


def select_time_format(span_ms: int) -> str:
    """Map a time span to a strftime pattern (strict `<` on each boundary)."""
    return _pick(FORMAT_BUCKETS, span_ms)


def make_formatter(pattern: str) -> Callable[[datetime], str]:
    """Build a formatter rendering instants in UTC."""
    def _format(instant: datetime) -> str:
        return ensure_utc(instant).strftime(pattern)
    return _format


def optimal_tick_count(width: float, min_spacing: int = 80, max_ticks: int = 8) -> int:
    """clamp(2, max_ticks, floor(width / min_spacing))."""
    if min_spacing <= 0:
        raise ValueError("min_spacing must be positive")
    return max(2, min(max_ticks, int(width // min_spacing)))


def adaptive_time_format(
    time_range: tuple[datetime, datetime],
    width: float,
    min_spacing: int = 80,
    max_ticks: int = 8,
) -> tuple[int, Callable[[datetime], str]]:
    """
    Choose a tick count and label formatter for a range and pixel width.

    Returns:
        (tick_count, format_fn)
    """
    start, end = time_range
    span_ms = to_millis(end) - to_millis(start)
    return (
        optimal_tick_count(width, min_spacing, max_ticks),
        make_formatter(select_time_format(span_ms)),
    )


def adapt_time_scale(
    series_list: Sequence[Series],
    pixel_width: int,
    margins: Margins | None = None,
    axis: AxisConfig | None = None,
    now: datetime | None = None,
) -> AxisScale:
    """
    Derive everything a renderer needs to draw a time axis.

    Args:
        series_list: Series that define the domain
        pixel_width: Total available width including margins
        margins: Left/right margins (default 60/20)
        axis: Tick density options (default 80px spacing, 8 ticks max)
        now: Reference time for the empty-data fallback domain

    Returns:
        AxisScale with domain, tick count and tick formatter
    """
    margins = margins or Margins()
    axis = axis or AxisConfig()

    domain = calculate_time_range(series_list, now=now)
    chart_width = pixel_width - margins.left - margins.right
    pattern = select_time_format(to_millis(domain[1]) - to_millis(domain[0]))
    tick_count = optimal_tick_count(chart_width, axis.min_tick_spacing, axis.max_ticks)
    tick_format = make_formatter(pattern)

    logger.debug(f"Axis width={chart_width}px ticks={tick_count} format='{pattern}'")
    return AxisScale(
        domain=domain,
        tick_count=tick_count,
        tick_format=tick_format,
        format_pattern=pattern,
        chart_width=chart_width,
    )


def format_time_labels(
    instants: Sequence[datetime],
    span_ms: int,
    compact: bool = False,
) -> list[str]:
    """
    Format tick labels for a span, with a compact variant for small screens.
    """
    buckets = COMPACT_FORMAT_BUCKETS if compact else FULL_LABEL_BUCKETS
    formatter = make_formatter(_pick(buckets, span_ms))
    return [formatter(instant) for instant in instants]


def generate_time_ticks(domain: tuple[datetime, datetime], tick_count: int) -> list[datetime]:
    """Evenly spaced tick instants across the domain, endpoints included."""
    if tick_count < 1:
        raise ValueError("tick_count must be >= 1")
    start, end = (ensure_utc(d) for d in domain)
    if tick_count == 1 or start == end:
        return [start]
    ticks = pd.date_range(start=start, end=end, periods=tick_count)
    return [ts.to_pydatetime() for ts in ticks]


def suggest_time_interval(span_ms: int, target_point_count: int = 100) -> TimeInterval:
    """
    Suggest a data aggregation interval so a span renders ~target_point_count points.
    """
    if target_point_count < 1:
        raise ValueError("target_point_count must be >= 1")
    interval_size = span_ms / target_point_count

    if interval_size < MS_PER_MINUTE * 5:
        return TimeInterval(MS_PER_MINUTE, "%H:%M", "Every minute")
    if interval_size < MS_PER_HOUR:
        return TimeInterval(15 * MS_PER_MINUTE, "%H:%M", "Every 15 minutes")
    if interval_size < MS_PER_DAY:
        return TimeInterval(MS_PER_HOUR, "%H:%M", "Hourly")
    if interval_size < MS_PER_WEEK:
        return TimeInterval(MS_PER_DAY, "%m/%d", "Daily")
    if interval_size < MS_PER_MONTH:
        return TimeInterval(MS_PER_WEEK, "%m/%d", "Weekly")
    return TimeInterval(MS_PER_MONTH, "%b %Y", "Monthly")


def fiscal_year(instant: datetime) -> int:
    """Fiscal year running July 1 - June 30, named after its ending year."""
    return instant.year if instant.month < 7 else instant.year + 1


