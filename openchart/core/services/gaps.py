"""
Gap Service - Detects (and optionally fills) gaps between consecutive points.

A gap is any pair of consecutive points whose time delta is strictly greater
than the threshold. Filling is a separate pass from detection.
"""

import logging
import math

from openchart.common.timeutils import MS_PER_DAY, from_millis
from openchart.core.domain.config import InterpolationMethod
from openchart.core.domain.series import Gap, Series, TimePoint

logger = logging.getLogger(__name__)

DEFAULT_GAP_THRESHOLD_MS = MS_PER_DAY


def detect_gaps(series: Series, gap_threshold_ms: int = DEFAULT_GAP_THRESHOLD_MS) -> list[Gap]:
    """
    Find gaps in a single series.

    Args:
        series: Series to scan (sorted defensively)
        gap_threshold_ms: Deltas strictly greater than this are gaps

    Returns:
        Gaps in time order. Fewer than 2 points yields no gaps.
    """
    points = series.sorted().points
    gaps: list[Gap] = []

    for prev, curr in zip(points, points[1:]):
        delta = curr.timestamp_ms - prev.timestamp_ms
        if delta > gap_threshold_ms:
            gaps.append(Gap(
                series_id=series.id,
                start_time=prev.timestamp,
                end_time=curr.timestamp,
                duration_ms=delta,
                series_label=series.label,
            ))

    if gaps:
        logger.debug(f"Series '{series.id}' has {len(gaps)} gap(s) above {gap_threshold_ms}ms")
    return gaps


def interpolate_missing_data(
    series: Series,
    method: InterpolationMethod = "none",
    gap_threshold_ms: int = DEFAULT_GAP_THRESHOLD_MS,
    max_fill_points: int = 1000,
) -> Series:
    """
    Fill gaps in a series.

    - ``none``: returns the series unchanged.
    - ``polynomial``: pass-through; returns the points sorted but otherwise unchanged.
    - ``linear``: inserts evenly spaced, linearly interpolated points into
      every gap so no remaining delta exceeds the threshold. Inserted points
      carry ``{"interpolated": True}`` metadata.

    Args:
        series: Series to fill
        method: Interpolation method
        gap_threshold_ms: Gap threshold; fill is a no-op when it is <= 0
        max_fill_points: Upper bound on points inserted into a single gap
    """
    if method == "none" or len(series.points) < 2:
        return series
    if method not in ("linear", "polynomial"):
        raise ValueError(f"Unknown interpolation method: {method}")

    ordered = series.sorted()
    if method == "polynomial":
        return ordered
    if gap_threshold_ms <= 0 or max_fill_points <= 0:
        return ordered

    filled: list[TimePoint] = [ordered.points[0]]
    inserted = 0
    for prev, curr in zip(ordered.points, ordered.points[1:]):
        start_ms = prev.timestamp_ms
        delta = curr.timestamp_ms - start_ms
        if delta > gap_threshold_ms:
            segments = min(math.ceil(delta / gap_threshold_ms), max_fill_points + 1)
            for step in range(1, segments):
                fraction = step / segments
                filled.append(TimePoint(
                    timestamp=from_millis(start_ms + delta * fraction),
                    value=prev.value + (curr.value - prev.value) * fraction,
                    metadata={"interpolated": True},
                ))
                inserted += 1
        filled.append(curr)

    if inserted:
        logger.debug(f"Inserted {inserted} interpolated point(s) into series '{series.id}'")
    return ordered.with_points(filled)
