"""
Validation Service - Reports input problems as data instead of raising.

Validation produces human-readable messages; `sanitize_series` produces the
best-effort input the rest of the engine can safely work on.
"""

import logging
import math
from collections.abc import Sequence
from datetime import datetime
from numbers import Real

from openchart.core.domain.series import Series, TimePoint

logger = logging.getLogger(__name__)


def _valid_timestamp(point: TimePoint) -> bool:
    return isinstance(point.timestamp, datetime)


def _valid_value(point: TimePoint) -> bool:
    value = point.value
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def validate_series(series_list: Sequence[Series]) -> list[str]:
    """
    Check series structure and point validity.

    Returns:
        Human-readable messages, empty when the input is valid.
    """
    errors: list[str] = []
    seen_ids: set[str] = set()

    for index, series in enumerate(series_list):
        if not series.id:
            errors.append(f"Series {index}: Missing required 'id' field")
        elif series.id in seen_ids:
            errors.append(f"Series {index}: Duplicate id '{series.id}'")
        else:
            seen_ids.add(series.id)

        if not series.label:
            errors.append(f"Series {index}: Missing required 'label' field")

        stamps: set[int] = set()
        duplicates = False
        for point_index, point in enumerate(series.points):
            if not _valid_timestamp(point):
                errors.append(f"Series {index}, Point {point_index}: 'timestamp' must be a datetime")
            else:
                ms = point.timestamp_ms
                if ms in stamps:
                    duplicates = True
                stamps.add(ms)

            if not _valid_value(point):
                errors.append(f"Series {index}, Point {point_index}: 'value' must be a finite number")

        if duplicates:
            errors.append(f"Series {index}: Contains duplicate timestamps")

    if errors:
        logger.warning(f"Validation found {len(errors)} problem(s) in {len(series_list)} series")
    return errors


def sanitize_series(series_list: Sequence[Series]) -> list[Series]:
    """
    Drop invalid points and sort each series ascending by timestamp.

    Points with a non-datetime timestamp or a non-finite value are removed;
    for duplicated timestamps the first occurrence is kept.
    """
    cleaned = []
    for series in series_list:
        kept: list[TimePoint] = []
        stamps: set[int] = set()
        for point in series.points:
            if not (_valid_timestamp(point) and _valid_value(point)):
                continue
            ms = point.timestamp_ms
            if ms in stamps:
                continue
            stamps.add(ms)
            kept.append(point)
        cleaned.append(series.with_points(kept).sorted())
    return cleaned
