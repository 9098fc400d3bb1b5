"""
Outlier Service - IQR (Tukey fence) outlier detection.
"""

import logging
import math
from collections.abc import Sequence

from openchart.core.domain.result import Outlier
from openchart.core.domain.series import Series

logger = logging.getLogger(__name__)

MIN_POINTS_FOR_QUARTILES = 4
FENCE_MULTIPLIER = 1.5


def quartiles(values: Sequence[float]) -> tuple[float, float]:
    """Q1 and Q3 at the floor(n*0.25) and floor(n*0.75) indices of the sorted values."""
    ordered = sorted(values)
    n = len(ordered)
    return ordered[math.floor(n * 0.25)], ordered[math.floor(n * 0.75)]


def detect_outliers(series: Series) -> list[Outlier]:
    """
    Flag points outside [Q1 - 1.5*IQR, Q3 + 1.5*IQR].

    Series with fewer than 4 points, and series whose IQR is 0, report no
    outliers. Scores are the distance beyond the violated fence divided by
    the IQR; results are sorted by descending score.
    """
    if len(series.points) < MIN_POINTS_FOR_QUARTILES:
        return []

    q1, q3 = quartiles(series.values)
    iqr = q3 - q1
    if iqr == 0:
        logger.debug(f"Series '{series.id}' has zero IQR, skipping outlier scoring")
        return []

    lower = q1 - FENCE_MULTIPLIER * iqr
    upper = q3 + FENCE_MULTIPLIER * iqr

    outliers = []
    for point in series.points:
        if point.value < lower:
            distance = lower - point.value
        elif point.value > upper:
            distance = point.value - upper
        else:
            continue
        outliers.append(Outlier(
            series_id=series.id,
            series_label=series.label,
            point=point,
            score=distance / iqr,
        ))

    outliers.sort(key=lambda o: o.score, reverse=True)
    return outliers


def find_outliers(series_list: Sequence[Series], series_id: str | None = None) -> list[Outlier]:
    """Outliers across several series (optionally one), sorted by descending score."""
    outliers = []
    for series in series_list:
        if series_id is not None and series.id != series_id:
            continue
        outliers.extend(detect_outliers(series))
    outliers.sort(key=lambda o: o.score, reverse=True)
    return outliers
