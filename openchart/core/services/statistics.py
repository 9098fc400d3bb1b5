"""
Statistics Service - Per-series summary statistics.
"""

from collections.abc import Sequence

import numpy as np

from openchart.core.domain.result import SeriesStatistics
from openchart.core.domain.series import Series


def compute_series_statistics(series: Series) -> SeriesStatistics:
    """
    Count, min, max, mean, median and population standard deviation.

    An empty series yields a zero-valued record.
    """
    if not series.points:
        return SeriesStatistics(series_id=series.id, label=series.label)

    values = np.asarray(series.values, dtype=float)
    return SeriesStatistics(
        series_id=series.id,
        label=series.label,
        count=int(values.size),
        min=float(values.min()),
        max=float(values.max()),
        mean=float(values.mean()),
        median=float(np.median(values)),
        std_dev=float(values.std(ddof=0)),
    )


def compute_statistics(series_list: Sequence[Series], series_id: str | None = None) -> list[SeriesStatistics]:
    return [
        compute_series_statistics(series)
        for series in series_list
        if series_id is None or series.id == series_id
    ]
