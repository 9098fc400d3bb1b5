"""
Resampling Service - Point-budget enforcement.

Two independent reductions:
1. Uniform-stride subsampling that always preserves both endpoints
2. Fixed-interval bucketing with a reduction per bucket
"""

import logging
from collections import defaultdict

from openchart.common.timeutils import MS_PER_DAY, MS_PER_HOUR, MS_PER_MONTH, MS_PER_WEEK, from_millis
from openchart.core.domain.config import AggregationInterval, AggregationMode
from openchart.core.domain.series import Series, TimePoint

logger = logging.getLogger(__name__)

INTERVAL_MS: dict[str, int] = {
    "hour": MS_PER_HOUR,
    "day": MS_PER_DAY,
    "week": MS_PER_WEEK,
    "month": MS_PER_MONTH,
}

_REDUCERS = {
    "sum": sum,
    "average": lambda values: sum(values) / len(values),
    "min": min,
    "max": max,
    "count": lambda values: float(len(values)),
}


def resample_to_target_count(series: Series, target_count: int) -> Series:
    """
    Reduce a series to roughly `target_count` points by uniform stride.

    Args:
        series: Series to reduce (sorted defensively)
        target_count: Point budget (>= 1)

    Returns:
        The same series when it already fits the budget; otherwise every
        `floor(n / target_count)`-th point from index 0, plus the final point
        when the stride did not land on it.
    """
    if target_count < 1:
        raise ValueError("target_count must be >= 1")

    n = len(series.points)
    if n <= target_count:
        return series

    points = series.sorted().points
    stride = n // target_count
    sampled = list(points[::stride])
    if (n - 1) % stride != 0:
        sampled.append(points[-1])

    logger.debug(f"Resampled series '{series.id}' from {n} to {len(sampled)} points (stride={stride})")
    return series.with_points(sampled)


def aggregate_by_interval(
    series: Series,
    interval: AggregationInterval,
    aggregation: AggregationMode = "sum",
) -> Series:
    """
    Bucket points into fixed intervals and reduce each bucket.

    Buckets start at `floor(ms / interval_ms) * interval_ms` (Unix epoch, UTC).
    Empty buckets are never produced. Output points carry the aggregation,
    the interval, the bucket size and the original metadata.
    """
    if interval not in INTERVAL_MS:
        raise ValueError(f"Unknown aggregation interval: {interval}")
    if aggregation not in _REDUCERS:
        raise ValueError(f"Unknown aggregation: {aggregation}")

    interval_ms = INTERVAL_MS[interval]
    values: dict[int, list[float]] = defaultdict(list)
    metadata: dict[int, list[dict]] = defaultdict(list)

    for point in series.points:
        bucket = (point.timestamp_ms // interval_ms) * interval_ms
        values[bucket].append(point.value)
        metadata[bucket].append(dict(point.metadata))

    reduce = _REDUCERS[aggregation]
    aggregated = [
        TimePoint(
            timestamp=from_millis(bucket),
            value=float(reduce(values[bucket])),
            metadata={
                "aggregation": aggregation,
                "interval": interval,
                "count": len(values[bucket]),
                "original_metadata": metadata[bucket],
            },
        )
        for bucket in sorted(values)
    ]

    logger.debug(f"Aggregated series '{series.id}' into {len(aggregated)} {interval} bucket(s)")
    return series.with_points(aggregated)
