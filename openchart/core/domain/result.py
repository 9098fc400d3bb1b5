"""
Result Domain Models - Diagnostics and outputs of the layout engine.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from openchart.core.domain.series import Gap, Series, TimePoint


@dataclass(frozen=True)
class Outlier:
    """A point outside the 1.5 x IQR fences of its series."""

    series_id: str
    series_label: str
    point: TimePoint
    score: float  # distance beyond the fence, in IQR units


@dataclass(frozen=True)
class SeriesStatistics:
    """Summary statistics for one series."""

    series_id: str
    label: str
    count: int = 0
    min: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    median: float = 0.0
    std_dev: float = 0.0


@dataclass(frozen=True)
class DataDensity:
    """Sampling density across a set of series."""

    total_time_span_ms: int
    total_points: int
    avg_points_per_series: float
    avg_interval_ms: float
    points_per_day: float


@dataclass(frozen=True)
class AxisScale:
    """Numbers and formatting needed to draw a time axis."""

    domain: tuple[datetime, datetime]
    tick_count: int
    tick_format: Callable[[datetime], str]
    format_pattern: str
    chart_width: int


@dataclass(frozen=True)
class ProcessingResult:
    """Result of a `process_series` call. Created fresh on every invocation."""

    processed_series: tuple[Series, ...] = ()
    gaps: tuple[Gap, ...] = ()
    outliers: tuple[Outlier, ...] = ()
    statistics: tuple[SeriesStatistics, ...] = ()
    point_count_before: int = 0
    point_count_after: int = 0
    validation_errors: tuple[str, ...] = field(default_factory=tuple)
    time_range: tuple[datetime, datetime] | None = None
    resampled: bool = False
    aggregation_applied: bool = False

    @property
    def gap_count(self) -> int:
        return len(self.gaps)

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors


# --- Stacked Layout Diagnostics ---

@dataclass(frozen=True)
class DateTotal:
    """Cross-series total and stack top at one timestamp."""

    timestamp: datetime
    total: float
    max_y: float


@dataclass(frozen=True)
class LayerSummary:
    """Summary of one stacked layer's values."""

    series_id: str
    sum: float
    avg: float
    min: float
    max: float


@dataclass(frozen=True)
class StackStatistics:
    series_count: int
    date_count: int
    totals_by_date: tuple[DateTotal, ...]
    layers: tuple[LayerSummary, ...]


@dataclass(frozen=True)
class StreamLayerSummary:
    series_id: str
    volume: float
    average_value: float
    average_baseline: float
    max_value: float
    min_value: float
    variability: float  # sample standard deviation of values


@dataclass(frozen=True)
class StreamStatistics:
    """Shape of a stream layout: bounds, symmetry and volume."""

    min_y: float
    max_y: float
    flow_height: float
    centerline: float
    symmetry_score: float  # 0 = balanced around the stream axis, 1 = resting on it
    total_volume: float
    average_volume: float
    time_span_ms: int
    series_count: int
    date_count: int
    layers: tuple[StreamLayerSummary, ...]


@dataclass(frozen=True)
class FlowVelocity:
    """Rate of change (per ms) of a layer between two consecutive timestamps."""

    timestamp: datetime
    value_velocity: float
    baseline_velocity: float
    total_velocity: float


@dataclass(frozen=True)
class AreaBetweenPoint:
    timestamp: datetime
    upper: float
    lower: float
    difference: float
