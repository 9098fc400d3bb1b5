"""
Series Domain Model - Input and layout value objects.

Every stage of the engine returns new instances; nothing here is mutated
after construction.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from openchart.common.timeutils import to_millis


@dataclass(frozen=True)
class TimePoint:
    """A single timestamped observation."""

    timestamp: datetime
    value: float
    metadata: dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def timestamp_ms(self) -> int:
        return to_millis(self.timestamp)


@dataclass(frozen=True)
class Series:
    """
    One named sequence of observations.

    Points may arrive unsorted; internal algorithms work on `sorted()` copies.
    """

    id: str
    label: str
    points: tuple[TimePoint, ...] = ()
    color: str | None = None

    def __post_init__(self):
        # Accept lists for convenience but store an immutable tuple
        if not isinstance(self.points, tuple):
            object.__setattr__(self, "points", tuple(self.points))

    def __len__(self) -> int:
        return len(self.points)

    def sorted(self) -> "Series":
        """Return a copy with points ascending by timestamp (stable)."""
        return self.with_points(sorted(self.points, key=lambda p: p.timestamp_ms))

    def with_points(self, points) -> "Series":
        return replace(self, points=tuple(points))

    @property
    def values(self) -> list[float]:
        return [p.value for p in self.points]


@dataclass(frozen=True)
class Gap:
    """A detected interval between consecutive points that exceeds the threshold."""

    series_id: str
    start_time: datetime
    end_time: datetime
    duration_ms: int
    series_label: str = ""


@dataclass(frozen=True)
class StackedPoint:
    """A point positioned in a stack; `y1 == y0 + value`."""

    timestamp: datetime
    value: float
    y0: float
    y1: float


@dataclass(frozen=True)
class StackedSeries:
    """One layer of a stacked layout, sharing the timestamp axis of its siblings."""

    series_id: str
    label: str
    points: tuple[StackedPoint, ...] = ()
    color: str | None = None

    def with_points(self, points) -> "StackedSeries":
        return replace(self, points=tuple(points))
