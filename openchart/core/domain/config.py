"""
Configuration Domain Models - Options recognised by the layout engine.

Uses Pydantic for validation; every option and its default is enumerated
here and checked once at the boundary.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

InterpolationMethod = Literal["linear", "polynomial", "none"]
AggregationInterval = Literal["hour", "day", "week", "month"]
AggregationMode = Literal["sum", "average", "min", "max", "count"]
StackOrder = Literal["none", "ascending", "descending", "inside-out", "reverse"]
StackOffset = Literal["none", "expand", "silhouette", "wiggle"]


class ProcessingConfig(BaseModel):
    """Configuration for `process_series`."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # --- Point Budget ---
    max_points: int = Field(default=1000, ge=1, description="Maximum points per series after resampling")
    enable_data_resampling: bool = True

    # --- Gaps ---
    gap_threshold_ms: int = Field(default=86_400_000, ge=0, description="Gap threshold (24h)")
    enable_gap_detection: bool = True

    # --- Missing Data ---
    interpolation_method: InterpolationMethod = "none"
    max_fill_points: int = Field(default=1000, ge=0, description="Cap on points inserted per gap")

    # --- Aggregation ---
    aggregation_interval: AggregationInterval | None = None
    aggregation: AggregationMode = "sum"


class StackConfig(BaseModel):
    """Configuration for composite (stacked / stream) layouts."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    order: StackOrder = "none"
    offset: StackOffset = "none"


class Margins(BaseModel):
    """Horizontal chart margins in pixels."""

    model_config = ConfigDict(frozen=True)

    left: int = 60
    right: int = 20


class AxisConfig(BaseModel):
    """Configuration for time-axis tick density."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_tick_spacing: int = Field(default=80, gt=0, description="Minimum pixels between ticks")
    max_ticks: int = Field(default=8, ge=2)
