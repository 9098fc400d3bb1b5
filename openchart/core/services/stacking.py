"""
Stacking Engine - Baseline/top layout for stacked areas and stream graphs.

The layout is built in four steps:
1. Union of all timestamps; a series missing a timestamp contributes 0
2. Ordering of series into stack positions
3. Baseline accumulation in stack order (y0 = sum of prior layers)
4. Offset adjustment per timestamp (none, expand, silhouette, wiggle)

Values are looked up by timestamp over the sorted union, so inputs do not
need to be pre-sorted. The engine never mutates its inputs.
"""

import logging
import math
from collections.abc import Sequence

import numpy as np

from openchart.common.timeutils import to_millis
from openchart.core.domain.config import StackOffset, StackOrder
from openchart.core.domain.result import (
    AreaBetweenPoint,
    DateTotal,
    FlowVelocity,
    LayerSummary,
    StackStatistics,
    StreamLayerSummary,
    StreamStatistics,
)
from openchart.core.domain.series import Series, StackedPoint, StackedSeries

logger = logging.getLogger(__name__)

ORDERS: tuple[str, ...] = ("none", "ascending", "descending", "inside-out", "reverse")
OFFSETS: tuple[str, ...] = ("none", "expand", "silhouette", "wiggle")


def _value_matrix(series_list: Sequence[Series]) -> tuple[list, np.ndarray]:
    """
    Align all series on the sorted union of their timestamps.

    Returns:
        (axis, matrix) where axis is the list of datetimes and
        matrix[t, s] is series s's value at axis[t] (0 when missing).
    """
    instants: dict[int, object] = {}
    for series in series_list:
        for point in series.points:
            instants.setdefault(point.timestamp_ms, point.timestamp)

    axis_ms = sorted(instants)
    index = {ms: i for i, ms in enumerate(axis_ms)}
    matrix = np.zeros((len(axis_ms), len(series_list)), dtype=float)

    for col, series in enumerate(series_list):
        seen: set[int] = set()
        for point in series.points:
            ms = point.timestamp_ms
            # First occurrence wins; duplicates are reported by validation
            if ms in seen:
                continue
            seen.add(ms)
            matrix[index[ms], col] = point.value

    return [instants[ms] for ms in axis_ms], matrix


def stack_order(totals: Sequence[float], order: StackOrder = "none") -> list[int]:
    """
    Stack positions (bottom first) as indices into the input series.

    Args:
        totals: Summed value of each series
        order: Ordering strategy

    Returns:
        Permutation of range(len(totals))
    """
    indices = list(range(len(totals)))
    if order == "none":
        return indices
    if order == "reverse":
        return indices[::-1]
    if order == "ascending":
        return sorted(indices, key=lambda i: totals[i])
    if order == "descending":
        return sorted(indices, key=lambda i: totals[i], reverse=True)
    if order == "inside-out":
        # Largest first, then alternate right/left so it ends up central
        positions: list[int] = []
        for rank, i in enumerate(sorted(indices, key=lambda i: totals[i], reverse=True)):
            if rank % 2 == 0:
                positions.append(i)
            else:
                positions.insert(0, i)
        return positions
    raise ValueError(f"Unknown stack order: {order}")


def _wiggle_shift(values: np.ndarray, y0: np.ndarray) -> np.ndarray:
    """Per-timestamp shift that moves the stack towards its weighted center of mass."""
    shift = np.zeros(values.shape[0])
    if values.shape[0] < 3:
        return shift

    for t in range(1, values.shape[0] - 1):
        weights = np.abs(values[t + 1] - values[t - 1])
        total_weight = weights.sum()
        if total_weight <= 0:
            continue
        centers = y0[t] + values[t] / 2
        center_of_mass = float((centers * weights).sum() / total_weight)
        shift[t] = center_of_mass - float(centers.mean())
    return shift


def compute_stack(
    series_list: Sequence[Series],
    order: StackOrder = "none",
    offset: StackOffset = "none",
) -> list[StackedSeries]:
    """
    Compute stacked (y0, y1) pairs for every series at every timestamp.

    Under `expand`, a timestamp whose values sum to 0 has no percentage and
    keeps its raw values and baselines (e.g. 5 and -5 stay 5 and -5).

    Args:
        series_list: Series to stack
        order: none, ascending, descending, inside-out or reverse
        offset: none, expand (percent), silhouette or wiggle

    Returns:
        One StackedSeries per input series, in stack order (bottom first),
        all sharing the same timestamp axis. Empty input returns [].
    """
    if order not in ORDERS:
        raise ValueError(f"Unknown stack order: {order}")
    if offset not in OFFSETS:
        raise ValueError(f"Unknown stack offset: {offset}")
    if not series_list:
        return []

    axis, matrix = _value_matrix(series_list)
    positions = stack_order(matrix.sum(axis=0).tolist(), order)

    # Columns re-arranged into stack order
    values = matrix[:, positions]
    y0 = np.zeros_like(values)
    if values.shape[1] > 1:
        y0[:, 1:] = np.cumsum(values, axis=1)[:, :-1]

    if len(series_list) == 1 and offset != "none":
        # A single layer has nothing to balance against
        logger.debug(f"Single series stack, ignoring offset '{offset}'")
    elif offset == "expand":
        totals = values.sum(axis=1, keepdims=True)
        # Zero-total rows are left unscaled
        nonzero = (totals != 0).ravel()
        values = values.copy()
        values[nonzero] = values[nonzero] / totals[nonzero]
        y0[nonzero] = y0[nonzero] / totals[nonzero]
    elif offset == "silhouette":
        y0 = y0 - values.sum(axis=1, keepdims=True) / 2
    elif offset == "wiggle":
        y0 = y0 + _wiggle_shift(values, y0)[:, np.newaxis]

    y1 = y0 + values

    stacked = []
    for col, source_index in enumerate(positions):
        source = series_list[source_index]
        points = tuple(
            StackedPoint(
                timestamp=axis[t],
                value=float(values[t, col]),
                y0=float(y0[t, col]),
                y1=float(y1[t, col]),
            )
            for t in range(len(axis))
        )
        stacked.append(StackedSeries(
            series_id=source.id,
            label=source.label,
            color=source.color,
            points=points,
        ))

    logger.debug(
        f"Stacked {len(series_list)} series over {len(axis)} timestamps "
        f"(order={order}, offset={offset})"
    )
    return stacked


def create_symmetric_stream(series_list: Sequence[Series], centerline: float = 0.0) -> list[StackedSeries]:
    """Inside-out silhouette stream centred on `centerline`."""
    stream = compute_stack(series_list, order="inside-out", offset="silhouette")
    if centerline == 0:
        return stream
    return [
        layer.with_points(_shifted(p, centerline) for p in layer.points)
        for layer in stream
    ]


def _shifted(point: StackedPoint, delta: float) -> StackedPoint:
    y0 = point.y0 + delta
    return StackedPoint(point.timestamp, point.value, y0, y0 + point.value)


def balance_stream_areas(stacked: Sequence[StackedSeries], smoothing_factor: float = 0.25) -> list[StackedSeries]:
    """
    Smooth interior baselines against their neighbours to soften harsh transitions.

    Each interior y0 becomes prev*f + cur*(1 - 2f) + next*f, computed from the
    unsmoothed neighbours; y1 is recomputed from the new baseline.
    """
    if not 0 <= smoothing_factor <= 0.5:
        raise ValueError("smoothing_factor must be within [0, 0.5]")

    balanced = []
    for layer in stacked:
        points = layer.points
        smoothed = list(points)
        for i in range(1, len(points) - 1):
            prev, curr, nxt = points[i - 1], points[i], points[i + 1]
            y0 = prev.y0 * smoothing_factor + curr.y0 * (1 - 2 * smoothing_factor) + nxt.y0 * smoothing_factor
            smoothed[i] = StackedPoint(curr.timestamp, curr.value, y0, y0 + curr.value)
        balanced.append(layer.with_points(smoothed))
    return balanced


def calculate_flow_velocity(stacked: Sequence[StackedSeries]) -> dict[str, list[FlowVelocity]]:
    """Per-layer value and baseline velocity between consecutive timestamps."""
    velocities: dict[str, list[FlowVelocity]] = {}
    for layer in stacked:
        entries = []
        for prev, curr in zip(layer.points, layer.points[1:]):
            dt = to_millis(curr.timestamp) - to_millis(prev.timestamp)
            if dt <= 0:
                continue
            dv = curr.value - prev.value
            db = curr.y0 - prev.y0
            entries.append(FlowVelocity(
                timestamp=curr.timestamp,
                value_velocity=dv / dt,
                baseline_velocity=db / dt,
                total_velocity=math.hypot(dv, db) / dt,
            ))
        velocities[layer.series_id] = entries
    return velocities


def calculate_area_between(first: Series, second: Series) -> list[AreaBetweenPoint]:
    """
    Band between two series for difference charts, evaluated at `first`'s timestamps.

    Timestamps missing from `second` count as 0.
    """
    other = {p.timestamp_ms: p.value for p in second.points}
    band = []
    for point in first.sorted().points:
        other_value = other.get(point.timestamp_ms, 0.0)
        band.append(AreaBetweenPoint(
            timestamp=point.timestamp,
            upper=max(point.value, other_value),
            lower=min(point.value, other_value),
            difference=point.value - other_value,
        ))
    return band


def validate_stacked_data(
    stacked: Sequence[StackedSeries],
    allow_negative_baseline: bool = False,
    tolerance: float = 1e-9,
) -> list[str]:
    """
    Check a stacked layout for internal consistency.

    Returns:
        Human-readable problems; empty when the layout is consistent.
    """
    if not stacked:
        return ["No stacked data provided"]

    errors = []
    reference = [to_millis(p.timestamp) for p in stacked[0].points]

    for s_idx, layer in enumerate(stacked):
        if len(layer.points) != len(reference):
            errors.append(f"Series {s_idx} has different number of points")

        for p_idx, point in enumerate(layer.points):
            if p_idx < len(reference) and to_millis(point.timestamp) != reference[p_idx]:
                errors.append(f"Series {s_idx} point {p_idx} has mismatched date")
            if not allow_negative_baseline and point.y0 < 0:
                errors.append(f"Series {s_idx} point {p_idx} has negative baseline")
            if point.y1 < point.y0 and point.value >= 0:
                errors.append(f"Series {s_idx} point {p_idx} has y1 < y0")
            if not math.isclose(point.value, point.y1 - point.y0, rel_tol=tolerance, abs_tol=tolerance):
                errors.append(f"Series {s_idx} point {p_idx} value inconsistent with y0/y1")

    return errors


def calculate_stack_statistics(stacked: Sequence[StackedSeries]) -> StackStatistics | None:
    """Totals per timestamp and value summaries per layer; None for an empty layout."""
    if not stacked or not stacked[0].points:
        return None

    values = np.array([[p.value for p in layer.points] for layer in stacked], dtype=float)
    tops = np.array([[p.y1 for p in layer.points] for layer in stacked], dtype=float)
    axis = [p.timestamp for p in stacked[0].points]

    return StackStatistics(
        series_count=len(stacked),
        date_count=len(axis),
        totals_by_date=tuple(
            DateTotal(timestamp=ts, total=float(values[:, t].sum()), max_y=float(tops[:, t].max()))
            for t, ts in enumerate(axis)
        ),
        layers=tuple(
            LayerSummary(
                series_id=layer.series_id,
                sum=float(values[i].sum()),
                avg=float(values[i].mean()),
                min=float(values[i].min()),
                max=float(values[i].max()),
            )
            for i, layer in enumerate(stacked)
        ),
    )


def calculate_stream_statistics(stacked: Sequence[StackedSeries], axis: float = 0.0) -> StreamStatistics | None:
    """
    Bounds, symmetry and volume of a stream layout; None for an empty layout.

    `symmetry_score` measures how far the flow is off-centre relative to `axis`
    (0 for a stream balanced around it, 1 for a stack resting on it).
    """
    if not stacked or not stacked[0].points:
        return None

    values = np.array([[p.value for p in layer.points] for layer in stacked], dtype=float)
    bases = np.array([[p.y0 for p in layer.points] for layer in stacked], dtype=float)
    tops = np.array([[p.y1 for p in layer.points] for layer in stacked], dtype=float)

    min_y = float(bases.min())
    max_y = float(tops.max())
    flow_height = max_y - min_y
    centerline = (max_y + min_y) / 2
    symmetry = (
        abs((max_y - axis) - (axis - min_y)) / flow_height
        if flow_height > 0 else 0.0
    )

    axis = stacked[0].points
    total_volume = float(values.sum())
    return StreamStatistics(
        min_y=min_y,
        max_y=max_y,
        flow_height=flow_height,
        centerline=centerline,
        symmetry_score=symmetry,
        total_volume=total_volume,
        average_volume=total_volume / values.size,
        time_span_ms=to_millis(axis[-1].timestamp) - to_millis(axis[0].timestamp),
        series_count=len(stacked),
        date_count=len(axis),
        layers=tuple(
            StreamLayerSummary(
                series_id=layer.series_id,
                volume=float(values[i].sum()),
                average_value=float(values[i].mean()),
                average_baseline=float(bases[i].mean()),
                max_value=float(values[i].max()),
                min_value=float(values[i].min()),
                variability=float(values[i].std(ddof=1)) if values.shape[1] > 1 else 0.0,
            )
            for i, layer in enumerate(stacked)
        ),
    )
