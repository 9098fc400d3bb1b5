"""
DataFrame Adapter - Converts between pandas frames and engine value objects.

Frames use the long format ['ds', 'y', 'unique_id'] common to time-series
tooling (one row per observation).
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import pandas as pd

from openchart.core.domain.series import Series, StackedSeries, TimePoint

logger = logging.getLogger(__name__)


def _to_point(raw_date: Any, raw_value: Any, metadata: dict) -> TimePoint | None:
    if raw_date is None or raw_value is None:
        return None
    timestamp = pd.to_datetime(raw_date, errors="coerce", utc=True)
    value = pd.to_numeric(raw_value, errors="coerce")
    if pd.isna(timestamp) or pd.isna(value):
        return None
    return TimePoint(timestamp=timestamp.to_pydatetime(), value=float(value), metadata=metadata)


def series_from_dataframe(
    df: pd.DataFrame,
    time_col: str = "ds",
    value_col: str = "y",
    id_col: str = "unique_id",
    label_col: str | None = None,
) -> list[Series]:
    """
    Build one Series per distinct `id_col` value.

    Rows with unparseable timestamps or values are skipped. Series appear in
    order of first occurrence.

    Args:
        df: Long-format frame
        time_col: Timestamp column
        value_col: Value column
        id_col: Series identifier column (a missing column yields one series "series-1")
        label_col: Optional label column (defaults to the id)
    """
    if df.empty:
        return []

    frame = df.copy()
    frame["_ds"] = pd.to_datetime(frame[time_col], errors="coerce", utc=True)
    frame["_y"] = pd.to_numeric(frame[value_col], errors="coerce")
    if id_col not in frame.columns:
        frame[id_col] = "series-1"

    dropped = int(frame["_ds"].isna().sum() + frame["_y"].isna().sum())
    frame = frame.dropna(subset=["_ds", "_y"])
    if dropped:
        logger.warning(f"Skipped {dropped} row value(s) that could not be parsed")

    series = []
    for uid, group in frame.groupby(id_col, sort=False):
        label = str(group[label_col].iloc[0]) if label_col and label_col in group.columns else str(uid)
        points = [
            TimePoint(timestamp=ts.to_pydatetime(), value=float(y))
            for ts, y in zip(group["_ds"], group["_y"])
        ]
        series.append(Series(id=str(uid), label=label, points=points))
    return series


def series_from_records(
    records: Sequence[Mapping[str, Any]],
    date_field: str,
    value_field: str,
    series_field: str | None = None,
    id_field: str | None = None,
    label_field: str | None = None,
) -> list[Series]:
    """
    Build series from plain record dictionaries (e.g. parsed JSON rows).

    Without `series_field` every record goes into a single series with id
    "series-1" and label "Data Series". Each point keeps a copy of its record
    as metadata; records with an unparseable date or value are skipped.
    """
    if not records:
        return []

    if series_field is None:
        points = [
            point
            for record in records
            if (point := _to_point(record.get(date_field), record.get(value_field), dict(record))) is not None
        ]
        return [Series(id="series-1", label="Data Series", points=points)]

    grouped: dict[Any, dict[str, Any]] = {}
    for record in records:
        key = record.get(series_field)
        if key not in grouped:
            grouped[key] = {
                "id": str(record.get(id_field) or key) if id_field else str(key),
                "label": str(record.get(label_field) or key) if label_field else str(key),
                "points": [],
            }
        point = _to_point(record.get(date_field), record.get(value_field), dict(record))
        if point is not None:
            grouped[key]["points"].append(point)

    return [Series(id=g["id"], label=g["label"], points=g["points"]) for g in grouped.values()]


def series_to_dataframe(series_list: Iterable[Series]) -> pd.DataFrame:
    """Long frame with columns ['ds', 'y', 'unique_id']."""
    rows = [
        {"ds": p.timestamp, "y": p.value, "unique_id": s.id}
        for s in series_list
        for p in s.points
    ]
    return pd.DataFrame(rows, columns=["ds", "y", "unique_id"])


def stacked_to_dataframe(stacked: Iterable[StackedSeries]) -> pd.DataFrame:
    """Long frame with columns ['ds', 'unique_id', 'value', 'y0', 'y1']."""
    rows = [
        {"ds": p.timestamp, "unique_id": layer.series_id, "value": p.value, "y0": p.y0, "y1": p.y1}
        for layer in stacked
        for p in layer.points
    ]
    return pd.DataFrame(rows, columns=["ds", "unique_id", "value", "y0", "y1"])
