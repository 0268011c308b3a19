"""
pandas adapters.

Converts between tabular bucket data and the pipeline's bucket models:
- ``histogram_from_frame``: one row per bucket (key, doc_count, metric columns)
- ``buckets_to_frame``: flattens output buckets for display or export
- ``parse_interval``: numeric or duration-string key spacing

Example:
    >>> frame = pd.DataFrame({"key": [0, 5], "doc_count": [3, 0], "avg": [1.5, None]})
    >>> histogram = histogram_from_frame(frame, interval=5)
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta

import pandas as pd

from movavg_pipeline.schemas.buckets import Bucket, HistogramAggregation, OutputBucket

KEY_COLUMN = "key"
COUNT_COLUMN = "doc_count"
SYNTHETIC_COLUMN = "synthetic"


def parse_interval(value: str | int | float | timedelta) -> int | float | timedelta:
    """
    Parse a bucket interval.

    Numbers (or numeric strings) are returned as int when integral, else
    float. Anything else is read as a pandas duration such as ``"1h"``.
    """
    if isinstance(value, (int, float, timedelta)):
        return value
    text = value.strip()
    try:
        number = float(text)
    except ValueError:
        return pd.Timedelta(text).to_pytimedelta()
    return int(number) if number.is_integer() else number


def histogram_from_frame(
    frame: pd.DataFrame,
    interval: str | int | float | timedelta,
    name: str = "histogram",
    key_column: str = KEY_COLUMN,
    count_column: str = COUNT_COLUMN,
) -> HistogramAggregation:
    """
    Build a histogram from a frame with one row per bucket.

    Args:
        frame: Bucket rows; every column other than the key and count columns
            is read as a sub-aggregation value. NaN means not computable.
        interval: Fixed spacing between consecutive keys.
        name: Histogram name.
        key_column: Column holding bucket keys (numeric or datetime).
        count_column: Column holding document counts.

    Returns:
        HistogramAggregation with buckets sorted by key.
    """
    missing = {key_column, count_column} - set(frame.columns)
    if missing:
        raise ValueError(f"missing columns in bucket frame: {sorted(missing)}")

    spacing = parse_interval(interval)
    metric_columns = [col for col in frame.columns if col not in {key_column, count_column}]
    ordered = frame.sort_values(key_column).reset_index(drop=True)
    is_datetime = pd.api.types.is_datetime64_any_dtype(ordered[key_column])

    buckets: list[Bucket] = []
    for row in ordered.to_dict(orient="records"):
        key = pd.Timestamp(row[key_column]).to_pydatetime() if is_datetime else row[key_column]
        metrics = {
            col: None if pd.isna(row[col]) else float(row[col]) for col in metric_columns
        }
        buckets.append(Bucket(key=key, doc_count=int(row[count_column]), metrics=metrics))

    return HistogramAggregation(
        name=name,
        interval=spacing,
        buckets=buckets,
        metrics=[str(col) for col in metric_columns],
    )


def buckets_to_frame(buckets: Iterable[OutputBucket]) -> pd.DataFrame:
    """Flatten output buckets; absent values become NaN."""
    rows = [
        {
            KEY_COLUMN: bucket.key,
            COUNT_COLUMN: bucket.doc_count,
            SYNTHETIC_COLUMN: bucket.synthetic,
            **bucket.values,
        }
        for bucket in buckets
    ]
    if not rows:
        return pd.DataFrame(columns=[KEY_COLUMN, COUNT_COLUMN, SYNTHETIC_COLUMN])
    return pd.DataFrame(rows)
