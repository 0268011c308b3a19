from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from movavg_pipeline.schemas.buckets import Bucket, HistogramAggregation

INTERVAL = 5


def generate_histogram(
    num_buckets: int,
    interval: int = INTERVAL,
    gap_probability: float = 0.2,
    seed: int = 7,
) -> HistogramAggregation:
    """Random histogram where each bucket averages a handful of doc values, with random gaps."""
    rng = np.random.default_rng(seed)
    buckets: list[Bucket] = []
    for position in range(num_buckets):
        key = position * interval
        if rng.random() < gap_probability:
            buckets.append(Bucket(key=key, doc_count=0, metrics={"the_metric": None}))
            continue
        doc_values = rng.uniform(0.0, 100.0, size=int(rng.integers(1, 6)))
        buckets.append(
            Bucket(
                key=key,
                doc_count=len(doc_values),
                metrics={"the_metric": float(np.mean(doc_values))},
            )
        )
    return HistogramAggregation(name="histo", interval=interval, buckets=buckets)


def constant_histogram(num_buckets: int, value: float, start: int = 0) -> HistogramAggregation:
    buckets = [
        Bucket(key=start + position, doc_count=1, metrics={"the_metric": value})
        for position in range(num_buckets)
    ]
    return HistogramAggregation(name="histo", interval=1, buckets=buckets)


def gap_histogram(values: dict[int, float], size: int = 50) -> HistogramAggregation:
    """Histogram over keys 0..size-1 where only ``values`` keys hold documents."""
    buckets = [
        Bucket(key=key, doc_count=1, metrics={"the_metric": values[key]})
        if key in values
        else Bucket(key=key, doc_count=0, metrics={"the_metric": None})
        for key in range(size)
    ]
    return HistogramAggregation(name="histo", interval=1, buckets=buckets)


@pytest.fixture()
def mock_histogram() -> HistogramAggregation:
    return generate_histogram(num_buckets=60)


@pytest.fixture()
def giant_gap_histogram() -> HistogramAggregation:
    return gap_histogram({0: 1.0, 49: 1.0})


@pytest.fixture()
def bucket_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "key": [10, 0, 5, 15],
            "doc_count": [0, 2, 3, 1],
            "the_metric": [None, 4.0, 6.0, 8.0],
        }
    )


@pytest.fixture()
def make_constant_histogram():
    return constant_histogram


@pytest.fixture()
def make_gap_histogram():
    return gap_histogram


@pytest.fixture()
def make_random_histogram():
    return generate_histogram
