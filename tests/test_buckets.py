from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from movavg_pipeline.schemas.buckets import (
    Bucket,
    HistogramAggregation,
    OutputBucket,
    RangeBucket,
)


def test_bucket_metric_lookup() -> None:
    bucket = Bucket(key=0, doc_count=2, metrics={"avg": 1.5, "max": float("nan"), "min": None})
    assert bucket.metric("avg") == 1.5
    assert bucket.metric("max") is None
    assert bucket.metric("min") is None
    assert bucket.metric("sum") is None


def test_bucket_rejects_negative_doc_count() -> None:
    with pytest.raises(ValidationError):
        Bucket(key=0, doc_count=-1)


@pytest.mark.parametrize("keys", [[0, 10, 5], [0, 5, 5]])
def test_histogram_requires_strictly_ascending_keys(keys: list[int]) -> None:
    with pytest.raises(ValidationError):
        HistogramAggregation(interval=5, buckets=[Bucket(key=key) for key in keys])


@pytest.mark.parametrize("interval", [0, -5, timedelta(0)])
def test_histogram_requires_positive_interval(interval) -> None:
    with pytest.raises(ValidationError):
        HistogramAggregation(interval=interval)


def test_histogram_infers_metrics_in_first_seen_order() -> None:
    histogram = HistogramAggregation(
        interval=1,
        buckets=[
            Bucket(key=0, doc_count=1, metrics={"max": 3.0}),
            Bucket(key=1, doc_count=1, metrics={"avg": 2.0, "max": 4.0}),
        ],
    )
    assert histogram.metrics == ["max", "avg"]


def test_explicit_metrics_are_kept() -> None:
    histogram = HistogramAggregation(interval=1, metrics=["avg"])
    assert histogram.metrics == ["avg"]
    assert histogram.buckets == []


def test_key_after_numeric_and_datetime() -> None:
    numeric = HistogramAggregation(interval=5)
    assert numeric.key_after(-5, 3) == 10

    daily = HistogramAggregation(interval=timedelta(days=1))
    assert daily.key_after(datetime(2024, 2, 28), 2) == datetime(2024, 3, 1)


def test_range_bucket_accepts_from_alias() -> None:
    bucket = RangeBucket(key="0-10", **{"from": 0.0}, to=10.0, doc_count=4)
    assert bucket.from_ == 0.0
    assert RangeBucket(key="10-*", from_=10.0).to is None


def test_output_bucket_defaults() -> None:
    bucket = OutputBucket(key=15)
    assert bucket.values == {}
    assert bucket.doc_count == 0
    assert not bucket.synthetic


@pytest.mark.parametrize(
    ("interval", "key"),
    [
        (1, datetime(2024, 1, 1)),
        (2.5, datetime(2024, 1, 1)),
        (timedelta(hours=1), 0),
        (timedelta(hours=1), 1.5),
    ],
)
def test_histogram_interval_must_fit_key_type(interval, key) -> None:
    with pytest.raises(ValidationError, match="does not fit bucket key"):
        HistogramAggregation(interval=interval, buckets=[Bucket(key=key, doc_count=1)])


def test_histogram_accepts_matching_interval_types() -> None:
    HistogramAggregation(interval=2.5, buckets=[Bucket(key=0), Bucket(key=2.5)])
    HistogramAggregation(interval=timedelta(hours=1), buckets=[Bucket(key=datetime(2024, 1, 1))])
