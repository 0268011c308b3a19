import math

from movavg_pipeline.ml.gaps import GapPolicy, resolve_bucket_value, resolve_gap
from movavg_pipeline.schemas.buckets import Bucket


def test_bucket_with_documents_uses_metric_value() -> None:
    assert resolve_gap(3, 4.5, GapPolicy.SKIP) == 4.5
    assert resolve_gap(3, 4.5, GapPolicy.INSERT_ZEROS) == 4.5


def test_empty_bucket_is_skipped() -> None:
    assert resolve_gap(0, None, GapPolicy.SKIP) is None


def test_empty_bucket_inserts_zero() -> None:
    assert resolve_gap(0, None, GapPolicy.INSERT_ZEROS) == 0.0


def test_missing_metric_is_treated_as_gap() -> None:
    assert resolve_gap(2, None, GapPolicy.SKIP) is None
    assert resolve_gap(2, math.nan, GapPolicy.SKIP) is None
    assert resolve_gap(2, math.nan, GapPolicy.INSERT_ZEROS) == 0.0


def test_count_path_never_gaps() -> None:
    empty = Bucket(key=0, doc_count=0)
    assert resolve_bucket_value(empty, "_count", GapPolicy.SKIP) == 0.0
    full = Bucket(key=1, doc_count=7)
    assert resolve_bucket_value(full, "_count", GapPolicy.SKIP) == 7.0


def test_metric_path_reads_named_metric() -> None:
    bucket = Bucket(key=0, doc_count=2, metrics={"avg": 3.0, "max": 5.0})
    assert resolve_bucket_value(bucket, "max", GapPolicy.SKIP) == 5.0
    assert resolve_bucket_value(bucket, "min", GapPolicy.SKIP) is None
    assert resolve_bucket_value(bucket, "min", GapPolicy.INSERT_ZEROS) == 0.0
