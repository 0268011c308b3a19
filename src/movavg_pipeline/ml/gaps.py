from __future__ import annotations

import math
from enum import Enum

from movavg_pipeline.schemas.buckets import COUNT_PATH, Bucket


class GapPolicy(str, Enum):
    """How a bucket without data is fed to the model."""

    SKIP = "skip"
    INSERT_ZEROS = "insert_zeros"


def resolve_gap(doc_count: int, value: float | None, policy: GapPolicy) -> float | None:
    """
    Return the value to admit into the window, or None when the bucket is skipped.

    A bucket that has documents but no computable metric is treated as a gap
    as well.
    """
    if doc_count > 0 and value is not None and not math.isnan(value):
        return value
    if policy is GapPolicy.INSERT_ZEROS:
        return 0.0
    return None


def resolve_bucket_value(bucket: Bucket, buckets_path: str, policy: GapPolicy) -> float | None:
    # Document counts are always defined, an empty bucket simply counts zero.
    if buckets_path == COUNT_PATH:
        return float(bucket.doc_count)
    return resolve_gap(bucket.doc_count, bucket.metric(buckets_path), policy)
