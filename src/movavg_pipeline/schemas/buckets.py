"""
Bucket records exchanged with the parent bucketing aggregation.

The parent (a histogram) is an external collaborator: it has already grouped
documents into buckets, computed the per-bucket sub-aggregations and merged
partial results. These models only describe what the pipeline consumes and
what it hands back.
"""
from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator, model_validator

COUNT_PATH = "_count"

BucketKey = int | float | datetime


class Bucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: BucketKey
    doc_count: NonNegativeInt = 0
    metrics: dict[str, float | None] = Field(default_factory=dict)

    def metric(self, name: str) -> float | None:
        """Return a sub-aggregation value, or None when it is missing or NaN."""
        value = self.metrics.get(name)
        if value is None or math.isnan(value):
            return None
        return value


class HistogramAggregation(BaseModel):
    """
    Fully merged histogram whose buckets are spaced exactly ``interval`` apart.

    Empty buckets are materialised (doc_count == 0), which is what makes the
    sequence gap-aware and safe to window over.
    """

    produces_sequential_buckets: ClassVar[bool] = True

    name: str = "histogram"
    interval: int | float | timedelta
    buckets: list[Bucket] = Field(default_factory=list)
    metrics: list[str] = Field(default_factory=list)

    @field_validator("interval")
    @classmethod
    def positive_interval(cls, value: int | float | timedelta) -> int | float | timedelta:
        zero = timedelta(0) if isinstance(value, timedelta) else 0
        if not value > zero:
            raise ValueError("interval must be positive")
        return value

    @model_validator(mode="after")
    def ascending_keys(self) -> HistogramAggregation:
        for previous, current in zip(self.buckets, self.buckets[1:]):
            if not current.key > previous.key:
                raise ValueError(
                    f"bucket keys must be strictly ascending, got {current.key!r} "
                    f"after {previous.key!r}"
                )
        timed = isinstance(self.interval, timedelta)
        for bucket in self.buckets:
            if isinstance(bucket.key, datetime) is not timed:
                expected = "a timedelta" if isinstance(bucket.key, datetime) else "a number"
                raise ValueError(
                    f"interval {self.interval!r} does not fit bucket key {bucket.key!r}; "
                    f"keys of this type need {expected} interval"
                )
        if not self.metrics:
            seen: dict[str, None] = {}
            for bucket in self.buckets:
                seen.update(dict.fromkeys(bucket.metrics))
            self.metrics = list(seen)
        return self

    def key_after(self, key: BucketKey, steps: int) -> BucketKey:
        """Key of the bucket ``steps`` intervals after ``key``."""
        return key + self.interval * steps


class RangeBucket(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str
    from_: float | None = Field(default=None, alias="from")
    to: float | None = None
    doc_count: NonNegativeInt = 0
    metrics: dict[str, float | None] = Field(default_factory=dict)


class RangeAggregation(BaseModel):
    """Buckets over arbitrary, possibly overlapping ranges; no ordering guarantee."""

    produces_sequential_buckets: ClassVar[bool] = False

    name: str = "range"
    buckets: list[RangeBucket] = Field(default_factory=list)
    metrics: list[str] = Field(default_factory=list)


class OutputBucket(BaseModel):
    key: BucketKey
    doc_count: NonNegativeInt = 0
    values: dict[str, float] = Field(default_factory=dict)
    synthetic: bool = False
