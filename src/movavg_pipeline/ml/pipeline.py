"""
Moving average pipeline orchestration.

A ``PipelineRunner`` drives one (model, buckets_path) pipeline over an
ordered bucket sequence:
- resolve gaps per the configured policy
- admit the value into its sliding window
- ask the model for the current estimate
- after the last real bucket, ask the model for the configured forecasts

``reduce_histogram`` attaches any number of independent pipelines to a
histogram and returns the enriched buckets, including synthetic forecast
buckets appended after the real ones.

Example:
    >>> config = build_config({"name": "avg", "buckets_path": "_count", "predict": 3})
    >>> output = PipelineRunner(config).run(histogram.buckets)
    >>> output.predictions
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from movavg_pipeline.ml.gaps import resolve_bucket_value
from movavg_pipeline.ml.validation import validate_request
from movavg_pipeline.ml.window import SlidingWindow
from movavg_pipeline.schemas.buckets import Bucket, HistogramAggregation, OutputBucket
from movavg_pipeline.schemas.config import PipelineConfig

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    AWAITING_BUCKETS = "awaiting_buckets"
    STREAMING = "streaming"
    PREDICTING = "predicting"
    DONE = "done"


@dataclass(frozen=True)
class PipelineOutput:
    name: str
    values: list[float | None] = field(default_factory=list)
    predictions: list[float] = field(default_factory=list)


class PipelineRunner:
    """
    Single-use runner for one pipeline.

    Attributes:
        config: The immutable pipeline configuration.
        window: Sliding window owned exclusively by this runner.
        state: Current lifecycle state.
    """

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config
        self.window = SlidingWindow(config.window)
        self.state = PipelineState.AWAITING_BUCKETS
        self._bucket_count = 0

    def stream(self, buckets: Iterable[Bucket]) -> Iterator[float | None]:
        """Yield one estimate per bucket; None where the value is absent."""
        if self.state is not PipelineState.AWAITING_BUCKETS:
            raise RuntimeError(f"pipeline [{self.config.name}] has already consumed its buckets")
        self.state = PipelineState.STREAMING
        model = self.config.model

        for bucket in buckets:
            self._bucket_count += 1
            value = resolve_bucket_value(bucket, self.config.buckets_path, self.config.gap_policy)
            if value is None:
                yield None
                continue
            self.window.offer(value)
            yield model.compute(self.window.snapshot())

        if self.config.predict and self._bucket_count:
            self.state = PipelineState.PREDICTING
        else:
            self.state = PipelineState.DONE
        logger.debug(
            "Pipeline [%s] streamed %d buckets, window holds %d",
            self.config.name,
            self._bucket_count,
            self.window.size(),
        )

    def forecast(self) -> list[float]:
        """Return the configured number of forecasts, or [] when none apply."""
        if self.state in (PipelineState.AWAITING_BUCKETS, PipelineState.STREAMING):
            raise RuntimeError(f"pipeline [{self.config.name}] has not finished streaming")
        if self.state is PipelineState.DONE:
            return []
        steps = self.config.predict or 0
        predictions = self.config.model.predict(self.window.snapshot(), steps)
        self.state = PipelineState.DONE
        logger.debug("Pipeline [%s] produced %d forecasts", self.config.name, len(predictions))
        return predictions

    def run(self, buckets: Iterable[Bucket]) -> PipelineOutput:
        values = list(self.stream(buckets))
        return PipelineOutput(name=self.config.name, values=values, predictions=self.forecast())


def reduce_histogram(
    parent: HistogramAggregation,
    configs: Iterable[PipelineConfig | Mapping[str, Any]],
) -> list[OutputBucket]:
    """
    Run every pipeline over the parent's buckets and merge their outputs.

    Args:
        parent: Fully merged histogram; its buckets are read in key order.
        configs: Pipeline configurations (or raw option mappings).

    Returns:
        One output bucket per real bucket, followed by synthetic forecast
        buckets. Synthetic bucket ``j`` holds the outputs of every pipeline
        with ``predict > j`` and no sub-aggregation values.

    Raises:
        ConfigurationError: If the parent or any configuration is invalid.
    """
    pipelines = validate_request(parent, configs)
    outputs = [PipelineRunner(config).run(parent.buckets) for config in pipelines]

    result: list[OutputBucket] = []
    for position, bucket in enumerate(parent.buckets):
        values: dict[str, float] = {}
        for metric_name in bucket.metrics:
            metric_value = bucket.metric(metric_name)
            if metric_value is not None:
                values[metric_name] = metric_value
        for output in outputs:
            estimate = output.values[position]
            if estimate is not None:
                values[output.name] = estimate
        result.append(OutputBucket(key=bucket.key, doc_count=bucket.doc_count, values=values))

    if not parent.buckets:
        return result

    horizon = max((len(output.predictions) for output in outputs), default=0)
    last_key = parent.buckets[-1].key
    for step in range(1, horizon + 1):
        predicted = {
            output.name: output.predictions[step - 1]
            for output in outputs
            if len(output.predictions) >= step
        }
        result.append(
            OutputBucket(
                key=parent.key_after(last_key, step),
                doc_count=0,
                values=predicted,
                synthetic=True,
            )
        )
    logger.info(
        "Reduced histogram [%s]: %d buckets, %d pipelines, %d forecast buckets",
        parent.name,
        len(parent.buckets),
        len(outputs),
        horizon,
    )
    return result
