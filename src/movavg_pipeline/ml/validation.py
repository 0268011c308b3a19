"""
Request validation.

Everything that can make a moving average request invalid is checked here,
once, before a single bucket is read. Any violation raises
``ConfigurationError`` and the whole request is rejected.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from movavg_pipeline.errors import ConfigurationError
from movavg_pipeline.schemas.buckets import COUNT_PATH
from movavg_pipeline.schemas.config import PipelineConfig

logger = logging.getLogger(__name__)


def _describe(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error["loc"]) or "config"
    return f"[{location}] {error['msg']} (value supplied: {error.get('input')!r})"


def build_config(raw: PipelineConfig | Mapping[str, Any]) -> PipelineConfig:
    """
    Build an immutable pipeline configuration.

    Args:
        raw: An existing config (returned as-is) or a mapping of options.

    Returns:
        The validated configuration.

    Raises:
        ConfigurationError: Listing every invalid option.
    """
    if isinstance(raw, PipelineConfig):
        return raw
    try:
        return PipelineConfig.model_validate(dict(raw))
    except ValidationError as exc:
        problems = [_describe(error) for error in exc.errors()]
        name = raw.get("name", "<unnamed>")
        logger.warning("Rejected moving average config [%s]: %s", name, "; ".join(problems))
        raise ConfigurationError(
            f"invalid moving average config [{name}]: " + "; ".join(problems),
            problems,
        ) from exc


def validate_parent(parent: Any) -> None:
    """Reject parents that cannot produce an ordered, gap-aware bucket sequence."""
    if not getattr(parent, "produces_sequential_buckets", False):
        name = getattr(parent, "name", "<unnamed>")
        logger.warning("Rejected parent aggregation [%s] of type %s", name, type(parent).__name__)
        raise ConfigurationError(
            f"moving average must be attached to an aggregation with ordered, evenly spaced "
            f"buckets; [{name}] ({type(parent).__name__}) does not provide them"
        )


def validate_request(
    parent: Any,
    configs: Iterable[PipelineConfig | Mapping[str, Any]],
) -> list[PipelineConfig]:
    """
    Validate a parent aggregation together with the pipelines attached to it.

    Returns:
        The built configurations, in the order given.
    """
    validate_parent(parent)
    pipelines = [build_config(raw) for raw in configs]

    metrics = list(getattr(parent, "metrics", []) or [])
    problems: list[str] = []
    seen: set[str] = set()
    for config in pipelines:
        if config.name in seen:
            problems.append(f"[{config.name}] output name is used by more than one pipeline")
        seen.add(config.name)
        if config.name in metrics or config.name == COUNT_PATH:
            problems.append(f"[{config.name}] output name collides with an existing field")
        # Paths are only checkable when the parent knows its sub-aggregations.
        if metrics and config.buckets_path != COUNT_PATH and config.buckets_path not in metrics:
            problems.append(
                f"[{config.name}] buckets_path [{config.buckets_path}] does not match "
                f"any of {metrics} or {COUNT_PATH}"
            )
    if problems:
        logger.warning("Rejected moving average request: %s", "; ".join(problems))
        raise ConfigurationError("; ".join(problems), problems)
    return pipelines
