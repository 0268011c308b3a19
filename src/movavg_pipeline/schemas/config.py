from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator, model_validator

from movavg_pipeline.ml.gaps import GapPolicy
from movavg_pipeline.ml.models import MovAvgModelSpec, SimpleModel

DEFAULT_WINDOW = 5

PositiveCount = Annotated[StrictInt, Field(gt=0)]


class PipelineConfig(BaseModel):
    """
    Immutable configuration of one moving average pipeline.

    ``model`` accepts a bare model name (``"ewma"``) or a mapping with a
    ``type`` key. A ``settings`` mapping given next to the model is merged
    into the model parameters.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    buckets_path: str = Field(min_length=1)
    window: PositiveCount = DEFAULT_WINDOW
    gap_policy: GapPolicy = GapPolicy.SKIP
    predict: PositiveCount | None = None
    model: MovAvgModelSpec = Field(default_factory=SimpleModel)

    @model_validator(mode="before")
    @classmethod
    def merge_model_settings(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "settings" not in data:
            return data
        data = dict(data)
        settings = data.pop("settings") or {}
        if not isinstance(settings, Mapping):
            raise ValueError(f"settings must be a mapping, got {type(settings).__name__}")
        model = data.get("model", "simple")
        if isinstance(model, BaseModel):
            model = model.model_dump()
        elif isinstance(model, str):
            model = {"type": model.strip().lower()}
        elif not isinstance(model, Mapping):
            raise ValueError(f"model must be a name or a mapping, got {type(model).__name__}")
        data["model"] = {**model, **settings}
        return data

    @field_validator("model", mode="before")
    @classmethod
    def model_from_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"type": value.strip().lower()}
        return value

    @field_validator("gap_policy", mode="before")
    @classmethod
    def normalize_gap_policy(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value
