"""
Moving average models.

Each model is an immutable parameter struct that knows how to turn the current
window contents into:
- a current-bucket estimate (``compute``), which may be unavailable
- an N-step-ahead forecast (``predict``), which is always fully defined

State (level, trend, seasonal coefficients) is rebuilt from the window on every
call; nothing is carried over between buckets.

Available models:
- simple: arithmetic mean
- linear: recency-weighted mean
- ewma: single exponential smoothing
- holt: double exponential smoothing (level + trend)
- holt_winters: triple exponential smoothing (level + trend + seasonality)
"""
from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from enum import Enum
from typing import Annotated, Any, Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, TypeAdapter

logger = logging.getLogger(__name__)

# ============================================================================
# Constants
# ============================================================================

DEFAULT_ALPHA = 0.3
DEFAULT_BETA = 0.1
DEFAULT_GAMMA = 0.3
DEFAULT_PERIOD = 1

# Shift applied to every value before multiplicative smoothing so that an
# all-zero season does not divide by zero.
MULTIPLICATIVE_PADDING = 0.0000000001

SmoothingFactor = Annotated[float, Field(ge=0.0, le=1.0)]


# ============================================================================
# Type Definitions
# ============================================================================

class ModelType(str, Enum):
    """Supported moving average models."""
    SIMPLE = "simple"
    LINEAR = "linear"
    EWMA = "ewma"
    HOLT = "holt"
    HOLT_WINTERS = "holt_winters"


class SeasonalityType(str, Enum):
    """How the seasonal component combines with level and trend."""
    ADDITIVE = "additive"
    MULTIPLICATIVE = "multiplicative"


class MovAvgModel(BaseModel):
    """Base class; subclasses implement ``_compute`` and ``_predict``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def compute(self, values: Sequence[float]) -> float | None:
        """Estimate for the newest bucket in ``values`` (oldest first)."""
        if not values:
            return None
        return self._compute(values)

    def predict(self, values: Sequence[float], steps: int) -> list[float]:
        """
        Extrapolate ``steps`` values past the newest entry of ``values``.

        Args:
            values: Window contents, oldest first.
            steps: Number of future buckets to produce.

        Returns:
            Exactly ``steps`` floats. NaN is used when ``values`` is empty.
        """
        if steps < 0:
            raise ValueError(f"steps must be non-negative, got {steps}")
        if not values:
            return [math.nan] * steps
        return self._predict(values, steps)

    def _compute(self, values: Sequence[float]) -> float | None:
        raise NotImplementedError

    def _predict(self, values: Sequence[float], steps: int) -> list[float]:
        raise NotImplementedError


# ============================================================================
# Models
# ============================================================================

class SimpleModel(MovAvgModel):
    """Unweighted mean of the window."""

    type: Literal["simple"] = "simple"

    def _compute(self, values: Sequence[float]) -> float:
        total = 0.0
        for value in values:
            total += value
        return total / len(values)

    def _predict(self, values: Sequence[float], steps: int) -> list[float]:
        return [self._compute(values)] * steps


class LinearModel(MovAvgModel):
    """
    Linearly weighted mean: the i-th oldest value gets weight i.

    ``legacy_weight_sum`` reproduces an older implementation whose weight
    accumulator started at 1 instead of 0, which shrinks every estimate by a
    factor of W / (W + 1) where W is the true weight sum.
    """

    type: Literal["linear"] = "linear"
    legacy_weight_sum: bool = False

    def _compute(self, values: Sequence[float]) -> float:
        avg = 0.0
        total_weight = 1 if self.legacy_weight_sum else 0
        for weight, value in enumerate(values, start=1):
            avg += value * weight
            total_weight += weight
        return avg / total_weight

    def _predict(self, values: Sequence[float], steps: int) -> list[float]:
        return [self._compute(values)] * steps


class EwmaModel(MovAvgModel):
    """Exponentially weighted moving average (single exponential smoothing)."""

    type: Literal["ewma"] = "ewma"
    alpha: SmoothingFactor = DEFAULT_ALPHA

    def _compute(self, values: Sequence[float]) -> float:
        level = values[0]
        for value in values[1:]:
            level = self.alpha * value + (1.0 - self.alpha) * level
        return level

    def _predict(self, values: Sequence[float], steps: int) -> list[float]:
        return [self._compute(values)] * steps


class HoltModel(MovAvgModel):
    """Holt's linear trend method (double exponential smoothing)."""

    type: Literal["holt"] = "holt"
    alpha: SmoothingFactor = DEFAULT_ALPHA
    beta: SmoothingFactor = DEFAULT_BETA

    def smooth(self, values: Sequence[float]) -> tuple[float, float]:
        """Return the final (level, trend) pair."""
        level = values[0]
        trend = 0.0
        for value in values[1:]:
            last_level = level
            level = self.alpha * value + (1.0 - self.alpha) * (last_level + trend)
            trend = self.beta * (level - last_level) + (1.0 - self.beta) * trend
        return level, trend

    def _compute(self, values: Sequence[float]) -> float:
        level, _ = self.smooth(values)
        return level

    def _predict(self, values: Sequence[float], steps: int) -> list[float]:
        level, trend = self.smooth(values)
        return [level + k * trend for k in range(1, steps + 1)]


class HoltWintersModel(MovAvgModel):
    """
    Holt-Winters triple exponential smoothing.

    Needs at least two full seasons (``2 * period`` values) in the window;
    below that ``compute`` is unavailable and ``predict`` falls back to Holt's
    linear trend with the same alpha and beta.
    """

    type: Literal["holt_winters"] = "holt_winters"
    alpha: SmoothingFactor = DEFAULT_ALPHA
    beta: SmoothingFactor = DEFAULT_BETA
    gamma: SmoothingFactor = DEFAULT_GAMMA
    period: PositiveInt = DEFAULT_PERIOD
    seasonality_type: SeasonalityType = SeasonalityType.ADDITIVE
    pad: bool = True

    @property
    def multiplicative(self) -> bool:
        return self.seasonality_type is SeasonalityType.MULTIPLICATIVE

    @property
    def minimum_values(self) -> int:
        return 2 * self.period

    def smooth(self, values: Sequence[float]) -> tuple[float, float, np.ndarray]:
        """
        Run the seasonal recurrence over ``values``.

        Returns:
            Final level, final trend and the seasonal coefficients (one per
            window position; only the first ``period`` are initialised from
            the data, the rest are filled by the recurrence).
        """
        period = self.period
        padding = MULTIPLICATIVE_PADDING if self.multiplicative and self.pad else 0.0
        vs = np.asarray(values, dtype=np.float64) + padding
        seasonal = np.zeros(len(vs), dtype=np.float64)

        # IEEE semantics: a zero seasonal coefficient yields inf/NaN, not an exception.
        with np.errstate(all="ignore"):
            # Level starts at the mean of the first season, trend at the mean
            # half-difference between the first two seasons.
            level = np.float64(0.0)
            trend = np.float64(0.0)
            for i in range(period):
                level += vs[i]
                trend += (vs[i] - vs[i + period]) / 2
            level /= period
            trend /= period

            if level != 0.0:
                seasonal[:period] = vs[:period] / level

            for i in range(period, len(vs)):
                last_level = level
                last_trend = trend
                if self.multiplicative:
                    level = self.alpha * (vs[i] / seasonal[i - period]) + (
                        1.0 - self.alpha
                    ) * (last_level + last_trend)
                else:
                    level = self.alpha * (vs[i] - seasonal[i - period]) + (
                        1.0 - self.alpha
                    ) * (last_level + last_trend)

                trend = self.beta * (level - last_level) + (1.0 - self.beta) * last_trend

                if self.multiplicative:
                    seasonal[i] = self.gamma * (vs[i] / (last_level + last_trend)) + (
                        1.0 - self.gamma
                    ) * seasonal[i - period]
                else:
                    seasonal[i] = self.gamma * (vs[i] - (last_level + last_trend)) + (
                        1.0 - self.gamma
                    ) * seasonal[i - period]

        return float(level), float(trend), seasonal

    def _compute(self, values: Sequence[float]) -> float | None:
        if len(values) < self.minimum_values:
            logger.debug(
                "holt_winters needs %d values, window holds %d", self.minimum_values, len(values)
            )
            return None
        level, trend, seasonal = self.smooth(values)
        n = len(values)
        coefficient = seasonal[(n - 1 - self.period) % n]
        if self.multiplicative:
            # The zero-weighted trend term is kept so that an inf/NaN season or
            # trend surfaces as NaN instead of a plausible-looking level.
            with np.errstate(all="ignore"):
                return float(level + (0.0 * trend) * coefficient)
        return float(level + coefficient)

    def _predict(self, values: Sequence[float], steps: int) -> list[float]:
        if len(values) < self.minimum_values:
            return HoltModel(alpha=self.alpha, beta=self.beta).predict(values, steps)
        level, trend, seasonal = self.smooth(values)
        last_season = len(values) - self.period
        forecasts: list[float] = []
        with np.errstate(all="ignore"):
            for k in range(1, steps + 1):
                coefficient = seasonal[last_season + (k - 1) % self.period]
                base = level + k * trend
                if self.multiplicative:
                    forecasts.append(float(base * coefficient))
                else:
                    forecasts.append(float(base + coefficient))
        return forecasts


MovAvgModelSpec = Annotated[
    SimpleModel | LinearModel | EwmaModel | HoltModel | HoltWintersModel,
    Field(discriminator="type"),
]

_MODEL_ADAPTER: TypeAdapter[Any] = TypeAdapter(MovAvgModelSpec)


# ============================================================================
# Registry
# ============================================================================

class ModelRegistry:
    """Lookup of model classes by type, with descriptions for the CLI."""

    _MODELS: dict[ModelType, tuple[type[MovAvgModel], str]] = {
        ModelType.SIMPLE: (SimpleModel, "Arithmetic mean of the window"),
        ModelType.LINEAR: (LinearModel, "Mean weighted linearly by recency"),
        ModelType.EWMA: (EwmaModel, "Single exponential smoothing"),
        ModelType.HOLT: (HoltModel, "Double exponential smoothing with linear trend"),
        ModelType.HOLT_WINTERS: (
            HoltWintersModel,
            "Triple exponential smoothing with trend and seasonality",
        ),
    }

    @classmethod
    def get(cls, model_type: ModelType | str) -> type[MovAvgModel]:
        return cls._MODELS[ModelType(model_type)][0]

    @classmethod
    def list_models(cls) -> list[dict[str, Any]]:
        listing = []
        for model_type, (model_cls, description) in cls._MODELS.items():
            parameters = {
                name: field.default.value if isinstance(field.default, Enum) else field.default
                for name, field in model_cls.model_fields.items()
                if name != "type"
            }
            listing.append(
                {
                    "name": model_type.value,
                    "description": description,
                    "parameters": parameters,
                }
            )
        return listing


def build_model(model_type: ModelType | str, **params: Any) -> MovAvgModel:
    """
    Construct a model from its type name and parameters.

    Raises:
        pydantic.ValidationError: If the type is unknown or a parameter is out of range.
    """
    name = model_type.value if isinstance(model_type, ModelType) else model_type
    return _MODEL_ADAPTER.validate_python({"type": name, **params})
