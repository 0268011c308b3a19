from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

from movavg_pipeline.config import get_settings
from movavg_pipeline.data.frames import KEY_COLUMN, buckets_to_frame, histogram_from_frame
from movavg_pipeline.errors import ConfigurationError
from movavg_pipeline.logging_config import get_logger, setup_logging
from movavg_pipeline.ml.models import ModelRegistry
from movavg_pipeline.ml.pipeline import reduce_histogram
from movavg_pipeline.ml.validation import build_config
from movavg_pipeline.utils.io import load_csv, save_csv, save_json

logger = get_logger(__name__)

app = typer.Typer(help="Moving average pipeline over histogram buckets")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v")) -> None:
    settings = get_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        environment=settings.environment,
    )


def _model_params(**params: Any) -> dict[str, Any]:
    return {name: value for name, value in params.items() if value is not None}


@app.command("run")
def run_pipeline(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False),
    buckets_path: str = typer.Option(..., "--buckets-path"),
    interval: str = typer.Option("1", help="Key spacing: a number or a duration like 1h"),
    name: str = typer.Option("movavg", help="Output field name"),
    window: Optional[int] = typer.Option(None),
    model: Optional[str] = typer.Option(None),
    alpha: Optional[float] = typer.Option(None),
    beta: Optional[float] = typer.Option(None),
    gamma: Optional[float] = typer.Option(None),
    period: Optional[int] = typer.Option(None),
    seasonality: Optional[str] = typer.Option(None, help="additive or multiplicative"),
    gap_policy: Optional[str] = typer.Option(None, "--gap-policy"),
    predict: Optional[int] = typer.Option(None),
    datetime_keys: bool = typer.Option(False, "--datetime-keys"),
    output: Optional[Path] = typer.Option(None, help="Write .csv or .json instead of printing"),
) -> None:
    settings = get_settings()
    defaults = settings.defaults
    raw_config: dict[str, Any] = {
        "name": name,
        "buckets_path": buckets_path,
        "window": window if window is not None else defaults.window,
        "gap_policy": gap_policy or defaults.gap_policy,
        "model": {
            "type": model or defaults.model,
            **_model_params(
                alpha=alpha,
                beta=beta,
                gamma=gamma,
                period=period,
                seasonality_type=seasonality,
            ),
        },
    }
    predict = predict if predict is not None else defaults.predict
    if predict is not None:
        raw_config["predict"] = predict

    frame = load_csv(input_path, parse_dates=[KEY_COLUMN] if datetime_keys else None)
    try:
        config = build_config(raw_config)
        histogram = histogram_from_frame(frame, interval=interval)
        buckets = reduce_histogram(histogram, [config])
    except (ConfigurationError, ValueError) as exc:
        logger.error("Pipeline rejected: %s", exc)
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    result = buckets_to_frame(buckets)
    if output is None:
        typer.echo(result.to_string(index=False))
        return
    target = settings.output_path(output)
    if target.suffix == ".json":
        save_json(
            [bucket.model_dump(mode="json") for bucket in buckets],
            target,
        )
    else:
        save_csv(result, target)
    typer.echo(f"Wrote {len(buckets)} buckets to {target}")


@app.command("models")
def list_models() -> None:
    typer.echo(json.dumps(ModelRegistry.list_models(), indent=2))


if __name__ == "__main__":
    app()
