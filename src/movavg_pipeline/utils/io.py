from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pandas as pd


def ensure_directory(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_csv(input_path: Path, parse_dates: list[str] | None = None) -> pd.DataFrame:
    return pd.read_csv(input_path, parse_dates=parse_dates)


def save_csv(df: pd.DataFrame, output_path: Path) -> Path:
    ensure_directory(output_path.parent)
    df.to_csv(output_path, index=False)
    return output_path


def save_json(payload: Any, output_path: Path) -> Path:
    ensure_directory(output_path.parent)
    output_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    return output_path
