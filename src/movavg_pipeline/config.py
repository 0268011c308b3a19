"""
Application configuration using Pydantic Settings.

This module provides typed configuration classes that can be loaded
from environment variables and .env files.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineDefaults(BaseModel):
    """Defaults applied by the CLI when an option is not given."""

    window: PositiveInt = 5
    model: Literal["simple", "linear", "ewma", "holt", "holt_winters"] = "simple"
    gap_policy: Literal["skip", "insert_zeros"] = "skip"
    predict: PositiveInt | None = None


class PathsSettings(BaseModel):
    """Configuration for file paths."""

    project_root: Path = Path(".")
    output_dir: Path = Path("artifacts/reports")


class AppSettings(BaseSettings):
    """Main application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Literal["dev", "test", "prod"] = "dev"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    defaults: PipelineDefaults = PipelineDefaults()
    paths: PathsSettings = PathsSettings()

    def resolved_path(self, path: Path) -> Path:
        """Resolve a path relative to project root."""
        if path.is_absolute():
            return path
        return (self.paths.project_root / path).resolve()

    def output_path(self, path: Path) -> Path:
        """Resolve a report path; relative paths land under ``paths.output_dir``."""
        if path.is_absolute():
            return path
        return self.resolved_path(self.paths.output_dir / path)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()
