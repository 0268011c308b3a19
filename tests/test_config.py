import io
import json
import logging
from pathlib import Path

import pytest

from movavg_pipeline.config import AppSettings, get_settings
from movavg_pipeline.logging_config import PACKAGE_LOGGER, get_logger, setup_logging


def test_settings_resolves_relative_path(tmp_path: Path) -> None:
    settings = AppSettings(paths={"project_root": tmp_path})
    resolved = settings.resolved_path(Path("reports/out.csv"))
    assert resolved == (tmp_path / "reports/out.csv").resolve()


def test_settings_keeps_absolute_path(tmp_path: Path) -> None:
    assert AppSettings().resolved_path(tmp_path) == tmp_path


def test_output_path_lands_under_output_dir(tmp_path: Path) -> None:
    settings = AppSettings(paths={"project_root": tmp_path, "output_dir": "reports"})
    assert settings.output_path(Path("run.csv")) == (tmp_path / "reports" / "run.csv").resolve()
    assert settings.output_path(tmp_path / "run.csv") == tmp_path / "run.csv"


def test_pipeline_defaults() -> None:
    defaults = AppSettings().defaults
    assert defaults.window == 5
    assert defaults.model == "simple"
    assert defaults.gap_policy == "skip"
    assert defaults.predict is None


def test_defaults_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("DEFAULTS__WINDOW", "9")
    monkeypatch.setenv("DEFAULTS__MODEL", "holt")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    settings = AppSettings()
    assert settings.defaults.window == 9
    assert settings.defaults.model == "holt"
    assert settings.log_level == "DEBUG"


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()


@pytest.fixture()
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


def test_setup_logging_prod_writes_json_lines(package_logger: logging.Logger) -> None:
    stream = io.StringIO()
    root_handlers = logging.getLogger().handlers[:]
    setup_logging(level="warning", environment="prod", stream=stream)

    get_logger("movavg_pipeline.ml.pipeline").info("hidden")
    get_logger("movavg_pipeline.ml.pipeline").warning("window too small")

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["level"] == "WARNING"
    assert record["logger"] == "movavg_pipeline.ml.pipeline"
    assert record["message"] == "window too small"
    assert logging.getLogger().handlers == root_handlers


def test_setup_logging_replaces_previous_handler(package_logger: logging.Logger) -> None:
    first, second = io.StringIO(), io.StringIO()
    setup_logging(level="INFO", stream=first)
    setup_logging(level="INFO", stream=second)
    get_logger("movavg_pipeline.cli").info("once")
    assert first.getvalue() == ""
    assert "| INFO     | movavg_pipeline.cli | once" in second.getvalue()
    assert len(package_logger.handlers) == 1


def test_get_logger_nests_foreign_names() -> None:
    assert get_logger("__main__").name == "movavg_pipeline.__main__"
    assert get_logger("movavg_pipeline.cli").name == "movavg_pipeline.cli"
    assert get_logger(PACKAGE_LOGGER).name == PACKAGE_LOGGER
