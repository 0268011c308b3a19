from __future__ import annotations


class MovAvgError(Exception):
    pass


class ConfigurationError(MovAvgError, ValueError):
    """Raised when a pipeline request is rejected before any bucket is processed."""

    def __init__(self, message: str, problems: list[str] | None = None) -> None:
        super().__init__(message)
        self.problems = list(problems or [])
