"""Exception hierarchy for the analysis engine."""

from __future__ import annotations

from typing import Dict, Optional


class FluxcodeError(Exception):
    """Base exception for all Fluxcode errors."""

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class AnalysisInputError(FluxcodeError):
    """The file supplier handed over input the engine cannot analyze."""


class EmptyProjectError(AnalysisInputError):
    """No analyzable files were supplied, or the project root is unreadable."""


class ParseFailure(FluxcodeError):
    """A single file could not be turned into a syntax tree.

    Always recovered by the engine: it becomes a ``parse_error`` issue on
    the offending file.
    """


class ConfigError(FluxcodeError):
    """Invalid value in the user configuration."""
