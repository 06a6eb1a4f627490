"""Configuration manager for Fluxcode using TOML files.

The ``[analysis]`` section of ``~/.fluxcode/config.toml`` holds the
diagnostic thresholds and the exempt-name policy used by the engine::

    [analysis]
    high_complexity = 20
    refactor_complexity = 15
    high_priority_complexity = 25
    exempt_prefixes = ["use"]
    max_workers = 8
    max_file_size = 1000000
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

from . import config
from .exceptions import ConfigError

logger = logging.getLogger(__name__)

SECTION = "analysis"


@dataclass
class AnalysisSettings:
    """Tunable policy for diagnostics, metrics and scheduling."""

    high_complexity: int = config.DEFAULT_HIGH_COMPLEXITY
    refactor_complexity: int = config.DEFAULT_REFACTOR_COMPLEXITY
    high_priority_complexity: int = config.DEFAULT_HIGH_PRIORITY_COMPLEXITY
    exempt_prefixes: List[str] = field(
        default_factory=lambda: list(config.DEFAULT_EXEMPT_PREFIXES)
    )
    max_workers: int = config.DEFAULT_MAX_WORKERS
    max_file_size: int = config.DEFAULT_MAX_FILE_SIZE

    def __post_init__(self) -> None:
        for name in (
            "high_complexity",
            "refactor_complexity",
            "high_priority_complexity",
            "max_workers",
            "max_file_size",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigError(f"'{name}' must be an integer", {"value": repr(value)})
            if value < 0:
                raise ConfigError(f"'{name}' must not be negative", {"value": str(value)})
        if self.max_workers < 1:
            raise ConfigError("'max_workers' must be at least 1")
        if not all(isinstance(p, str) for p in self.exempt_prefixes):
            raise ConfigError("'exempt_prefixes' must be a list of strings")

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AnalysisSettings":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(payload) - known)
        if unknown:
            logger.warning("Ignoring unknown analysis settings: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in payload.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _config_path(path: Optional[Path] = None) -> Path:
    return path or config.CONFIG_FILE


def load_full_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    cfg_path = _config_path(path)
    if not cfg_path.exists():
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except toml.TomlDecodeError as exc:
        raise ConfigError(f"Malformed configuration file {cfg_path}", {"error": str(exc)}) from exc


def load_settings(path: Optional[Path] = None) -> AnalysisSettings:
    """Load analysis settings, falling back to defaults for missing keys.

    Args:
        path: Explicit config file; defaults to ``~/.fluxcode/config.toml``.

    Returns:
        Validated :class:`AnalysisSettings`.
    """
    section = load_full_config(path).get(SECTION, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{SECTION}] must be a table")
    return AnalysisSettings.from_dict(section)


def _save_full_config(payload: Dict[str, Any], path: Optional[Path] = None) -> None:
    cfg_path = _config_path(path)
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    with open(cfg_path, "w", encoding="utf-8") as f:
        toml.dump(payload, f)


def _coerce(name: str, raw: str) -> Any:
    if name == "exempt_prefixes":
        return [p.strip() for p in raw.split(",") if p.strip()]
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"'{name}' must be an integer", {"value": raw}) from exc


def set_setting(name: str, raw_value: str, path: Optional[Path] = None) -> AnalysisSettings:
    """Update a single ``[analysis]`` key from its string form and persist it.

    Other sections of the file are preserved. ``exempt_prefixes`` takes a
    comma-separated list (empty string clears it).
    """
    known = {f.name for f in fields(AnalysisSettings)}
    if name not in known:
        raise ConfigError(f"Unknown setting '{name}'", {"known": ", ".join(sorted(known))})

    payload = load_full_config(path)
    section = dict(payload.get(SECTION, {}))
    section[name] = _coerce(name, raw_value)
    settings = AnalysisSettings.from_dict(section)

    payload[SECTION] = section
    _save_full_config(payload, path)
    return settings


def reset_settings(path: Optional[Path] = None) -> None:
    """Remove the ``[analysis]`` section, restoring defaults."""
    payload = load_full_config(path)
    if SECTION in payload:
        del payload[SECTION]
        _save_full_config(payload, path)
