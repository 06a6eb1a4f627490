"""Configuration paths and analysis defaults for Fluxcode."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("FLUXCODE_HOME", str(Path.home() / ".fluxcode"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

# Tried in order when resolving a relative import specifier.
RESOLVE_EXTENSIONS = [".js", ".jsx", ".ts", ".tsx", ".json"]

DEFAULT_HIGH_COMPLEXITY = 20
DEFAULT_REFACTOR_COMPLEXITY = 15
DEFAULT_HIGH_PRIORITY_COMPLEXITY = 25
DEFAULT_EXEMPT_PREFIXES = ["use"]
DEFAULT_MAX_FILE_SIZE = 1_000_000
DEFAULT_MAX_WORKERS = min(os.cpu_count() or 4, 8)
