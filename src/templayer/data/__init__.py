"""Bundled data files (configuration schema)."""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


def get_data_path(filename: str = "") -> Path:
    """Return the absolute path of a bundled data file or of the data directory."""
    base = Path(str(resources.files("templayer.data")))
    return base / filename if filename else base


@lru_cache(maxsize=16)
def read_yaml(filename: str) -> dict[str, Any]:
    """Read and parse a bundled YAML file (cached)."""
    return yaml.safe_load(get_data_path(filename).read_text(encoding="utf-8"))


__all__ = ["get_data_path", "read_yaml"]
