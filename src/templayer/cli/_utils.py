"""Shared helpers for CLI commands."""
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from templayer.config import EngineOptions, find_config, load_options
from templayer.engine import TemplateEngine
from templayer.exceptions import ConfigurationError


def build_options(args: argparse.Namespace) -> EngineOptions:
    """Build engine options from ``--config``/``--root``.

    Without ``--config``, a ``templayer.yaml`` in the current directory is
    used when present. ``--root`` always wins over the config file.
    """
    overrides: Dict[str, Any] = {}
    root = getattr(args, "root", None)
    if root:
        overrides["root"] = Path(root)

    config = getattr(args, "config", None)
    config_path = Path(config) if config else find_config(Path.cwd())
    if config_path is not None:
        return load_options(config_path, **overrides)
    return EngineOptions(**overrides)


def build_engine(args: argparse.Namespace) -> TemplateEngine:
    """Create and load an engine for the command's arguments."""
    engine = TemplateEngine(build_options(args))
    engine.load()
    return engine


def load_data_file(path: Path) -> Dict[str, Any]:
    """Read render data from a YAML or JSON file (JSON is valid YAML)."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read data file {path}: {exc}", context={"path": str(path)}) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Data file {path} is not valid YAML/JSON: {exc}", context={"path": str(path)}) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Data file {path} must contain a mapping", context={"path": str(path)})
    return data


def parse_assignments(pairs: Optional[List[str]]) -> Dict[str, Any]:
    """Parse ``key=value`` pairs; values are decoded as JSON when possible."""
    result: Dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ConfigurationError(f"Expected key=value, got {pair!r}", context={"value": pair})
        try:
            result[key] = json.loads(raw)
        except json.JSONDecodeError:
            result[key] = raw
    return result


__all__ = ["build_options", "build_engine", "load_data_file", "parse_assignments"]
