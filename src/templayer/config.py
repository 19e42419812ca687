"""Engine configuration.

``EngineOptions`` is the programmatic surface. ``load_options`` builds one
from a YAML file such as::

    root: templates
    extensions: [".html", ".txt"]
    autoescape: null
    strict_undefined: true
    functions_dirs: [template_functions]

Files are validated against the bundled JSON Schema; relative paths are
resolved against the directory containing the file.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import jsonschema
import yaml
from jinja2 import BaseLoader

from .data import read_yaml
from .exceptions import ConfigurationError

DEFAULT_CONFIG_FILENAMES = ("templayer.yaml", "templayer.yml")


@dataclass
class EngineOptions:
    """Configuration for a ``TemplateEngine``.

    ``loader`` overrides the filesystem (any ``jinja2.BaseLoader``); when
    unset, templates are read from ``root``. ``logger`` defaults to the
    package logger, which discards records unless the application
    configures logging.
    """

    root: Union[str, Path] = "."
    loader: Optional[BaseLoader] = None
    functions: Dict[str, Callable[..., Any]] = field(default_factory=dict)
    functions_dirs: List[Path] = field(default_factory=list)
    extensions: Tuple[str, ...] = (".html",)
    autoescape: Optional[bool] = None
    strict_undefined: bool = False
    logger: Optional[logging.Logger] = None


def validate_config(data: Mapping[str, Any], source: str = "<config>") -> None:
    """Validate raw configuration data against the bundled schema.

    Raises:
        ConfigurationError: Listing every violation found.
    """
    validator = jsonschema.Draft202012Validator(read_yaml("config.schema.yaml"))
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errors:
        details = []
        for error in errors:
            location = ".".join(str(p) for p in error.path) or "<root>"
            details.append(f"{location}: {error.message}")
        raise ConfigurationError(
            f"Invalid configuration in {source}:\n  " + "\n  ".join(details),
            context={"source": source, "errors": details},
        )


def options_from_mapping(data: Mapping[str, Any], base_dir: Optional[Path] = None, **overrides: Any) -> EngineOptions:
    """Build ``EngineOptions`` from validated raw data.

    Relative ``root`` and ``functions_dirs`` entries are resolved against
    ``base_dir`` when given. Keyword overrides win over ``data``.
    """
    def resolve(value: str) -> Path:
        path = Path(value).expanduser()
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        return path

    kwargs: Dict[str, Any] = {}
    if "root" in data:
        kwargs["root"] = resolve(data["root"])
    if "extensions" in data:
        kwargs["extensions"] = tuple(data["extensions"])
    if "autoescape" in data:
        kwargs["autoescape"] = data["autoescape"]
    if "strict_undefined" in data:
        kwargs["strict_undefined"] = bool(data["strict_undefined"])
    if "functions_dirs" in data:
        kwargs["functions_dirs"] = [resolve(d) for d in data["functions_dirs"]]
    kwargs.update(overrides)
    return EngineOptions(**kwargs)


def load_options(path: Union[str, Path], **overrides: Any) -> EngineOptions:
    """Read, validate and convert a YAML configuration file.

    Raises:
        ConfigurationError: If the file is missing, not YAML, or invalid.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Config file not found: {path}", context={"source": str(path)}) from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Config file {path} is not valid YAML: {exc}", context={"source": str(path)}) from exc

    if data is None:
        data = {}
    validate_config(data, source=str(path))
    return options_from_mapping(data, base_dir=path.parent, **overrides)


def find_config(start: Union[str, Path]) -> Optional[Path]:
    """Return the first default config file found in ``start``, if any."""
    directory = Path(start)
    for filename in DEFAULT_CONFIG_FILENAMES:
        candidate = directory / filename
        if candidate.is_file():
            return candidate
    return None


__all__ = [
    "DEFAULT_CONFIG_FILENAMES",
    "EngineOptions",
    "validate_config",
    "options_from_mapping",
    "load_options",
    "find_config",
]
