"""Template functions loaded from Python files.

Every ``*.py`` file (except ``__init__.py`` and ``_``-prefixed files) in
the configured ``functions_dirs`` is executed as a module; its public
callables become template functions. Directories are processed in order,
so a later directory overrides an earlier one for the same name. A module
that defines ``__all__`` exports exactly those names.
"""
from __future__ import annotations

import importlib.util
import logging
from pathlib import Path
from types import ModuleType
from typing import Callable, Dict, Iterable, Iterator, Optional, Set

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_NAMESPACE = "templayer.functions.dynamic"


def iter_python_files(dirs: Iterable[Path], exclude: Optional[Set[str]] = None) -> Iterator[Path]:
    """Yield the ``*.py`` files of each existing directory, sorted per directory."""
    if exclude is None:
        exclude = {"__init__.py"}

    for d in dirs:
        if not d or not d.is_dir():
            continue
        for path in sorted(d.glob("*.py")):
            if path.is_file() and path.name not in exclude and not path.name.startswith("_"):
                yield path


def load_module_from_path(path: Path, namespace: str = _NAMESPACE) -> ModuleType:
    """Execute ``path`` as a module without adding it to ``sys.modules``.

    Raises:
        ConfigurationError: If the file cannot be imported.
    """
    module_name = f"{namespace}.{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"Cannot load functions module {path}", context={"path": str(path)})
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load functions module {path}: {exc}", context={"path": str(path)}
        ) from exc
    return module


def public_callables(module: ModuleType) -> Dict[str, Callable[..., object]]:
    """Return the callables ``module`` exports.

    Without ``__all__``, only functions defined in the module itself count;
    imported helpers and classes are skipped.
    """
    exported = getattr(module, "__all__", None)
    found: Dict[str, Callable[..., object]] = {}
    if exported is not None:
        for name in exported:
            obj = getattr(module, name)
            if callable(obj):
                found[name] = obj
        return found

    for name in dir(module):
        if name.startswith("_"):
            continue
        obj = getattr(module, name)
        if callable(obj) and not isinstance(obj, type) and getattr(obj, "__module__", None) == module.__name__:
            found[name] = obj
    return found


def load_functions(dirs: Iterable[Path]) -> Dict[str, Callable[..., object]]:
    """Load template functions from every Python file in ``dirs``."""
    functions: Dict[str, Callable[..., object]] = {}
    for path in iter_python_files(dirs):
        loaded = public_callables(load_module_from_path(path))
        logger.debug("Loaded %d template functions from %s", len(loaded), path)
        functions.update(loaded)
    return functions


__all__ = ["iter_python_files", "load_module_from_path", "public_callables", "load_functions"]
