"""Optional process-wide engine.

Nothing is created at import time: call ``load()`` first, then use the
module-level helpers from anywhere in the application::

    from templayer import default

    default.load(root="templates")
    html = default.render("pages/home.html", {"title": "Home"})
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, TextIO

from .config import EngineOptions
from .engine import TemplateEngine
from .exceptions import EngineNotLoadedError
from .types import ResolvedTemplate

_engine: Optional[TemplateEngine] = None


def load(options: Optional[EngineOptions] = None, **overrides: Any) -> TemplateEngine:
    """Create and load the default engine, replacing any previous one."""
    global _engine
    engine = TemplateEngine(options, **overrides)
    engine.load()
    _engine = engine
    return engine


def get_engine() -> TemplateEngine:
    if _engine is None:
        raise EngineNotLoadedError("The default engine is not loaded; call templayer.default.load() first")
    return _engine


def reset() -> None:
    """Forget the default engine."""
    global _engine
    _engine = None


def lookup(name: str) -> ResolvedTemplate:
    return get_engine().lookup(name)


def render(name: str, data: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> str:
    return get_engine().render(name, data, **kwargs)


def render_to(sink: TextIO, name: str, data: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
    get_engine().render_to(sink, name, data, **kwargs)


__all__ = ["load", "get_engine", "reset", "lookup", "render", "render_to"]
