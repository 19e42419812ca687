"""
templayer - template inheritance, blocks and includes for Jinja2

Adds ``extend``/``include`` directives on top of Jinja2 and resolves each
template's ancestor chain into one render-ready template.
"""
import logging

from .config import EngineOptions, load_options
from .engine import TemplateEngine
from .exceptions import (
    ConfigurationError,
    CycleError,
    EngineNotLoadedError,
    TemplateNotFoundError,
    TemplateRenderError,
    TemplateSyntaxError,
    TemplayerError,
)
from .types import ResolvedTemplate

__version__ = "0.3.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "EngineOptions",
    "load_options",
    "TemplateEngine",
    "ResolvedTemplate",
    "TemplayerError",
    "ConfigurationError",
    "CycleError",
    "EngineNotLoadedError",
    "TemplateNotFoundError",
    "TemplateRenderError",
    "TemplateSyntaxError",
]
