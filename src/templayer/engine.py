"""Template engine façade.

Load-then-serve: ``load()`` (or ``reload()``/``add_functions()``) must
finish before renders start. Renders only read the published table, so
concurrent renders are safe once loading is done; a reload running
alongside renders must be serialized by the caller.

Example::

    engine = TemplateEngine(EngineOptions(root="templates"))
    engine.load()
    html = engine.render("pages/home.html", {"title": "Home"})
"""
from __future__ import annotations

import io
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, TextIO

from jinja2 import Template

from .config import EngineOptions
from .exceptions import TemplateNotFoundError, TemplateRenderError, TemplayerError
from .functions import load_functions
from .inheritance import InheritanceResolver
from .loaders import TemplateSourceReader, normalize_name
from .runtime import TemplateRuntime
from .types import ResolvedTemplate


class LoadSession:
    """One pass over the source tree plus the caches it fills.

    The resolver's inheritance and include caches survive a failed pass;
    ``clear()`` discards them for a full reload.
    """

    def __init__(self, runtime: TemplateRuntime, reader: TemplateSourceReader, logger: logging.Logger) -> None:
        self.runtime = runtime
        self.reader = reader
        self.logger = logger
        self.resolver = InheritanceResolver(runtime, reader, logger=logger)

    def run(self) -> Dict[str, ResolvedTemplate]:
        """Resolve and compile every template; fail on the first error."""
        table: Dict[str, ResolvedTemplate] = {}
        for name in self.reader.walk():
            self.logger.debug("Processing %s", name)
            resolved = self.resolver.resolve(name)
            if resolved.compiled is None:
                resolved.compiled = self.runtime.compile(resolved)
            table[name] = resolved
        return table

    def clear(self) -> None:
        self.resolver.clear()


class TemplateEngine:
    """Loads a template tree once and renders resolved templates by name."""

    def __init__(self, options: Optional[EngineOptions] = None, **overrides: Any) -> None:
        if options is None:
            options = EngineOptions(**overrides)
        elif overrides:
            options = replace(options, **overrides)
        self.options = options
        self.logger = options.logger or logging.getLogger("templayer")

        functions: Dict[str, Callable[..., Any]] = {}
        if options.functions_dirs:
            functions.update(load_functions(options.functions_dirs))
        functions.update(options.functions)

        self.runtime = TemplateRuntime(
            autoescape=options.autoescape,
            strict_undefined=options.strict_undefined,
            functions=functions,
        )
        self.reader = TemplateSourceReader(
            self.runtime.environment,
            loader=options.loader,
            root=options.root,
            extensions=options.extensions,
        )
        self.session = LoadSession(self.runtime, self.reader, self.logger)
        self._published: Dict[str, ResolvedTemplate] = {}
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def template_names(self) -> List[str]:
        return sorted(self._published)

    def load(self) -> None:
        """Resolve every template under the root and publish the lookup table.

        Calling ``load()`` again without ``reload()`` does nothing. The
        first failing template aborts the load and nothing is published.
        """
        if self._loaded:
            return
        self.logger.info("Loading templates")
        table = self.session.run()
        self._published = table
        self._loaded = True
        self.logger.info("Loaded %d templates", len(table))

    def reload(self) -> None:
        """Discard every cache and the published table, then load again."""
        self.session.clear()
        self._published = {}
        self._loaded = False
        self.load()

    def add_functions(self, functions: Mapping[str, Callable[..., Any]]) -> None:
        """Make ``functions`` available to templates and reload everything.

        Raises:
            ConfigurationError: If a name is reserved for a directive.
        """
        self.runtime.add_functions(functions)
        self.reload()

    def lookup(self, name: str) -> ResolvedTemplate:
        """Return the published template for ``name``. Never resolves.

        Raises:
            TemplateNotFoundError: If ``name`` is not published.
        """
        try:
            return self._published[normalize_name(name)]
        except KeyError:
            raise TemplateNotFoundError(name) from None

    def get_template(self, name: str) -> Template:
        """Return the compiled runtime template for ``name``."""
        resolved = self.lookup(name)
        if resolved.compiled is None:
            raise TemplayerError(
                f"Template {resolved.name!r} is published but not compiled",
                context={"template": resolved.name},
            )
        return resolved.compiled

    def chain(self, name: str) -> List[str]:
        """Return ``name`` and its ancestors, leaf first."""
        self.lookup(name)
        return self.session.resolver.chain(name)

    def render(self, name: str, data: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> str:
        """Render ``name`` to a string."""
        buffer = io.StringIO()
        self.render_to(buffer, name, data, **kwargs)
        return buffer.getvalue()

    def render_to(
        self,
        sink: TextIO,
        name: str,
        data: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ) -> None:
        """Render ``name``, writing output chunks to ``sink`` as they are produced.

        Raises:
            TemplateNotFoundError: If ``name`` is not published.
            TemplateRenderError: If execution against ``data`` fails.
        """
        template = self.get_template(name)
        context: Dict[str, Any] = dict(data or {})
        context.update(kwargs)
        try:
            for chunk in template.generate(context):
                sink.write(chunk)
        except TemplayerError:
            raise
        except Exception as exc:
            raise TemplateRenderError(name, exc) from exc


__all__ = ["LoadSession", "TemplateEngine"]
