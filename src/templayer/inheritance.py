"""Inheritance resolution.

Resolving a name produces one ``ResolvedTemplate``:

- A root template (no ``extend``) keeps its own include-expanded content as
  the document. Its namespace is seeded with include-carried blocks, then
  its directly declared blocks overwrite same-named entries.
- A child template forks its parent's namespace, merges include-carried
  blocks, then copies in the blocks it declares itself. The document is
  the parent's: a child only supplies replacements for named entries.

Ancestors are resolved first (recursively), so overrides apply root to
leaf and the leaf's definition of a block is the one that renders.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .directives import DirectiveScanner
from .graph import ReferenceGraph
from .includes import IncludeProcessor
from .loaders import TemplateSourceReader, normalize_name
from .runtime import TemplateRuntime
from .types import ResolvedTemplate, TemplateTree


class InheritanceResolver:
    """Resolves ancestor chains and caches the result per logical name."""

    def __init__(
        self,
        runtime: TemplateRuntime,
        reader: TemplateSourceReader,
        includes: Optional[IncludeProcessor] = None,
        scanner: Optional[DirectiveScanner] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.runtime = runtime
        self.reader = reader
        self.logger = logger or logging.getLogger(__name__)
        self.scanner = scanner or DirectiveScanner(runtime)
        self.includes = includes or IncludeProcessor(runtime, reader, self.scanner, self.logger)
        self.cache: Dict[str, ResolvedTemplate] = {}
        self.graph = ReferenceGraph("extends")

    def resolve(self, name: str, *, referenced_by: Optional[str] = None) -> ResolvedTemplate:
        """Resolve ``name`` and every ancestor it extends.

        Raises:
            CycleError: If ``name`` is already being resolved up the chain.
            TemplateNotFoundError: If ``name`` or an include cannot be read.
            TemplateSyntaxError: If the runtime rejects a source.
            ConfigurationError: If a directive is malformed.
        """
        name = normalize_name(name)
        self.graph.check(name)

        cached = self.cache.get(name)
        if cached is not None:
            self.logger.debug("Returning cached inheritance for %s", name)
            return cached

        with self.graph.visiting(name):
            self.logger.debug("Resolving inheritance for %s", name)
            source = self.reader.read(name, referenced_by=referenced_by)
            tree = self.scanner.scan(name, source.content)
            if tree.extends is None:
                resolved = self._resolve_root(tree)
            else:
                resolved = self._resolve_child(tree, tree.extends)

        self.cache[name] = resolved
        return resolved

    def chain(self, name: str) -> List[str]:
        """Return ``name`` followed by its ancestors, leaf first."""
        names: List[str] = []
        current: Optional[str] = normalize_name(name)
        while current is not None:
            names.append(current)
            current = self.resolve(current).parent
        return names

    def clear(self) -> None:
        self.cache.clear()
        self.graph.reset()
        self.includes.clear()

    def _resolve_root(self, tree: TemplateTree) -> ResolvedTemplate:
        included = self.includes.expand(tree.content, tree.name)
        blocks = dict(included.blocks)
        document = self.runtime.parse(included.content, tree.name)
        return ResolvedTemplate(
            name=tree.name,
            source=included.content,
            document=document,
            blocks=blocks,
        )

    def _resolve_child(self, tree: TemplateTree, parent_name: str) -> ResolvedTemplate:
        parent = self.resolve(parent_name, referenced_by=tree.name)
        blocks = parent.fork()

        # Only the named entries of the child matter; its root is dropped.
        included = self.includes.expand(tree.content, tree.name, extends=parent.name)
        blocks.update(included.blocks)

        return ResolvedTemplate(
            name=tree.name,
            source=parent.source,
            document=parent.document,
            blocks=blocks,
            parent=parent.name,
        )


__all__ = ["InheritanceResolver"]
