"""Include expansion.

``{{ include("path") }}`` is replaced by the fully expanded text of
``path``. Blocks declared anywhere along the way (in the fragment, in
fragments it includes, or at the current level) travel with the result so
that templates extending or including this one can override them.

A block declared at the current level beats an included block of the same
name wherever the two sit in the text. Current-level blocks are therefore
taken from the template's own AST, with each include call replaced by a
fresh parse of the fragment, rather than from the spliced text.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Tuple, Union

from jinja2 import nodes
from jinja2.visitor import NodeTransformer

from .directives import DirectiveScanner, replace_spans
from .exceptions import ConfigurationError
from .graph import ReferenceGraph
from .loaders import TemplateSourceReader, normalize_name
from .runtime import TemplateRuntime
from .types import Directive, DirectiveKind, IncludeResult


class _SpliceIncludes(NodeTransformer):
    """Replace ``include`` calls of a parsed template with fragment bodies."""

    def __init__(self, runtime: TemplateRuntime, fragments: Mapping[str, IncludeResult]) -> None:
        self.runtime = runtime
        self.fragments = fragments

    def _target(self, node: nodes.Node) -> Optional[str]:
        if (
            isinstance(node, nodes.Call)
            and isinstance(node.node, nodes.Name)
            and node.node.name == DirectiveKind.INCLUDE.value
        ):
            return normalize_name(node.args[0].value)
        return None

    def visit_Output(self, node: nodes.Output) -> Union[nodes.Node, List[nodes.Node]]:
        if all(self._target(child) is None for child in node.nodes):
            return node
        spliced: List[nodes.Node] = []
        pending: List[nodes.Expr] = []
        for child in node.nodes:
            target = self._target(child)
            if target is None:
                pending.append(child)
                continue
            if pending:
                spliced.append(nodes.Output(pending, lineno=node.lineno))
                pending = []
            spliced.extend(self.runtime.parse(self.fragments[target].content, target).body)
        if pending:
            spliced.append(nodes.Output(pending, lineno=node.lineno))
        return spliced


class IncludeProcessor:
    """Expands includes recursively and caches the result per logical name."""

    def __init__(
        self,
        runtime: TemplateRuntime,
        reader: TemplateSourceReader,
        scanner: Optional[DirectiveScanner] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.runtime = runtime
        self.reader = reader
        self.scanner = scanner or DirectiveScanner(runtime)
        self.logger = logger or logging.getLogger(__name__)
        self.cache: Dict[str, IncludeResult] = {}
        self.graph = ReferenceGraph("include")
        self.extending: Dict[str, str] = {}

    def expand(self, content: str, name: str, *, extends: Optional[str] = None) -> IncludeResult:
        """Expand every include of ``content``, which is the text of ``name``.

        A cached result for ``name`` is returned without reading anything.
        ``extends`` names the parent when ``name`` is a child template; such
        a name can never be an include target.

        Raises:
            CycleError: If an include chain refers back to itself.
            TemplateNotFoundError: If an include target cannot be read.
            ConfigurationError: If a directive is malformed, or an include
                target declares ``extend``.
        """
        if extends is not None:
            self.extending[name] = extends
        cached = self.cache.get(name)
        if cached is not None:
            self.logger.debug("Returning cached include %s", name)
            return cached
        return self._expand(name, content, self.scanner.find_includes(name, content))

    def clear(self) -> None:
        self.cache.clear()
        self.extending.clear()
        self.graph.reset()

    def _expand(self, name: str, content: str, includes: List[Directive]) -> IncludeResult:
        self.logger.debug("Processing includes of %s", name)
        with self.graph.visiting(name):
            blocks: Dict[str, nodes.Block] = {}
            fragments: Dict[str, IncludeResult] = {}
            replacements: List[Tuple[int, int, str]] = []
            for directive in includes:
                nested = self._include(directive.target, referenced_by=name)
                fragments[directive.target] = nested
                blocks.update(nested.blocks)
                replacements.append((directive.start, directive.end, nested.content))

            tree = self.runtime.parse(content, name)
            direct = self.runtime.collect_blocks(tree)
            if fragments:
                # Splices fragment bodies into the direct blocks in place.
                _SpliceIncludes(self.runtime, fragments).visit(tree)
            blocks.update(direct)
            result = IncludeResult(content=replace_spans(content, replacements), blocks=blocks)

        self.cache[name] = result
        return result

    def _include(self, path: str, *, referenced_by: str) -> IncludeResult:
        self.graph.check(path)
        if path in self.extending:
            raise self._extending_error(path, referenced_by)
        cached = self.cache.get(path)
        if cached is not None:
            self.logger.debug("Returning cached include %s", path)
            return cached

        source = self.reader.read(path, referenced_by=referenced_by)
        directives = self.scanner.directives(path, source.content)
        if any(d.kind is DirectiveKind.EXTEND for d in directives):
            raise self._extending_error(path, referenced_by)
        includes = [d for d in directives if d.kind is DirectiveKind.INCLUDE]
        return self._expand(path, source.content, includes)

    @staticmethod
    def _extending_error(path: str, referenced_by: str) -> ConfigurationError:
        return ConfigurationError(
            f"{path} declares extend and cannot be included (included from {referenced_by})",
            context={"template": path, "referenced_by": referenced_by},
        )


__all__ = ["IncludeProcessor"]
