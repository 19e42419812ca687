"""Adapter around the Jinja2 runtime.

The runtime owns parsing, compilation and execution. templayer only asks it
to:

- parse a source into an AST (``parse``)
- collect the named entries of an AST (``collect_blocks``)
- compile a resolved tree, merging every named entry of the namespace into
  the compiled root (``compile``)
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Set, Union

from jinja2 import (
    Environment,
    StrictUndefined,
    Template,
    TemplateRuntimeError,
    Undefined,
    nodes,
    select_autoescape,
)
from jinja2.visitor import NodeTransformer
from jinja2 import TemplateSyntaxError as JinjaSyntaxError

from .exceptions import ConfigurationError, TemplateSyntaxError
from .types import ResolvedTemplate

logger = logging.getLogger(__name__)

RESERVED_NAMES = frozenset({"extend", "include", "block"})


def _reserved_directive(name: str) -> Callable[..., Any]:
    def directive(*args: Any, **kwargs: Any) -> Any:
        raise TemplateRuntimeError(f"{name} can only be used as a directive while templates are loaded")

    directive.__name__ = name
    return directive


def clone_node(node: Any) -> Any:
    """Copy a node tree so it can be rewritten without touching shared ASTs."""
    if isinstance(node, nodes.Node):
        fields = [clone_node(value) for _, value in node.iter_fields()]
        return type(node)(*fields, lineno=node.lineno)
    if isinstance(node, list):
        return [clone_node(item) for item in node]
    return node


class _UniqueBlocks(NodeTransformer):
    """Turn repeated blocks of one tree into calls of the first.

    Jinja compiles each block name once per tree, but spliced includes can
    repeat a name. Later occurrences render the namespace entry through
    ``self.<name>()``.
    """

    def __init__(self, seen: Iterable[str] = ()) -> None:
        self.seen: Set[str] = set(seen)

    def visit_Block(self, node: nodes.Block) -> nodes.Node:
        if node.name in self.seen:
            reference = nodes.Getattr(nodes.Name("self", "load"), node.name, "load", lineno=node.lineno)
            call = nodes.Call(reference, [], [], None, None, lineno=node.lineno)
            return nodes.Output([call], lineno=node.lineno)
        self.seen.add(node.name)
        return self.generic_visit(node)


class TemplateRuntime:
    """Owns the ``jinja2.Environment`` and the template function table."""

    def __init__(
        self,
        *,
        autoescape: Optional[bool] = None,
        strict_undefined: bool = False,
        functions: Optional[Mapping[str, Callable[..., Any]]] = None,
    ) -> None:
        autoescape_setting: Union[bool, Callable[[Optional[str]], bool]]
        if autoescape is None:
            autoescape_setting = select_autoescape(("html", "htm", "xml"), default_for_string=False)
        else:
            autoescape_setting = autoescape

        self.environment = Environment(
            autoescape=autoescape_setting,
            undefined=StrictUndefined if strict_undefined else Undefined,
            keep_trailing_newline=True,
        )
        self.functions: Dict[str, Callable[..., Any]] = {}
        for name in sorted(RESERVED_NAMES):
            self.environment.globals[name] = _reserved_directive(name)
        if functions:
            self.add_functions(functions)

    def add_functions(self, functions: Mapping[str, Callable[..., Any]]) -> None:
        """Merge ``functions`` into the table as runtime globals and filters.

        Raises:
            ConfigurationError: If a name is reserved or a value is not callable.
        """
        clashes = sorted(RESERVED_NAMES.intersection(functions))
        if clashes:
            raise ConfigurationError(
                f"Function names {clashes} are reserved for template directives",
                context={"functions": clashes},
            )
        for name, fn in functions.items():
            if not callable(fn):
                raise ConfigurationError(
                    f"Template function {name!r} is not callable",
                    context={"function": name},
                )
        self.functions.update(functions)
        self.environment.globals.update(functions)
        self.environment.filters.update(functions)
        logger.debug("Registered template functions: %s", ", ".join(sorted(functions)))

    def parse(self, source: str, name: str) -> nodes.Template:
        """Parse ``source`` into an AST, tagging failures with ``name``."""
        try:
            return self.environment.parse(source, name=name)
        except JinjaSyntaxError as exc:
            raise TemplateSyntaxError(exc.message or str(exc), name=name, lineno=exc.lineno) from exc

    @staticmethod
    def collect_blocks(tree: nodes.Node) -> Dict[str, nodes.Block]:
        """Return every block declared anywhere in ``tree``, in document order."""
        return {block.name: block for block in tree.find_all(nodes.Block)}

    def compile(self, resolved: ResolvedTemplate) -> Template:
        """Compile ``resolved`` into a runtime template.

        The root entry is compiled from a fresh parse of the document source
        (the cached AST is shared and never rewritten); every named entry of
        the namespace is compiled on its own (from a copy with nested repeats
        rewritten) and merged over the root's blocks, so the namespace's
        winner is what renders for each name.
        """
        document = _UniqueBlocks().visit(self.parse(resolved.source, resolved.name))
        template = self._compile_tree(document, resolved.name)
        blocks = dict(template.blocks)
        for block_name, block in resolved.blocks.items():
            entry = _UniqueBlocks([block_name]).generic_visit(clone_node(block))
            holder = self._compile_tree(nodes.Template([entry], lineno=1), resolved.name)
            blocks[block_name] = holder.blocks[block_name]
        template.blocks = blocks
        return template

    def _compile_tree(self, tree: nodes.Template, name: str) -> Template:
        tree.set_environment(self.environment)
        try:
            code = self.environment.compile(tree, name=name, filename=name)
        except JinjaSyntaxError as exc:
            raise TemplateSyntaxError(exc.message or str(exc), name=name, lineno=exc.lineno) from exc
        return self.environment.template_class.from_code(
            self.environment, code, self.environment.make_globals(None)
        )

    def function_names(self) -> Iterable[str]:
        return sorted(self.functions)


__all__ = ["RESERVED_NAMES", "TemplateRuntime", "clone_node"]
