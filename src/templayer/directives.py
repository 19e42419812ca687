"""Directive scanning for ``extend`` and ``include``.

Directives are ordinary runtime call expressions in standalone tags::

    {{ extend("layouts/base.html") }}
    {{ include("partials/nav.html") }}
    {{ include("partials/nav.html", context) }}

The runtime parser is authoritative for what a directive means (arity,
literal arguments, placement); a pattern over the masked source supplies
each occurrence's exact span so it can be removed or replaced textually.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from jinja2 import nodes

from .exceptions import ConfigurationError
from .loaders import normalize_name
from .runtime import TemplateRuntime
from .types import Directive, DirectiveKind, TemplateTree

logger = logging.getLogger(__name__)

DIRECTIVE_PATTERN = re.compile(
    r"\{\{-?\s*(?P<name>extend|include)\s*\((?P<args>(?:(?!\}\}).)*?)\)\s*-?\}\}",
    re.DOTALL,
)

# Regions whose text never reaches the parser as code.
_COMMENT_PATTERN = re.compile(r"\{#.*?#\}", re.DOTALL)
_RAW_PATTERN = re.compile(r"\{%-?\s*raw\s*-?%\}.*?\{%-?\s*endraw\s*-?%\}", re.DOTALL)

_DIRECTIVE_NAMES = frozenset(kind.value for kind in DirectiveKind)


def _mask(source: str) -> str:
    """Blank out comments and raw sections, keeping every offset intact."""
    def blank(match: re.Match[str]) -> str:
        return " " * len(match.group(0))

    return _RAW_PATTERN.sub(blank, _COMMENT_PATTERN.sub(blank, source))


def replace_spans(content: str, replacements: Iterable[Tuple[int, int, str]]) -> str:
    """Replace each ``(start, end)`` span of ``content`` with its text.

    Spans must not overlap; they are applied in ascending order.
    """
    parts: List[str] = []
    pos = 0
    for start, end, text in sorted(replacements, key=lambda item: item[0]):
        parts.append(content[pos:start])
        parts.append(text)
        pos = end
    parts.append(content[pos:])
    return "".join(parts)


class DirectiveScanner:
    """Extracts directives from one raw source. Holds no cache."""

    def __init__(self, runtime: TemplateRuntime) -> None:
        self.runtime = runtime

    def scan(self, name: str, content: str) -> TemplateTree:
        """Scan ``content`` and strip its ``extend`` directives.

        The first ``extend`` is honoured; later ones are inert and removed
        as well.

        Raises:
            TemplateSyntaxError: If the runtime cannot parse the source.
            ConfigurationError: If a directive is malformed or misplaced.
        """
        directives = self.directives(name, content)
        extends = [d for d in directives if d.kind is DirectiveKind.EXTEND]
        includes = tuple(d.target for d in directives if d.kind is DirectiveKind.INCLUDE)

        parent = None
        if extends:
            parent = extends[0].target
            for extra in extends[1:]:
                logger.warning(
                    "%s:%d: ignoring extend(%r), template already extends %r",
                    name, extra.lineno, extra.target, parent,
                )
            content = replace_spans(content, ((d.start, d.end, "") for d in extends))

        return TemplateTree(name=name, content=content, extends=parent, includes=includes)

    def find_includes(self, name: str, content: str) -> List[Directive]:
        """Return the ``include`` directives of ``content`` in document order."""
        return [d for d in self.directives(name, content) if d.kind is DirectiveKind.INCLUDE]

    def directives(self, name: str, content: str) -> List[Directive]:
        """Return every directive of ``content`` with its span, in document order."""
        tree = self.runtime.parse(content, name)
        top_level = {
            id(child)
            for node in tree.body
            if isinstance(node, nodes.Output)
            for child in node.nodes
        }

        # A standalone tag is an Output node whose child is the call itself.
        standalone = {
            id(child)
            for output in tree.find_all(nodes.Output)
            for child in output.nodes
        }

        calls: Dict[DirectiveKind, List[nodes.Call]] = {kind: [] for kind in DirectiveKind}
        for call in tree.find_all(nodes.Call):
            if isinstance(call.node, nodes.Name) and call.node.name in _DIRECTIVE_NAMES:
                kind = DirectiveKind(call.node.name)
                if id(call) not in standalone:
                    raise self._not_standalone(name, kind, call.lineno)
                if kind is DirectiveKind.EXTEND and id(call) not in top_level:
                    raise ConfigurationError(
                        f"{name}:{call.lineno}: extend must be a top-level tag",
                        context={"template": name, "lineno": call.lineno},
                    )
                calls[kind].append(call)

        masked = _mask(content)
        spans: Dict[DirectiveKind, List[re.Match[str]]] = {kind: [] for kind in DirectiveKind}
        for match in DIRECTIVE_PATTERN.finditer(masked):
            spans[DirectiveKind(match.group("name"))].append(match)

        found: List[Directive] = []
        for kind in DirectiveKind:
            # Sorting is stable, so calls sharing a line keep their tree order.
            kind_calls = sorted(calls[kind], key=lambda c: c.lineno)
            kind_spans = spans[kind]
            if len(kind_calls) != len(kind_spans):
                lineno = kind_calls[0].lineno if kind_calls else None
                raise self._not_standalone(name, kind, lineno)
            for call, match in zip(kind_calls, kind_spans):
                target, has_context = self._arguments(name, kind, call)
                span_lineno = masked.count("\n", 0, match.start("name")) + 1
                if span_lineno != call.lineno or call.args[0].value not in match.group("args"):
                    raise self._not_standalone(name, kind, call.lineno)
                found.append(
                    Directive(
                        kind=kind,
                        target=target,
                        start=match.start(),
                        end=match.end(),
                        lineno=call.lineno,
                        has_context=has_context,
                    )
                )
        return sorted(found, key=lambda d: d.start)

    @staticmethod
    def _not_standalone(name: str, kind: DirectiveKind, lineno: Optional[int]) -> ConfigurationError:
        where = f"{name}:{lineno}" if lineno else name
        return ConfigurationError(
            f"{where}: {kind.value} must be used as a standalone {{{{ {kind.value}(\"...\") }}}} tag",
            context={"template": name, "lineno": lineno},
        )

    @staticmethod
    def _arguments(name: str, kind: DirectiveKind, call: nodes.Call) -> Tuple[str, bool]:
        ctx = {"template": name, "lineno": call.lineno, "directive": kind.value}
        where = f"{name}:{call.lineno}"
        if call.kwargs or call.dyn_args is not None or call.dyn_kwargs is not None:
            raise ConfigurationError(f"{where}: {kind.value} takes positional arguments only", context=ctx)

        args: Sequence[nodes.Expr] = call.args
        if kind is DirectiveKind.EXTEND and len(args) != 1:
            raise ConfigurationError(f"{where}: extend requires exactly one argument", context=ctx)
        if kind is DirectiveKind.INCLUDE and not args:
            raise ConfigurationError(f"{where}: include requires a template name", context=ctx)
        if kind is DirectiveKind.INCLUDE and len(args) > 2:
            raise ConfigurationError(
                f"{where}: include takes a template name and an optional context", context=ctx
            )

        target = args[0]
        if not (isinstance(target, nodes.Const) and isinstance(target.value, str)):
            raise ConfigurationError(f"{where}: {kind.value} requires a string literal name", context=ctx)
        return normalize_name(target.value), len(args) == 2


__all__ = ["DIRECTIVE_PATTERN", "DirectiveScanner", "replace_spans"]
