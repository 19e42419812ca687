"""Data structures shared by the scanner, include processor and resolver."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Tuple

from jinja2 import nodes

if TYPE_CHECKING:
    from jinja2 import Template


class DirectiveKind(Enum):
    """Reserved directive names recognised in template text."""
    EXTEND = "extend"
    INCLUDE = "include"


@dataclass(frozen=True)
class TemplateSource:
    """Raw source for one logical name, read once per resolution."""
    name: str
    content: str
    filename: Optional[str] = None


@dataclass(frozen=True)
class Directive:
    """One ``extend``/``include`` occurrence and its exact span in the source."""
    kind: DirectiveKind
    target: str
    start: int
    end: int
    lineno: int
    has_context: bool = False


@dataclass(frozen=True)
class TemplateTree:
    """Result of scanning one source.

    ``content`` has every ``extend`` directive removed; ``includes`` lists
    include targets in document order.
    """
    name: str
    content: str
    extends: Optional[str] = None
    includes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class IncludeResult:
    """Expanded content plus the block namespace collected along the way."""
    content: str
    blocks: Mapping[str, nodes.Block] = field(default_factory=dict)


@dataclass
class ResolvedTemplate:
    """A render-ready merged structure addressed by logical name.

    ``document`` is the unnamed root entry; ``blocks`` holds every named
    entry of the tree. Both are shared with cached ancestors and must not be
    mutated: forking copies ``blocks`` and reuses the AST nodes.
    """

    name: str
    source: str
    document: nodes.Template
    blocks: Dict[str, nodes.Block] = field(default_factory=dict)
    parent: Optional[str] = None
    compiled: Optional["Template"] = field(default=None, repr=False, compare=False)

    def fork(self) -> Dict[str, nodes.Block]:
        """Return a copy of the block namespace for a child to override."""
        return dict(self.blocks)

    @property
    def block_names(self) -> List[str]:
        return sorted(self.blocks)

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "parent": self.parent,
            "blocks": self.block_names,
        }

    def describe(self) -> str:
        """Human-readable dump of the root entry and all named entries."""
        lines = [f"Template {self.name!r}:"]
        if self.parent:
            lines.append(f"  extends: {self.parent!r}")
        lines.append(f"  - <root> ({len(self.document.body)} nodes)")
        for block_name in self.block_names:
            block = self.blocks[block_name]
            lines.append(f"  - {block_name!r} (line {block.lineno}, {len(block.body)} nodes)")
        return "\n".join(lines)


__all__ = [
    "DirectiveKind",
    "TemplateSource",
    "Directive",
    "TemplateTree",
    "IncludeResult",
    "ResolvedTemplate",
]
