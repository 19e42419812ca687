"""Cycle detection over the logical-name reference graph.

Each relation (extends, include) gets its own graph. Nodes are coloured
UNVISITED -> IN_PROGRESS -> DONE; reaching an IN_PROGRESS node again means
the current chain loops back on itself. DONE nodes may be reached any
number of times, so diamonds (two siblings sharing an ancestor or a
fragment) pass.
"""
from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Dict, Iterator, List

from .exceptions import CycleError


class VisitState(Enum):
    UNVISITED = "unvisited"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class ReferenceGraph:
    """Tracks visit state for one relation during a load session."""

    def __init__(self, relation: str) -> None:
        self.relation = relation
        self._states: Dict[str, VisitState] = {}
        self._stack: List[str] = []

    def state(self, name: str) -> VisitState:
        return self._states.get(name, VisitState.UNVISITED)

    @property
    def chain(self) -> List[str]:
        """Names currently in progress, outermost first."""
        return list(self._stack)

    def check(self, name: str) -> None:
        """Raise ``CycleError`` if entering ``name`` would close a loop."""
        if self.state(name) is VisitState.IN_PROGRESS:
            start = self._stack.index(name)
            raise CycleError(self.relation, [*self._stack[start:], name])

    @contextmanager
    def visiting(self, name: str) -> Iterator[None]:
        """Mark ``name`` in progress for the duration of the block.

        Raises:
            CycleError: If ``name`` is already in progress.
        """
        self.check(name)
        self._states[name] = VisitState.IN_PROGRESS
        self._stack.append(name)
        try:
            yield
        except BaseException:
            self._states[name] = VisitState.UNVISITED
            raise
        else:
            self._states[name] = VisitState.DONE
        finally:
            self._stack.pop()

    def reset(self) -> None:
        self._states.clear()
        self._stack.clear()


__all__ = ["VisitState", "ReferenceGraph"]
