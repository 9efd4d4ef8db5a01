"""
mmscript.cycles
===============

Circular dependency detection over the event graph.

For every event (in definition order) a depth-first search runs with a
fresh visited set while carrying the current path.  Reaching an event that
is already on the path closes a cycle, reported as the sub-path from that
event's first occurrence plus the event again, e.g. ``[A, B, A]``.

Two cycles with the same member set are the same report: rotations and
direction variants collapse onto whichever was discovered first.  The
reported line is the line of the edge that closes the cycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Set, Tuple

from mmscript.declarations import collect_declarations
from mmscript.event_graph import EventGraph, build_event_graph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CircularDependency:
    events: Tuple[str, ...]
    line: int

    @property
    def members(self) -> Tuple[str, ...]:
        """Distinct events of the cycle, sorted."""
        return tuple(sorted(set(self.events)))

    def describe(self) -> str:
        return " -> ".join(self.events)


def find_cycles(graph: EventGraph) -> List[CircularDependency]:
    """Return the de-duplicated cycles of *graph*."""
    cycles: List[CircularDependency] = []
    reported: Set[Tuple[str, ...]] = set()

    for start in graph.nodes:
        visited: Set[str] = set()
        # (event, path leading to it); children are pushed in reverse so
        # they pop in adjacency order
        stack: List[Tuple[str, List[str]]] = [(start, [])]
        while stack:
            event, path = stack.pop()
            if event in path:
                cycle = path[path.index(event):] + [event]
                key = tuple(sorted(set(cycle)))
                if key not in reported:
                    reported.add(key)
                    closing = graph.edge_between(path[-1], event)
                    cycles.append(CircularDependency(
                        events=tuple(cycle),
                        line=closing.line if closing is not None else 0,
                    ))
                continue
            if event in visited:
                continue
            visited.add(event)
            next_path = path + [event]
            for succ in reversed(graph.successors(event)):
                stack.append((succ, next_path))

    logger.debug("found %d circular dependenc(ies)", len(cycles))
    return cycles


def detect_circular_dependencies(script_text: str) -> List[CircularDependency]:
    """Find circular event dependencies in *script_text*."""
    return find_cycles(build_event_graph(collect_declarations(script_text)))


__all__ = [
    "CircularDependency",
    "find_cycles",
    "detect_circular_dependencies",
]
