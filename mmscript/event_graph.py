"""
mmscript.event_graph
====================

Builds the event dependency graph of a mission script.

The graph is a directed graph where:

- **Nodes** are event names (every defined block, plus any name that is
  only ever referenced as a target).
- **Edges** run from the event whose block contains the reference to the
  referenced event, annotated with the syntactic form and the line.

Edge kinds
----------
``call``          ``Other::;`` inside a block
``whenTrigger``   ``when(cond)[Other]`` inside a block
``callCommand``   ``call:Other`` inside a block
``ifTrigger``     ``if(cond)[Other]`` inside a block

Self references are never edges.  Parallel edges of different kinds or on
different lines are all kept in :attr:`EventGraph.edges`; graph algorithms
use :meth:`EventGraph.successors`, which collapses them.

Typical usage::

    from mmscript.declarations import collect_declarations
    from mmscript.event_graph import build_event_graph

    graph = build_event_graph(collect_declarations(text))
    for name in graph.nodes:
        print(name, "->", graph.successors(name))
    print(graph.to_dot())
"""

from __future__ import annotations

import enum
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from mmscript.declarations import ScriptDeclarations
from mmscript.grammar import find_call_commands, find_invocations, find_triggers

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Edge kinds
# ---------------------------------------------------------------------------

class EdgeKind(enum.Enum):
    """Syntactic form that produced an edge."""

    CALL         = "call"
    WHEN_TRIGGER = "whenTrigger"
    CALL_COMMAND = "callCommand"
    IF_TRIGGER   = "ifTrigger"


# ---------------------------------------------------------------------------
# EventGraphEdge
# ---------------------------------------------------------------------------

class EventGraphEdge:
    """A directed edge ``source -> target``.

    Attributes
    ----------
    source : str
        Event whose block contains the reference.
    target : str
        Referenced event.
    kind : EdgeKind
        How the reference was written.
    line : int
        Line of the reference.
    """

    __slots__ = ("source", "target", "kind", "line")

    def __init__(self, source: str, target: str, kind: EdgeKind,
                 line: int) -> None:
        self.source = source
        self.target = target
        self.kind = kind
        self.line = line

    def __repr__(self) -> str:
        return (
            f"EventGraphEdge({self.source} -> {self.target}, "
            f"{self.kind.value} @ {self.line})"
        )

    def __hash__(self) -> int:
        return hash((self.source, self.target, self.kind, self.line))

    def __eq__(self, other) -> bool:
        if isinstance(other, EventGraphEdge):
            return (
                self.source == other.source
                and self.target == other.target
                and self.kind == other.kind
                and self.line == other.line
            )
        return NotImplemented


# ---------------------------------------------------------------------------
# EventGraph
# ---------------------------------------------------------------------------

class EventGraph:
    """Event dependency graph.

    Attributes
    ----------
    nodes : OrderedDict[str, bool]
        Every node in first-seen order; the value tells whether the event
        has a block of its own.
    edges : list[EventGraphEdge]
        All edges in discovery order.
    """

    def __init__(self) -> None:
        self.nodes: "OrderedDict[str, bool]" = OrderedDict()
        self.edges: List[EventGraphEdge] = []
        # source -> target -> first edge (keeps the adjacency ordered)
        self._adjacency: Dict[str, "OrderedDict[str, EventGraphEdge]"] = {}

    # ----- construction -----------------------------------------------------

    def add_node(self, name: str, defined: bool = False) -> None:
        if name not in self.nodes:
            self.nodes[name] = defined
            self._adjacency[name] = OrderedDict()
        elif defined:
            self.nodes[name] = True

    def add_edge(self, source: str, target: str, kind: EdgeKind,
                 line: int) -> Optional[EventGraphEdge]:
        """Record an edge; self references are dropped and return ``None``."""
        if source == target:
            return None
        self.add_node(source)
        self.add_node(target)
        edge = EventGraphEdge(source, target, kind, line)
        self.edges.append(edge)
        self._adjacency[source].setdefault(target, edge)
        return edge

    # ----- queries ----------------------------------------------------------

    def successors(self, name: str) -> List[str]:
        """Distinct targets of *name* in first-seen order."""
        return list(self._adjacency.get(name, ()))

    def edge_between(self, source: str, target: str) -> Optional[EventGraphEdge]:
        """The first edge recorded from *source* to *target*."""
        return self._adjacency.get(source, {}).get(target)

    def adjacency(self) -> Dict[str, List[str]]:
        """Plain ``event -> [event]`` mapping."""
        return {name: self.successors(name) for name in self.nodes}

    def is_defined(self, name: str) -> bool:
        return self.nodes.get(name, False)

    def undefined_targets(self) -> List[EventGraphEdge]:
        """Edges whose target has no block of its own."""
        return [e for e in self.edges if not self.is_defined(e.target)]

    def statistics(self) -> Dict[str, Any]:
        by_kind = {kind.value: 0 for kind in EdgeKind}
        for e in self.edges:
            by_kind[e.kind.value] += 1
        return {
            "nodes": len(self.nodes),
            "defined_events": sum(1 for d in self.nodes.values() if d),
            "edges": len(self.edges),
            **by_kind,
        }

    # ----- serialisation ----------------------------------------------------

    def to_dot(self, title: Optional[str] = None) -> str:
        """Return a Graphviz DOT representation."""
        lines = ["digraph EventGraph {"]
        lines.append("  rankdir=LR;")
        if title:
            lines.append(f'  label="{title}";')
        lines.append('  node [shape=box, fontname="Helvetica", fontsize=10];')

        for name, defined in self.nodes.items():
            escaped = name.replace('"', '\\"')
            if defined:
                attrs = 'style=filled, fillcolor="#ddeeff"'
            else:
                attrs = 'style=filled, fillcolor="#ffcccc", shape=diamond'
            lines.append(f'  "{escaped}" [{attrs}];')

        kind_attrs = {
            EdgeKind.CALL: "",
            EdgeKind.WHEN_TRIGGER: ", style=dashed, color=blue",
            EdgeKind.CALL_COMMAND: ", color=darkgreen",
            EdgeKind.IF_TRIGGER: ", style=dotted, color=purple",
        }
        for e in self.edges:
            lines.append(
                f'  "{e.source}" -> "{e.target}" '
                f'[label="{e.kind.value}:{e.line}"{kind_attrs[e.kind]}];'
            )
        lines.append("}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"EventGraph(nodes={len(self.nodes)}, edges={len(self.edges)})"


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def build_event_graph(decls: ScriptDeclarations) -> EventGraph:
    """Derive the event graph from collected declarations."""
    graph = EventGraph()
    for ev in decls.events:
        graph.add_node(ev.name, defined=True)

    for ev in decls.events:
        for number, code in ev.iter_code():
            for callee in find_invocations(code):
                graph.add_edge(ev.name, callee, EdgeKind.CALL, number)
            for trig in find_triggers(code):
                kind = (EdgeKind.WHEN_TRIGGER if trig.keyword == "when"
                        else EdgeKind.IF_TRIGGER)
                graph.add_edge(ev.name, trig.target, kind, number)
            for target in find_call_commands(code):
                graph.add_edge(ev.name, target, EdgeKind.CALL_COMMAND, number)

    logger.debug("built %r", graph)
    return graph


__all__ = [
    "EdgeKind",
    "EventGraphEdge",
    "EventGraph",
    "build_event_graph",
]
