# tests/test_event_graph.py
"""
Tests for event graph construction and DOT export.
"""

import pytest

from mmscript.declarations import collect_declarations
from mmscript.event_graph import EdgeKind, EventGraph, build_event_graph

SCRIPT = "\n".join([
    "Start::",                   # 1
    "when(ore>=5)[Mine]",        # 2
    "if(crystals>=3)[Bonus]",    # 3
    "call:Finish;",              # 4
    "Mine::;",                   # 5
    "Start::;",                  # 6  self reference
    "Mine::",                    # 7
    "msg:Digging;",              # 8
])


@pytest.fixture
def graph():
    return build_event_graph(collect_declarations(SCRIPT))


class TestBuild:

    def test_nodes(self, graph):
        assert list(graph.nodes) == ["Start", "Mine", "Bonus", "Finish"]
        assert graph.is_defined("Start")
        assert graph.is_defined("Mine")
        assert not graph.is_defined("Bonus")

    def test_edge_kinds_and_lines(self, graph):
        assert [(e.target, e.kind, e.line) for e in graph.edges] == [
            ("Mine", EdgeKind.WHEN_TRIGGER, 2),
            ("Bonus", EdgeKind.IF_TRIGGER, 3),
            ("Finish", EdgeKind.CALL_COMMAND, 4),
            ("Mine", EdgeKind.CALL, 5),
        ]

    def test_self_references_are_dropped(self, graph):
        assert "Start" not in graph.successors("Start")

    def test_successors_collapse_parallel_edges(self, graph):
        assert graph.successors("Start") == ["Mine", "Bonus", "Finish"]
        assert graph.successors("Mine") == []

    def test_edge_between_returns_first_edge(self, graph):
        edge = graph.edge_between("Start", "Mine")
        assert edge.kind is EdgeKind.WHEN_TRIGGER
        assert edge.line == 2
        assert graph.edge_between("Mine", "Start") is None

    def test_undefined_targets(self, graph):
        assert sorted(e.target for e in graph.undefined_targets()) == [
            "Bonus", "Finish",
        ]

    def test_top_level_triggers_are_not_edges(self):
        g = build_event_graph(collect_declarations(
            "when(a==1)[A]\nA::\nmsg:Hi;\n"))
        assert g.edges == []
        assert list(g.nodes) == ["A"]

    def test_statistics(self, graph):
        stats = graph.statistics()
        assert stats["nodes"] == 4
        assert stats["defined_events"] == 2
        assert stats["edges"] == 4
        assert stats["call"] == 1
        assert stats["whenTrigger"] == 1


class TestGraphApi:

    def test_add_edge_self_loop(self):
        g = EventGraph()
        assert g.add_edge("A", "A", EdgeKind.CALL, 1) is None
        assert g.edges == []

    def test_adjacency(self):
        g = EventGraph()
        g.add_edge("A", "B", EdgeKind.CALL, 1)
        g.add_edge("B", "C", EdgeKind.CALL, 2)
        assert g.adjacency() == {"A": ["B"], "B": ["C"], "C": []}


class TestDot:

    def test_dot_output(self, graph):
        dot = graph.to_dot(title="demo")
        assert dot.startswith("digraph EventGraph {")
        assert 'label="demo";' in dot
        assert '"Start" -> "Mine" [label="whenTrigger:2"' in dot
        assert dot.rstrip().endswith("}")
