"""Tests for graph queries and structural validation."""

from triage_flow.core.graph import (
    ERROR,
    WARNING,
    find_edge,
    find_node,
    incoming_edges,
    outgoing_edges,
    reachable_from,
    rootless_nodes,
    validate_structure,
)
from triage_flow.core.models import Edge, Node, Outcome, ProtocolGraph


def _make_graph():
    """Helper: fever question with two answers and one follow-up."""
    return ProtocolGraph(
        name="Fever",
        nodes=[
            Node(id="q1", label="Fever?"),
            Node(id="q2", label="Over 103F?"),
            Node(id="red", label="Emergency", priority=Outcome.RED),
            Node(id="green", label="Home care", priority=Outcome.GREEN),
        ],
        edges=[
            Edge(id="e1", source="q1", target="q2", label="Yes"),
            Edge(id="e2", source="q1", target="green", label="No"),
            Edge(id="e3", source="q2", target="red", label="Yes"),
            Edge(id="e4", source="q2", target="green", label="No"),
        ],
    )


class TestQueries:
    def test_find_node(self):
        g = _make_graph()
        assert find_node(g, "q2").label == "Over 103F?"

    def test_find_missing_node_returns_none(self):
        assert find_node(_make_graph(), "nope") is None

    def test_find_edge(self):
        assert find_edge(_make_graph(), "e3").target == "red"
        assert find_edge(_make_graph(), "nope") is None

    def test_outgoing_edges_in_insertion_order(self):
        edges = outgoing_edges(_make_graph(), "q1")
        assert [e.id for e in edges] == ["e1", "e2"]

    def test_outgoing_edges_of_leaf_is_empty(self):
        assert outgoing_edges(_make_graph(), "red") == []

    def test_outgoing_edges_is_stable(self):
        g = _make_graph()
        assert outgoing_edges(g, "q2") == outgoing_edges(g, "q2")

    def test_incoming_edges(self):
        edges = incoming_edges(_make_graph(), "green")
        assert [e.id for e in edges] == ["e2", "e4"]

    def test_rootless_nodes(self):
        assert [n.id for n in rootless_nodes(_make_graph())] == ["q1"]


class TestReachableFrom:
    def test_walks_in_answer_order(self):
        ids = [n.id for n in reachable_from(_make_graph(), "q1")]
        assert ids == ["q1", "q2", "green", "red"]

    def test_missing_start(self):
        assert reachable_from(_make_graph(), "nope") == []

    def test_cycle_terminates(self):
        g = ProtocolGraph(
            nodes=[Node(id="a"), Node(id="b")],
            edges=[
                Edge(id="ab", source="a", target="b"),
                Edge(id="ba", source="b", target="a"),
            ],
        )
        assert [n.id for n in reachable_from(g, "a")] == ["a", "b"]

    def test_outcome_edges_not_followed(self):
        g = ProtocolGraph(
            nodes=[
                Node(id="q"),
                Node(id="red", priority=Outcome.RED),
                Node(id="after"),
            ],
            edges=[
                Edge(id="e1", source="q", target="red"),
                Edge(id="e2", source="red", target="after"),
            ],
        )
        assert [n.id for n in reachable_from(g, "q")] == ["q", "red"]


class TestValidateStructure:
    def test_valid_graph(self):
        result = validate_structure(_make_graph())
        assert result.ok
        assert result.violations == []

    def test_duplicate_node_ids(self):
        g = ProtocolGraph(nodes=[Node(id="a"), Node(id="a")])
        result = validate_structure(g)
        assert not result.ok
        assert "duplicate_node_id" in [v.kind for v in result.errors]

    def test_duplicate_edge_ids(self):
        g = ProtocolGraph(
            nodes=[Node(id="a"), Node(id="b", priority=Outcome.GREEN)],
            edges=[
                Edge(id="e", source="a", target="b", label="Yes"),
                Edge(id="e", source="a", target="b", label="No"),
            ],
        )
        assert validate_structure(g).kinds() == ["duplicate_edge_id"]

    def test_dangling_references(self):
        g = ProtocolGraph(
            nodes=[Node(id="a"), Node(id="b", priority=Outcome.GREEN)],
            edges=[
                Edge(id="ok", source="a", target="b", label="Yes"),
                Edge(id="bad1", source="ghost", target="b", label="Yes"),
                Edge(id="bad2", source="a", target="nowhere", label="No"),
            ],
        )
        errors = validate_structure(g).errors
        assert [(v.kind, v.element_id) for v in errors] == [
            ("dangling_source", "bad1"),
            ("dangling_target", "bad2"),
        ]

    def test_collects_all_problems_at_once(self):
        g = ProtocolGraph(
            nodes=[Node(id="a"), Node(id="a")],
            edges=[
                Edge(id="e", source="a", target="x"),
                Edge(id="e", source="y", target="a"),
            ],
        )
        kinds = [v.kind for v in validate_structure(g).errors]
        assert sorted(kinds) == [
            "dangling_source",
            "dangling_target",
            "duplicate_edge_id",
            "duplicate_node_id",
        ]

    def test_empty_graph_is_warning(self):
        result = validate_structure(ProtocolGraph())
        assert result.ok
        assert result.kinds() == ["empty_graph"]

    def test_outcome_with_outgoing_edges_allowed(self):
        g = ProtocolGraph(
            nodes=[Node(id="q"), Node(id="red", priority=Outcome.RED), Node(id="x", priority=Outcome.GREEN)],
            edges=[
                Edge(id="e1", source="q", target="red", label="Yes"),
                Edge(id="e2", source="red", target="x", label="Then"),
            ],
        )
        result = validate_structure(g)
        assert result.ok
        assert "unreachable" in result.kinds()

    def test_warnings(self):
        g = ProtocolGraph(
            nodes=[Node(id="q1"), Node(id="q2"), Node(id="stuck")],
            edges=[Edge(id="e", source="q1", target="stuck")],
        )
        result = validate_structure(g)
        assert result.ok
        assert all(v.severity == WARNING for v in result.violations)
        kinds = result.kinds()
        assert "multiple_roots" in kinds
        assert "dead_end" in kinds
        assert "unlabeled_edge" in kinds
        assert "unreachable" in kinds

    def test_cycle_without_entry_warns(self):
        g = ProtocolGraph(
            nodes=[Node(id="a"), Node(id="b")],
            edges=[
                Edge(id="ab", source="a", target="b", label="Yes"),
                Edge(id="ba", source="b", target="a", label="No"),
            ],
        )
        assert validate_structure(g).kinds() == ["no_root"]

    def test_error_severity(self):
        g = ProtocolGraph(nodes=[Node(id="a"), Node(id="a")])
        violation = validate_structure(g).errors[0]
        assert violation.severity == ERROR
        assert violation.element_id == "a"

    def test_result_truthiness(self):
        assert validate_structure(_make_graph())
        assert not validate_structure(ProtocolGraph(nodes=[Node(id="a"), Node(id="a")]))
