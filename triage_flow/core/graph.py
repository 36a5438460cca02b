"""Read-only queries and structural validation over a protocol snapshot."""

from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass, field
from typing import List, Optional

from triage_flow.core.models import Edge, Node, ProtocolGraph

ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True)
class Violation:
    """One problem found in a protocol.

    Attributes:
        kind: Machine-readable category, e.g. ``"dangling_target"``.
        message: Human-readable description for authoring tools.
        severity: ``"error"`` for broken invariants, ``"warning"`` for
            structures that navigate but probably are not what the author
            intended.
        element_id: Id of the offending node or edge, if any.
    """

    kind: str
    message: str
    severity: str = ERROR
    element_id: Optional[str] = None


@dataclass
class ValidationResult:
    """All problems found in one pass over a protocol."""

    violations: List[Violation] = field(default_factory=list)

    @property
    def errors(self) -> List[Violation]:
        return [v for v in self.violations if v.severity == ERROR]

    @property
    def warnings(self) -> List[Violation]:
        return [v for v in self.violations if v.severity == WARNING]

    @property
    def ok(self) -> bool:
        """True when no invariant is broken. Warnings do not count."""
        return not self.errors

    def kinds(self) -> List[str]:
        return [v.kind for v in self.violations]

    def __bool__(self) -> bool:
        return self.ok


# ── Queries ──────────────────────────────────────────────────────────


def find_node(graph: ProtocolGraph, node_id: str) -> Optional[Node]:
    """Return the first node with ``node_id``, or None."""
    for node in graph.nodes:
        if node.id == node_id:
            return node
    return None


def find_edge(graph: ProtocolGraph, edge_id: str) -> Optional[Edge]:
    for edge in graph.edges:
        if edge.id == edge_id:
            return edge
    return None


def outgoing_edges(graph: ProtocolGraph, node_id: str) -> List[Edge]:
    """Edges leaving ``node_id``, in insertion order.

    This order is the order answers are offered in during navigation.
    """
    return [edge for edge in graph.edges if edge.source == node_id]


def incoming_edges(graph: ProtocolGraph, node_id: str) -> List[Edge]:
    return [edge for edge in graph.edges if edge.target == node_id]


def rootless_nodes(graph: ProtocolGraph) -> List[Node]:
    """Nodes that no edge points at, in insertion order."""
    targets = {edge.target for edge in graph.edges}
    return [node for node in graph.nodes if node.id not in targets]


def reachable_from(graph: ProtocolGraph, node_id: str) -> List[Node]:
    """Breadth-first walk from ``node_id`` following answer order.

    Includes the start node. Cycles and dangling targets are skipped.
    Outcome nodes are visited but not expanded, since navigation stops there.
    """
    start = find_node(graph, node_id)
    if start is None:
        return []

    visited: set[str] = {start.id}
    queue: deque[Node] = deque([start])
    result: List[Node] = []

    while queue:
        node = queue.popleft()
        result.append(node)
        if node.is_outcome:
            continue
        for edge in outgoing_edges(graph, node.id):
            if edge.target in visited:
                continue
            target = find_node(graph, edge.target)
            if target is None:
                continue
            visited.add(target.id)
            queue.append(target)

    return result


# ── Validation ───────────────────────────────────────────────────────


def validate_structure(graph: ProtocolGraph) -> ValidationResult:
    """Check a protocol's invariants and collect every problem found.

    Errors (broken invariants): duplicate node ids, duplicate edge ids,
    edges whose source or target is not a node.

    Warnings (navigable, but suspicious): empty protocol, no entry node or
    several candidate entry nodes, question nodes without answers, nodes
    unreachable from the entry node, edges without a label.
    """
    result = ValidationResult()
    violations = result.violations

    node_counts = Counter(node.id for node in graph.nodes)
    for node_id, count in node_counts.items():
        if count > 1:
            violations.append(
                Violation(
                    "duplicate_node_id",
                    f"Node id '{node_id}' is used by {count} nodes",
                    element_id=node_id,
                )
            )

    edge_counts = Counter(edge.id for edge in graph.edges)
    for edge_id, count in edge_counts.items():
        if count > 1:
            violations.append(
                Violation(
                    "duplicate_edge_id",
                    f"Edge id '{edge_id}' is used by {count} edges",
                    element_id=edge_id,
                )
            )

    for edge in graph.edges:
        if edge.source not in node_counts:
            violations.append(
                Violation(
                    "dangling_source",
                    f"Edge '{edge.id}' starts at missing node '{edge.source}'",
                    element_id=edge.id,
                )
            )
        if edge.target not in node_counts:
            violations.append(
                Violation(
                    "dangling_target",
                    f"Edge '{edge.id}' points at missing node '{edge.target}'",
                    element_id=edge.id,
                )
            )
        if not edge.label.strip():
            violations.append(
                Violation(
                    "unlabeled_edge",
                    f"Edge '{edge.id}' has no answer label",
                    severity=WARNING,
                    element_id=edge.id,
                )
            )

    if graph.is_empty:
        violations.append(
            Violation("empty_graph", "Protocol has no nodes", severity=WARNING)
        )
        return result

    roots = rootless_nodes(graph)
    if not roots:
        violations.append(
            Violation(
                "no_root",
                "Every node has an incoming edge, so there is no entry question",
                severity=WARNING,
            )
        )
    elif len(roots) > 1:
        ids = ", ".join(node.id for node in roots)
        violations.append(
            Violation(
                "multiple_roots",
                f"Several nodes have no incoming edge: {ids}",
                severity=WARNING,
            )
        )

    for node in graph.nodes:
        if not node.is_outcome and not outgoing_edges(graph, node.id):
            violations.append(
                Violation(
                    "dead_end",
                    f"Question '{node.id}' has no answers",
                    severity=WARNING,
                    element_id=node.id,
                )
            )

    entry = roots[0] if len(roots) == 1 else graph.nodes[0]
    reached = {node.id for node in reachable_from(graph, entry.id)}
    for node in graph.nodes:
        if node.id not in reached:
            violations.append(
                Violation(
                    "unreachable",
                    f"Node '{node.id}' cannot be reached from entry node '{entry.id}'",
                    severity=WARNING,
                    element_id=node.id,
                )
            )

    return result
