"""JSON exchange format for protocol snapshots and navigation sessions.

Usage::

    from triage_flow.core.serialization import dump_graph, load_graph

    dump_graph(graph, "fever.json")
    graph = load_graph("fever.json")

Snapshots look like::

    {"name": "...",
     "nodes": [{"id": "...", "label": "...", "priority": "RED"}],
     "edges": [{"id": "...", "source": "...", "target": "...", "label": "..."}]}

The reader also accepts the editor-canvas shape, where ``label`` and
``priority`` sit under a ``data`` key next to presentation fields
(position, style, handles), which are ignored.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

from triage_flow.core.errors import DanglingEdgeError
from triage_flow.core.graph import find_node
from triage_flow.core.history import HistoryStack
from triage_flow.core.models import Edge, Node, Outcome, ProtocolGraph
from triage_flow.core.traversal import (
    DeadEnd,
    OutcomeReached,
    Questioning,
    Session,
    enter,
)

_STATES = {
    Questioning.kind: Questioning,
    OutcomeReached.kind: OutcomeReached,
    DeadEnd.kind: DeadEnd,
}


def _node_to_dict(node: Node) -> Dict[str, Any]:
    data: Dict[str, Any] = {"id": node.id, "label": node.label}
    if node.priority is not None:
        data["priority"] = node.priority.value
    return data


def _edge_to_dict(edge: Edge) -> Dict[str, Any]:
    return {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "label": edge.label,
    }


def _dict_to_node(data: Dict[str, Any]) -> Node:
    if not isinstance(data, dict) or not data.get("id"):
        raise ValueError(f"Node entry without an id: {data!r}")
    extra = data.get("data") or {}
    label = data.get("label", extra.get("label"))
    priority = data.get("priority", extra.get("priority"))
    return Node(
        id=str(data["id"]),
        label="" if label is None else label,
        priority=Outcome.parse(priority),
    )


def _dict_to_edge(data: Dict[str, Any]) -> Edge:
    if not isinstance(data, dict):
        raise ValueError(f"Edge entry is not an object: {data!r}")
    source, target = data.get("source"), data.get("target")
    if not source or not target:
        raise ValueError(f"Edge entry needs a source and a target: {data!r}")
    return Edge(
        id=str(data.get("id") or f"e-{source}-{target}"),
        source=str(source),
        target=str(target),
        label="" if data.get("label") is None else data["label"],
    )


def graph_to_dict(graph: ProtocolGraph) -> Dict[str, Any]:
    return {
        "name": graph.name,
        "nodes": [_node_to_dict(n) for n in graph.nodes],
        "edges": [_edge_to_dict(e) for e in graph.edges],
    }


def graph_from_dict(data: Dict[str, Any]) -> ProtocolGraph:
    """Build a snapshot from its exchange-format dict.

    Raises:
        ValueError: If the payload or one of its entries is malformed.
    """
    if not isinstance(data, dict):
        raise ValueError("Protocol snapshot must be a JSON object")
    return ProtocolGraph(
        name=data.get("name") or "",
        nodes=[_dict_to_node(n) for n in data.get("nodes") or []],
        edges=[_dict_to_edge(e) for e in data.get("edges") or []],
    )


def dumps_graph(graph: ProtocolGraph, indent: int | None = None) -> str:
    return json.dumps(graph_to_dict(graph), indent=indent)


def loads_graph(text: str) -> ProtocolGraph:
    return graph_from_dict(json.loads(text))


def dump_graph(
    graph: ProtocolGraph,
    path: Union[str, Path],
    indent: int = 2,
) -> None:
    """Write a snapshot to a JSON file.

    Args:
        graph: Snapshot to export.
        path: File path to write to.
        indent: JSON indentation level.
    """
    Path(path).write_text(dumps_graph(graph, indent=indent), encoding="utf-8")


def load_graph(path: Union[str, Path]) -> ProtocolGraph:
    """Read a snapshot from a JSON file written by ``dump_graph`` or an editor."""
    return loads_graph(Path(path).read_text(encoding="utf-8"))


DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEMO_PROTOCOL = DATA_DIR / "fever_respiratory.json"


def load_demo_protocol() -> ProtocolGraph:
    """The bundled fever and respiratory protocol, ready to navigate."""
    return load_graph(DEMO_PROTOCOL)


# ── Sessions ─────────────────────────────────────────────────────────


def session_to_dict(session: Session) -> Dict[str, Any]:
    """Capture a session by node ids; the snapshot itself is not included."""
    return {
        "state": session.state.kind,
        "node": session.current_node.id,
        "history": [node.id for node in session.history],
        "root_ambiguous": session.root_ambiguous,
    }


def session_from_dict(data: Dict[str, Any], graph: ProtocolGraph) -> Session:
    """Rebuild a session saved by ``session_to_dict`` against ``graph``.

    Raises:
        ValueError: If the state kind is unknown, the current node is
            missing, or the state contradicts what ``graph`` says about the
            node (an "outcome" on a question, a "dead_end" with answers).
        DanglingEdgeError: If a saved node id is not in ``graph``.
    """
    try:
        state_cls = _STATES[data["state"]]
    except KeyError:
        raise ValueError(f"Unknown session state {data.get('state')!r}") from None

    def _node(node_id: str) -> Node:
        node = find_node(graph, node_id)
        if node is None:
            raise DanglingEdgeError(node_id)
        return node

    if not data.get("node"):
        raise ValueError("Saved session has no current node")
    node = _node(data["node"])
    history = HistoryStack(tuple(_node(i) for i in data.get("history", [])))

    # Only the entry question (empty history) may differ from what entering
    # the node would produce.
    expected = enter(graph, node)
    if not isinstance(expected, state_cls) and not (
        state_cls is Questioning and not history
    ):
        raise ValueError(
            f"Saved state '{data['state']}' does not match node '{node.id}', "
            f"which is entered as '{expected.kind}'"
        )

    return Session(
        graph=graph,
        state=state_cls(node),
        history=history,
        root_ambiguous=bool(data.get("root_ambiguous", False)),
    )
