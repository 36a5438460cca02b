"""Authoring session: incremental, validated edits to a protocol draft.

Connections are made in two steps. A gesture proposes an unlabelled
``PendingEdge``; the author then confirms it with a label (blank means the
configured default, "Yes") or cancels it. Only one connection can be
pending at a time.

Example::

    draft = AuthoringSession(name="Fever triage")
    fever = draft.add_question_node("Does the patient have a fever?")
    er = draft.add_outcome_node(Outcome.RED)
    pending = draft.propose_edge(fever.id, er.id)
    draft.confirm_edge(pending, "Yes")
    draft.save(store, identity)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Callable, List, Optional, Union

from triage_flow.core.config import ProtocolConfig
from triage_flow.core.errors import (
    EmptyGraphError,
    PermissionDeniedError,
    StalePendingEdgeError,
    UnknownNodeError,
)
from triage_flow.core.graph import ValidationResult, validate_structure
from triage_flow.core.models import Edge, Node, Outcome, ProtocolGraph

if TYPE_CHECKING:
    from triage_flow.adapters.base import BaseIdentityContext
    from triage_flow.storage.base import BaseGraphStore

logger = logging.getLogger(__name__)

_UNCHANGED = object()


def _generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class PendingEdge:
    """A proposed connection still waiting for its label."""

    source: str
    target: str


class AuthoringSession:
    """Owns one protocol draft from the start of authoring until save or discard.

    Args:
        name: Protocol name. Defaults to ``config.default_protocol_name``.
        graph: Existing snapshot to continue editing. Its name is used when
            ``name`` is not given.
        config: Authoring defaults.
        id_factory: Called with an id prefix to mint node ids.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        graph: Optional[ProtocolGraph] = None,
        config: Optional[ProtocolConfig] = None,
        id_factory: Optional[Callable[[str], str]] = None,
    ) -> None:
        self._config = config or ProtocolConfig()
        self._id_factory = id_factory or _generate_id
        self._nodes: List[Node] = list(graph.nodes) if graph else []
        self._edges: List[Edge] = list(graph.edges) if graph else []
        if name is None:
            name = graph.name if graph else self._config.default_protocol_name
        self.name = name
        self._pending: Optional[PendingEdge] = None

    @classmethod
    def with_starter_question(
        cls,
        name: Optional[str] = None,
        config: Optional[ProtocolConfig] = None,
        id_factory: Optional[Callable[[str], str]] = None,
    ) -> "AuthoringSession":
        """New draft seeded with one placeholder question to build from."""
        draft = cls(name=name, config=config, id_factory=id_factory)
        draft.add_node(
            Node(
                id=draft._config.starter_node_id,
                label=draft._config.starter_question_label,
            )
        )
        return draft

    @property
    def pending(self) -> Optional[PendingEdge]:
        return self._pending

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes)

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    # ── Nodes ────────────────────────────────────────────────────────

    def add_question_node(self, label: Optional[str] = None) -> Node:
        node = Node(
            id=self._new_node_id(self._config.question_id_prefix),
            label=label if label is not None else self._config.question_label,
        )
        return self._add_node(node)

    def add_outcome_node(
        self, priority: Union[Outcome, str], label: Optional[str] = None
    ) -> Node:
        outcome = Outcome.parse(priority)
        if outcome is None:
            raise ValueError("Outcome nodes need a priority")
        node = Node(
            id=self._new_node_id(self._config.outcome_id_prefix),
            label=label if label is not None else outcome.default_label,
            priority=outcome,
        )
        return self._add_node(node)

    def add_node(self, node: Node) -> Node:
        """Add a node with a caller-chosen id.

        Raises:
            ValueError: If the id is already used in the draft.
        """
        if self._find_node(node.id) is not None:
            raise ValueError(f"Node id '{node.id}' already exists")
        return self._add_node(node)

    def update_node(
        self,
        node_id: str,
        label: Optional[str] = None,
        priority: object = _UNCHANGED,
    ) -> Node:
        """Change a node's label and/or priority.

        Passing ``priority=None`` turns an outcome back into a question.
        """
        index = self._node_index(node_id)
        changes = {}
        if label is not None:
            changes["label"] = label
        if priority is not _UNCHANGED:
            changes["priority"] = Outcome.parse(priority)
        node = replace(self._nodes[index], **changes)
        self._nodes[index] = node
        logger.debug("Updated node '%s'", node_id)
        return node

    def remove_node(self, node_id: str) -> Node:
        """Remove a node along with every edge touching it."""
        node = self._nodes.pop(self._node_index(node_id))
        self._edges = [
            e for e in self._edges if e.source != node_id and e.target != node_id
        ]
        if self._pending is not None and node_id in (
            self._pending.source,
            self._pending.target,
        ):
            self._pending = None
        logger.debug("Removed node '%s'", node_id)
        return node

    # ── Edges ────────────────────────────────────────────────────────

    def propose_edge(self, source: str, target: str) -> PendingEdge:
        """Hold a connection from ``source`` to ``target`` until it is labelled.

        Replaces any connection that is still pending.

        Raises:
            UnknownNodeError: If either endpoint is not in the draft.
        """
        for node_id in (source, target):
            if self._find_node(node_id) is None:
                raise UnknownNodeError(node_id)
        if self._pending is not None:
            logger.debug(
                "Discarding unconfirmed edge %s -> %s",
                self._pending.source,
                self._pending.target,
            )
        self._pending = PendingEdge(source=source, target=target)
        return self._pending

    def confirm_edge(self, pending: PendingEdge, label: str = "") -> Edge:
        """Commit ``pending`` to the draft with ``label``.

        Two nodes are joined at most once in each direction: confirming a
        connection that already exists returns the existing edge unchanged.

        Raises:
            StalePendingEdgeError: If ``pending`` is not the connection
                currently waiting for a label.
            UnknownNodeError: If an endpoint was removed meanwhile.
        """
        if self._pending is None or pending is not self._pending:
            raise StalePendingEdgeError(
                f"Edge {pending.source} -> {pending.target} is no longer pending"
            )
        for node_id in (pending.source, pending.target):
            if self._find_node(node_id) is None:
                raise UnknownNodeError(node_id)

        for existing in self._edges:
            if existing.source == pending.source and existing.target == pending.target:
                self._pending = None
                logger.debug(
                    "%s -> %s already connected as '%s'",
                    existing.source,
                    existing.target,
                    existing.id,
                )
                return existing

        label = (label or "").strip() or self._config.default_edge_label
        edge = Edge(
            id=self._new_edge_id(pending.source, pending.target),
            source=pending.source,
            target=pending.target,
            label=label,
        )
        self._edges.append(edge)
        self._pending = None
        logger.debug("Connected %s -> %s as '%s'", edge.source, edge.target, label)
        return edge

    def cancel_edge(self) -> None:
        self._pending = None

    def remove_edge(self, edge_id: str) -> Edge:
        for index, edge in enumerate(self._edges):
            if edge.id == edge_id:
                return self._edges.pop(index)
        raise KeyError(f"Edge '{edge_id}' not found")

    # ── Whole draft ──────────────────────────────────────────────────

    def rename(self, name: str) -> None:
        self.name = name

    def snapshot(self) -> ProtocolGraph:
        return ProtocolGraph(name=self.name, nodes=self._nodes, edges=self._edges)

    def validate(self) -> ValidationResult:
        return validate_structure(self.snapshot())

    def save(
        self,
        store: "BaseGraphStore",
        identity: "BaseIdentityContext",
        graph_id: Optional[str] = None,
    ) -> str:
        """Persist the draft through ``store`` if ``identity`` may do so.

        Returns:
            The id the store saved the protocol under.

        Raises:
            EmptyGraphError: If the draft has no nodes.
            PermissionDeniedError: If the identity context refuses the save.
            StoreError: Passed through from the store.
        """
        if not self._nodes:
            raise EmptyGraphError(self.name)
        if not identity.can_save(graph_id):
            raise PermissionDeniedError(identity.principal, graph_id)
        saved_id = store.save(self.snapshot(), graph_id)
        logger.info(
            "%s saved protocol '%s' as %s", identity.principal, self.name, saved_id
        )
        return saved_id

    # ── Internals ────────────────────────────────────────────────────

    def _add_node(self, node: Node) -> Node:
        self._nodes.append(node)
        logger.debug("Added node '%s'", node.id)
        return node

    def _find_node(self, node_id: str) -> Optional[Node]:
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    def _node_index(self, node_id: str) -> int:
        for index, node in enumerate(self._nodes):
            if node.id == node_id:
                return index
        raise UnknownNodeError(node_id)

    def _new_node_id(self, prefix: str) -> str:
        node_id = self._id_factory(prefix)
        if self._find_node(node_id) is not None:
            raise ValueError(f"Node id '{node_id}' already exists")
        return node_id

    def _new_edge_id(self, source: str, target: str) -> str:
        base = f"e-{source}-{target}"
        taken = {edge.id for edge in self._edges}
        edge_id = base
        suffix = 2
        while edge_id in taken:
            edge_id = f"{base}-{suffix}"
            suffix += 1
        return edge_id
