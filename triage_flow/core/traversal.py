"""Traversal engine: walks a protocol one answer at a time.

A ``Session`` is an immutable value. Every operation returns a new session
and leaves the old one untouched, so front ends can keep, replay or
serialize sessions without any hidden state::

    session = start_session(graph)
    while not session.is_terminal:
        session = advance(session, session.options[0])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, List, Optional, Union

from triage_flow.core.config import ProtocolConfig
from triage_flow.core.errors import DanglingEdgeError, InvalidTransitionError
from triage_flow.core.graph import find_node, outgoing_edges
from triage_flow.core.history import HistoryStack
from triage_flow.core.models import Edge, Node, ProtocolGraph
from triage_flow.core.root import check_ambiguous, find_root

if TYPE_CHECKING:
    from triage_flow.storage.base import BaseGraphStore

logger = logging.getLogger(__name__)


# ── States ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Questioning:
    """Waiting for an answer to ``node``."""

    node: Node
    kind = "questioning"
    terminal = False


@dataclass(frozen=True)
class OutcomeReached:
    """An outcome node was entered; the assessment is complete."""

    node: Node
    kind = "outcome"
    terminal = True


@dataclass(frozen=True)
class DeadEnd:
    """A question with no answers was entered; the protocol is broken here."""

    node: Node
    kind = "dead_end"
    terminal = True


State = Union[Questioning, OutcomeReached, DeadEnd]


# ── Session ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Session:
    """One user's walk through one protocol snapshot.

    Attributes:
        graph: The snapshot being navigated. Never modified.
        state: Current state of the walk.
        history: Nodes left so far, used by ``step_back``.
        root_ambiguous: True when the entry node was a first-node fallback.
    """

    graph: ProtocolGraph
    state: State
    history: HistoryStack = field(default_factory=HistoryStack)
    root_ambiguous: bool = False

    @property
    def current_node(self) -> Node:
        return self.state.node

    @property
    def is_terminal(self) -> bool:
        return self.state.terminal

    @property
    def step_number(self) -> int:
        """1-based step shown to the user."""
        return self.history.peek_depth() + 1

    @property
    def options(self) -> List[Edge]:
        """Answers available from the current node, in display order."""
        if not isinstance(self.state, Questioning):
            return []
        return outgoing_edges(self.graph, self.state.node.id)

    @property
    def is_stuck(self) -> bool:
        """True while questioning a node that offers no answers.

        Only the entry node can be in this situation; any other question
        without answers is entered as ``DeadEnd``.
        """
        return isinstance(self.state, Questioning) and not self.options

    @property
    def outcome(self) -> Optional[Node]:
        if isinstance(self.state, OutcomeReached):
            return self.state.node
        return None


def enter(graph: ProtocolGraph, node: Node) -> State:
    """Classify ``node`` as the state a session is in on arriving there."""
    if node.is_outcome:
        return OutcomeReached(node)
    if not outgoing_edges(graph, node.id):
        return DeadEnd(node)
    return Questioning(node)


# ── Transitions ──────────────────────────────────────────────────────


def start_session(
    graph: ProtocolGraph, config: Optional[ProtocolConfig] = None
) -> Session:
    """Begin navigating ``graph`` at its entry node.

    The session always opens by asking the entry node, whatever it is;
    ``Session.is_stuck`` tells front ends when it offers no answers. An
    ambiguous entry emits ``AmbiguousRootWarning`` and is recorded in
    ``Session.root_ambiguous``.

    Raises:
        EmptyGraphError: If the protocol has no nodes.
        AmbiguousRootError: If ``config.strict_root`` is set and the entry
            node is not unique.
    """
    resolution = find_root(graph)
    check_ambiguous(graph, resolution, config)
    root = resolution.node
    logger.debug("Started '%s' at '%s'", graph.name, root.id)
    return Session(
        graph=graph, state=Questioning(root), root_ambiguous=resolution.ambiguous
    )


def advance(session: Session, edge: Edge) -> Session:
    """Follow the chosen answer ``edge`` from the current question.

    Raises:
        InvalidTransitionError: If the session is not questioning, or the
            edge does not leave the current node.
        DanglingEdgeError: If the edge's target is not in the protocol.
    """
    state = session.state
    if not isinstance(state, Questioning):
        raise InvalidTransitionError(
            f"Cannot answer from a {state.kind} state at '{state.node.id}'"
        )
    if edge.source != state.node.id:
        raise InvalidTransitionError(
            f"Edge '{edge.id}' leaves '{edge.source}', "
            f"but the current node is '{state.node.id}'"
        )

    target = find_node(session.graph, edge.target)
    if target is None:
        raise DanglingEdgeError(edge.target, edge_id=edge.id)

    new_state = enter(session.graph, target)
    logger.debug(
        "'%s' --%s--> '%s' (%s)", state.node.id, edge.label, target.id, new_state.kind
    )
    return replace(
        session, state=new_state, history=session.history.push(state.node)
    )


def choose(session: Session, index: int) -> Session:
    """Advance along the ``index``-th (0-based) option of the current node.

    Raises:
        InvalidTransitionError: If there is no such option.
    """
    options = session.options
    if not 0 <= index < len(options):
        raise InvalidTransitionError(
            f"Option {index} out of range, '{session.current_node.id}' "
            f"offers {len(options)} answer(s)"
        )
    return advance(session, options[index])


def step_back(session: Session) -> Session:
    """Undo the most recent answer.

    Re-enters the previous question whatever state the session is in. With
    an empty history the same session is returned unchanged.
    """
    previous, history = session.history.pop()
    if previous is None:
        return session
    logger.debug("Stepped back to '%s'", previous.id)
    return replace(session, state=Questioning(previous), history=history)


def restart(session: Session, config: Optional[ProtocolConfig] = None) -> Session:
    """Start the same protocol again with a cleared history."""
    return start_session(session.graph, config)


def load_session(
    store: "BaseGraphStore",
    graph_id: str,
    config: Optional[ProtocolConfig] = None,
) -> Session:
    """Fetch a snapshot from ``store`` and start navigating it.

    ``StoreError`` from the store propagates unchanged.
    """
    return start_session(store.get(graph_id), config)
