"""Exception hierarchy for triageflow.

Structural problems found by ``validate_structure`` are collected, not
raised. The classes below are for conditions that stop an operation.
"""

from __future__ import annotations

from typing import Optional


class TriageFlowError(Exception):
    """Base exception for all triageflow errors."""


class EmptyGraphError(TriageFlowError, ValueError):
    """The protocol has no nodes, so there is nothing to navigate or save."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        label = f" '{name}'" if name else ""
        super().__init__(f"Protocol{label} has no nodes")


class AmbiguousRootError(TriageFlowError, ValueError):
    """Raised instead of degrading when strict root resolution is enabled."""

    def __init__(self, candidates: tuple[str, ...]) -> None:
        self.candidates = candidates
        if candidates:
            detail = f"{len(candidates)} nodes without incoming edges: {', '.join(candidates)}"
        else:
            detail = "every node has an incoming edge"
        super().__init__(f"Cannot determine a unique entry node ({detail})")


class AmbiguousRootWarning(UserWarning):
    """Root resolution fell back to the first node in insertion order."""


class DanglingEdgeError(TriageFlowError, LookupError):
    """An edge (or a reference to a node) points at a node that does not exist."""

    def __init__(self, node_id: str, edge_id: Optional[str] = None) -> None:
        self.node_id = node_id
        self.edge_id = edge_id
        if edge_id is not None:
            message = f"Edge '{edge_id}' points at missing node '{node_id}'"
        else:
            message = f"Node '{node_id}' not found in protocol"
        super().__init__(message)


class UnknownNodeError(DanglingEdgeError):
    """An authoring edit referenced a node that is not in the draft."""


class InvalidTransitionError(TriageFlowError, RuntimeError):
    """A traversal or authoring call was made in a state that does not allow it."""


class StalePendingEdgeError(InvalidTransitionError):
    """The pending edge being confirmed was replaced, cancelled or never proposed."""


class StoreError(TriageFlowError):
    """Opaque failure reported by a graph store backend."""


class PermissionDeniedError(TriageFlowError, PermissionError):
    """The identity context refused an authoring action."""

    def __init__(self, principal: str, graph_id: Optional[str] = None) -> None:
        self.principal = principal
        self.graph_id = graph_id
        target = f"protocol '{graph_id}'" if graph_id else "a new protocol"
        super().__init__(f"'{principal}' is not allowed to save {target}")
