"""Entry node resolution.

The entry node is the one node that no edge points at. Protocols with no
such node (a cycle) or several (disconnected fragments) still navigate:
resolution falls back to the first node in authoring order and flags the
result as ambiguous so callers can warn about it.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Optional, Tuple

from triage_flow.core.config import ProtocolConfig
from triage_flow.core.errors import (
    AmbiguousRootError,
    AmbiguousRootWarning,
    EmptyGraphError,
)
from triage_flow.core.graph import rootless_nodes
from triage_flow.core.models import Node, ProtocolGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RootResolution:
    """Outcome of root resolution.

    Attributes:
        node: The entry node to start navigation from.
        candidates: Ids of every node without an incoming edge.
        ambiguous: True when ``node`` is the first-node fallback.
    """

    node: Node
    candidates: Tuple[str, ...]
    ambiguous: bool


def find_root(graph: ProtocolGraph) -> RootResolution:
    """Resolve the entry node without emitting any warning.

    Raises:
        EmptyGraphError: If the protocol has no nodes.
    """
    if graph.is_empty:
        raise EmptyGraphError(graph.name)

    candidates = rootless_nodes(graph)
    ids = tuple(node.id for node in candidates)
    if len(candidates) == 1:
        return RootResolution(node=candidates[0], candidates=ids, ambiguous=False)
    return RootResolution(node=graph.nodes[0], candidates=ids, ambiguous=True)


def resolve_root(
    graph: ProtocolGraph, config: Optional[ProtocolConfig] = None
) -> Node:
    """Return the entry node of ``graph``.

    When the entry is ambiguous, returns the first node in insertion order
    and emits an ``AmbiguousRootWarning``, unless ``config.strict_root`` is
    set, in which case ``AmbiguousRootError`` is raised.

    Raises:
        EmptyGraphError: If the protocol has no nodes.
        AmbiguousRootError: Strict mode only.
    """
    resolution = find_root(graph)
    check_ambiguous(graph, resolution, config)
    return resolution.node


def check_ambiguous(
    graph: ProtocolGraph,
    resolution: RootResolution,
    config: Optional[ProtocolConfig] = None,
    stacklevel: int = 3,
) -> None:
    """Warn about (or, in strict mode, reject) a first-node fallback."""
    if not resolution.ambiguous:
        return
    if config is not None and config.strict_root:
        raise AmbiguousRootError(resolution.candidates)
    if resolution.candidates:
        reason = f"{len(resolution.candidates)} candidate entry nodes"
    else:
        reason = "no node without incoming edges"
    message = (
        f"Protocol '{graph.name}': {reason}, "
        f"falling back to first node '{resolution.node.id}'"
    )
    logger.warning(message)
    warnings.warn(message, AmbiguousRootWarning, stacklevel=stacklevel)
