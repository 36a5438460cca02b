"""Core data models for triage protocols."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple


class Outcome(str, Enum):
    """Classified result of a protocol, most urgent first."""

    RED = "RED"
    YELLOW = "YELLOW"
    GREEN = "GREEN"

    @property
    def urgency(self) -> int:
        """0 for the most urgent outcome, increasing as urgency drops."""
        return _URGENCY[self]

    @property
    def headline(self) -> str:
        return _HEADLINES[self]

    @property
    def default_label(self) -> str:
        return _DEFAULT_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> Optional["Outcome"]:
        """Coerce a stored priority into an ``Outcome``.

        ``None``, ``""`` and ``"NONE"`` mean "no priority" and return None.

        Raises:
            ValueError: If the value names no known outcome.
        """
        if value is None or isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid priority {value!r}")
        text = value.strip().upper()
        if text in ("", "NONE"):
            return None
        try:
            return cls(text)
        except ValueError:
            raise ValueError(
                f"Invalid priority {value!r}, expected one of RED, YELLOW, GREEN"
            ) from None


_URGENCY = {Outcome.RED: 0, Outcome.YELLOW: 1, Outcome.GREEN: 2}
_HEADLINES = {
    Outcome.RED: "EMERGENCY",
    Outcome.YELLOW: "MONITOR CLOSELY",
    Outcome.GREEN: "HOME CARE",
}
_DEFAULT_LABELS = {
    Outcome.RED: "Emergency",
    Outcome.YELLOW: "Monitor",
    Outcome.GREEN: "Home Care",
}


@dataclass(frozen=True)
class Node:
    """A question, or a terminal outcome when ``priority`` is set.

    Attributes:
        id: Identifier, unique within a protocol.
        label: Question text, or the decision shown for an outcome.
        priority: Outcome classification. ``None`` for question nodes.
    """

    id: str
    label: str = ""
    priority: Optional[Outcome] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Node id must not be empty")
        if not isinstance(self.label, str):
            raise ValueError(f"Node '{self.id}' label must be a string, got {self.label!r}")
        if self.priority is not None and not isinstance(self.priority, Outcome):
            object.__setattr__(self, "priority", Outcome.parse(self.priority))

    @property
    def is_outcome(self) -> bool:
        return self.priority is not None


@dataclass(frozen=True)
class Edge:
    """A labelled answer leading from one node to another.

    The label is display text only; the engine branches on which edge was
    chosen, never on what it says.
    """

    id: str
    source: str
    target: str
    label: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Edge id must not be empty")
        if not self.source:
            raise ValueError("Edge source must not be empty")
        if not self.target:
            raise ValueError("Edge target must not be empty")
        if not isinstance(self.label, str):
            raise ValueError(f"Edge '{self.id}' label must be a string, got {self.label!r}")


@dataclass(frozen=True)
class ProtocolGraph:
    """Immutable snapshot of a protocol.

    Nodes and edges keep insertion (authoring) order. Construction does not
    check structure; use ``validate_structure`` for that so malformed
    snapshots can still be loaded, reported on and navigated.
    """

    name: str = ""
    nodes: Tuple[Node, ...] = field(default_factory=tuple)
    edges: Tuple[Edge, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "edges", tuple(self.edges))

    @property
    def is_empty(self) -> bool:
        return not self.nodes
