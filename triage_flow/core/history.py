"""Visited-node stack used to step back through a traversal."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

from triage_flow.core.models import Node


@dataclass(frozen=True)
class HistoryStack:
    """Immutable stack of the nodes a session has left, oldest first.

    Every operation returns a new stack, so a session holding one can be
    copied, compared and serialized freely.
    """

    nodes: Tuple[Node, ...] = field(default_factory=tuple)

    def push(self, node: Node) -> "HistoryStack":
        return HistoryStack(self.nodes + (node,))

    def pop(self) -> Tuple[Optional[Node], "HistoryStack"]:
        """Return the most recent node and the stack without it.

        An empty stack yields ``(None, self)``.
        """
        if not self.nodes:
            return None, self
        return self.nodes[-1], HistoryStack(self.nodes[:-1])

    def peek(self) -> Optional[Node]:
        return self.nodes[-1] if self.nodes else None

    def peek_depth(self) -> int:
        return len(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)
