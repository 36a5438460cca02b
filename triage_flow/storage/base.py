"""Abstract base class for protocol graph stores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from triage_flow.core.models import ProtocolGraph


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class GraphSummary:
    """Listing entry for a stored protocol.

    Attributes:
        id: Store-assigned identifier.
        name: Protocol name.
        node_count: Number of nodes in the snapshot.
        created_at: When the protocol was first saved (UTC).
    """

    id: str
    name: str
    node_count: int
    created_at: datetime


class BaseGraphStore(ABC):
    """Interface that all graph store backends must implement.

    Every method either succeeds or raises ``StoreError``. Callers in the
    core never retry.
    """

    @abstractmethod
    def get(self, graph_id: str) -> ProtocolGraph:
        """Return the snapshot stored under ``graph_id``.

        Raises:
            StoreError: If no such protocol exists or the backend fails.
        """

    @abstractmethod
    def list_summaries(self) -> List[GraphSummary]:
        """Return a summary of every stored protocol, oldest first."""

    @abstractmethod
    def save(self, graph: ProtocolGraph, graph_id: Optional[str] = None) -> str:
        """Persist a snapshot and return its id.

        With ``graph_id`` set, replaces that protocol (keeping its creation
        time) or creates it under that id. Without one, a new id is assigned.
        """

    @abstractmethod
    def delete(self, graph_id: str) -> bool:
        """Remove a protocol. Return True if it existed."""
