"""In-memory graph store."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from triage_flow.core.errors import StoreError
from triage_flow.core.models import ProtocolGraph
from triage_flow.storage.base import BaseGraphStore, GraphSummary, _now

logger = logging.getLogger(__name__)


class MemoryGraphStore(BaseGraphStore):
    """Keeps snapshots in a dict keyed by id.

    Suitable for development, testing and demos. Snapshots are immutable,
    so they are stored and returned as-is. All data is lost when the
    process exits.
    """

    def __init__(self) -> None:
        self._graphs: Dict[str, Tuple[ProtocolGraph, datetime]] = {}

    def get(self, graph_id: str) -> ProtocolGraph:
        try:
            return self._graphs[graph_id][0]
        except KeyError:
            raise StoreError(f"Protocol '{graph_id}' not found") from None

    def list_summaries(self) -> List[GraphSummary]:
        return [
            GraphSummary(
                id=graph_id,
                name=graph.name,
                node_count=len(graph.nodes),
                created_at=created_at,
            )
            for graph_id, (graph, created_at) in self._graphs.items()
        ]

    def save(self, graph: ProtocolGraph, graph_id: Optional[str] = None) -> str:
        graph_id = graph_id or uuid.uuid4().hex
        existing = self._graphs.get(graph_id)
        created_at = existing[1] if existing else _now()
        self._graphs[graph_id] = (graph, created_at)
        logger.info("Stored protocol '%s' as %s", graph.name, graph_id)
        return graph_id

    def delete(self, graph_id: str) -> bool:
        return self._graphs.pop(graph_id, None) is not None
