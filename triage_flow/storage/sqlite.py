"""SQLite graph store: zero-config persistent protocol storage.

Uses Python's built-in ``sqlite3`` module, so no extra dependencies are
needed. Each protocol is stored as one row holding its JSON snapshot.

Usage::

    from triage_flow.storage import SQLiteGraphStore

    store = SQLiteGraphStore("triageflow.db")
    graph_id = store.save(graph)
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from triage_flow.core.errors import StoreError
from triage_flow.core.models import ProtocolGraph
from triage_flow.core.serialization import dumps_graph, loads_graph
from triage_flow.storage.base import BaseGraphStore, GraphSummary, _now

logger = logging.getLogger(__name__)

_ISO_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"


def _parse_timestamp(raw: str) -> datetime:
    """Parse an ISO timestamp string, ensuring the result is timezone-aware (UTC)."""
    dt = datetime.strptime(raw, _ISO_FORMAT)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class SQLiteGraphStore(BaseGraphStore):
    """Persistent graph store backed by a SQLite database file.

    Args:
        db_path: Path to the SQLite database file. Use ``":memory:"`` for
            an in-memory database (useful for testing).
    """

    def __init__(self, db_path: str = "triageflow.db") -> None:
        try:
            self._conn = sqlite3.connect(db_path)
            self._conn.row_factory = sqlite3.Row
            self._create_tables()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open protocol store '{db_path}': {exc}") from exc

    def _create_tables(self) -> None:
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS protocols (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                node_count INTEGER NOT NULL,
                snapshot TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_protocols_created ON protocols(created_at);
            """
        )
        self._conn.commit()

    def get(self, graph_id: str) -> ProtocolGraph:
        try:
            row = self._conn.execute(
                "SELECT snapshot FROM protocols WHERE id = ?", (graph_id,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot read protocol '{graph_id}': {exc}") from exc
        if row is None:
            raise StoreError(f"Protocol '{graph_id}' not found")
        try:
            return loads_graph(row["snapshot"])
        except ValueError as exc:
            raise StoreError(f"Protocol '{graph_id}' is corrupt: {exc}") from exc

    def list_summaries(self) -> List[GraphSummary]:
        try:
            rows = self._conn.execute(
                "SELECT id, name, node_count, created_at FROM protocols "
                "ORDER BY created_at, rowid"
            ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot list protocols: {exc}") from exc
        return [
            GraphSummary(
                id=row["id"],
                name=row["name"],
                node_count=row["node_count"],
                created_at=_parse_timestamp(row["created_at"]),
            )
            for row in rows
        ]

    def save(self, graph: ProtocolGraph, graph_id: Optional[str] = None) -> str:
        graph_id = graph_id or uuid.uuid4().hex
        now = _now().strftime(_ISO_FORMAT)
        try:
            self._conn.execute(
                """
                INSERT INTO protocols (id, name, node_count, snapshot, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    node_count = excluded.node_count,
                    snapshot = excluded.snapshot,
                    updated_at = excluded.updated_at
                """,
                (graph_id, graph.name, len(graph.nodes), dumps_graph(graph), now, now),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot save protocol '{graph.name}': {exc}") from exc
        logger.info("Stored protocol '%s' as %s", graph.name, graph_id)
        return graph_id

    def delete(self, graph_id: str) -> bool:
        try:
            cursor = self._conn.execute(
                "DELETE FROM protocols WHERE id = ?", (graph_id,)
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot delete protocol '{graph_id}': {exc}") from exc
        return cursor.rowcount > 0

    # ── Lifecycle ────────────────────────────────────────────────────

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
