from triage_flow.storage.base import BaseGraphStore, GraphSummary
from triage_flow.storage.memory import MemoryGraphStore
from triage_flow.storage.sqlite import SQLiteGraphStore

__all__ = ["BaseGraphStore", "GraphSummary", "MemoryGraphStore", "SQLiteGraphStore"]
